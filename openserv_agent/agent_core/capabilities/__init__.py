"""Capability definition, registry and dispatch pipeline.

A *capability* is a named, schema-validated tool the agent exposes.

- ``Capability``: immutable tool definition (name, description, pydantic
  input schema, run function).
- ``CapabilityRegistry``: ordered name -> capability collection.
- ``CapabilityContext``: what ``run`` receives (validated args, optional
  action, messages, agent handle).
- ``ToolDispatcher``: validation and execution of a named capability.
"""

from .base import Capability, CapabilityContext
from .dispatch import ToolDispatcher
from .registry import CapabilityRegistry

__all__ = [
    "Capability",
    "CapabilityContext",
    "CapabilityRegistry",
    "ToolDispatcher",
]
