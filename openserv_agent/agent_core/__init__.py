"""Agent core.

- ``agent``: the ``Agent`` facade (registration, routes, lifecycle).
- ``capabilities``: capability definition, registry and dispatch pipeline.
- ``runtime``: the tool-calling conversation loop and the root action router.
- ``schemas``: platform action models and validation diagnostics.
- ``error_handler`` / ``errors``: centralized error reporting and the error hierarchy.
"""

from .agent import Agent
from .error_handler import ErrorContext, ErrorHandler

__all__ = ["Agent", "ErrorContext", "ErrorHandler"]
