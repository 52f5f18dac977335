from __future__ import annotations

"""Capability registry.

The registry holds the agent's capabilities in registration order, keyed by
unique name.

The dispatch pipeline and the conversation loop resolve tool names through
it, and it renders the capabilities as OpenAI function tools and as runtime
tool descriptors.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional

from ..errors import DuplicateCapabilityError, RegistrySealedError
from .base import Capability


class CapabilityRegistry:
    """
    Ordered collection of capabilities with unique names.

    Notes:
        - ``register`` rejects duplicate names before mutating anything; the
          first registration stays in place.
        - ``register_many`` registers in order and stops at the first
          duplicate; entries registered before it stay registered.
        - ``find`` returns ``None`` for unknown names and never raises.
        - Once ``seal`` is called (the agent started serving), further
          registrations raise ``RegistrySealedError``.
    """

    def __init__(self) -> None:
        """Initialize an empty capability registry."""
        self._caps: List[Capability] = []
        self._sealed = False

    def register(self, cap: Capability) -> "CapabilityRegistry":
        """
        Register a capability.

        Args:
            cap: The capability to add.

        Returns:
            The registry, for chaining.

        Raises:
            DuplicateCapabilityError: If a capability with the same name exists.
            RegistrySealedError: If the registry was sealed.
        """
        if self._sealed:
            raise RegistrySealedError(cap.name)
        if self.find(cap.name) is not None:
            raise DuplicateCapabilityError(cap.name)
        self._caps.append(cap)
        return self

    def register_many(self, caps: Iterable[Capability]) -> "CapabilityRegistry":
        """
        Register several capabilities in order.

        Raises:
            DuplicateCapabilityError: On the first duplicate encountered.
        """
        for cap in caps:
            self.register(cap)
        return self

    def find(self, name: str) -> Optional[Capability]:
        """
        Look up a capability by name.

        Args:
            name: The tool name.

        Returns:
            The capability, or ``None`` if no capability has that name.
        """
        for cap in self._caps:
            if cap.name == name:
                return cap
        return None

    def seal(self) -> None:
        """Reject any further registration."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def names(self) -> List[str]:
        return [cap.name for cap in self._caps]

    def openai_tools(self) -> List[Dict[str, Any]]:
        """Render every capability as an OpenAI function tool."""
        return [
            {
                "type": "function",
                "function": {
                    "name": cap.name,
                    "description": cap.description,
                    "parameters": cap.json_schema(),
                },
            }
            for cap in self._caps
        ]

    def runtime_tools(self) -> List[Dict[str, Any]]:
        """Render every capability as a runtime tool descriptor."""
        return [{"name": cap.name, "description": cap.description, "schema": cap.json_schema()} for cap in self._caps]

    def __iter__(self) -> Iterator[Capability]:
        return iter(list(self._caps))

    def __len__(self) -> int:
        return len(self._caps)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.find(name) is not None
