from __future__ import annotations

"""Capability definition and execution context.

A capability is a named, schema-validated unit of work the agent exposes as a
tool, both over HTTP (``POST /tools/{name}``) and to the chat-completion model
inside the conversation loop.

Capabilities should:

- declare their input as a pydantic model (``schema``); ``run`` only ever sees
  a validated instance of it,
- return a string,
- reach the platform (chat messages, task updates, files) through
  ``ctx.agent`` rather than through globals.
"""

import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Type, Union

from pydantic import BaseModel

if TYPE_CHECKING:
    from ..schemas.action import DoTaskAction, RespondChatMessageAction


@dataclass(frozen=True)
class CapabilityContext:
    """Invocation context passed to ``Capability.run``.

    Attributes
    ----------
    args:
        The validated arguments (an instance of the capability's ``schema``).
    action:
        The platform action the call originates from, when there is one.
    messages:
        The conversation so far, when called from the conversation loop or
        supplied by an HTTP caller.
    agent:
        Handle on the owning ``Agent``; exposes the platform pass-through
        operations (``send_chat_message``, ``complete_task``, ...).
    """

    args: Any
    action: Optional[Union["DoTaskAction", "RespondChatMessageAction"]] = None
    messages: List[Dict[str, Any]] = field(default_factory=list)
    agent: Any = None


CapabilityRun = Callable[[CapabilityContext], Union[str, Awaitable[str]]]


@dataclass(frozen=True)
class Capability:
    """
    An immutable named tool.

    Attributes:
        name: Unique, non-empty tool name.
        description: What the tool does; shown to the model.
        schema: Pydantic model describing and validating the tool input.
        run: Sync or async callable receiving a ``CapabilityContext``.
    """

    name: str
    description: str
    schema: Type[BaseModel]
    run: CapabilityRun

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Capability name must be a non-empty string")
        if not (isinstance(self.schema, type) and issubclass(self.schema, BaseModel)):
            raise TypeError(f'Capability "{self.name}" schema must be a pydantic BaseModel subclass')

    def json_schema(self) -> Dict[str, Any]:
        """JSON schema of the input shape."""
        return self.schema.model_json_schema()

    async def execute(self, ctx: CapabilityContext) -> str:
        """
        Run the capability, awaiting the result when ``run`` is async.

        Raises:
            TypeError: If ``run`` returned something other than a string.
        """
        result = self.run(ctx)
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, str):
            raise TypeError(f'Capability "{self.name}" must return a string, got {type(result).__name__}')
        return result
