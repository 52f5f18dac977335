from __future__ import annotations

"""Tool dispatch pipeline.

Resolves a tool name through the ``CapabilityRegistry``, validates raw
arguments against the capability's input shape and runs it with a
``CapabilityContext``.

``invoke`` is the bare pipeline and reports nothing; callers that own an
error boundary (the conversation loop) report failures themselves.
``dispatch`` is the public entry point behind ``POST /tools/{name}``: it
reports failures as ``handle_tool_route`` and re-raises them.
"""

from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from openserv_agent.core.logging_config import get_logger

from ..error_handler import ErrorContext, ErrorHandler
from ..errors import BadRequestError, CapabilityValidationError, ToolNotFoundError
from ..schemas.action import parse_action
from ..schemas.diagnostics import issues_from_pydantic
from .base import Capability, CapabilityContext
from .registry import CapabilityRegistry

logger = get_logger(__name__)


class ToolDispatcher:
    """
    Validates and executes named capabilities.

    Args:
        registry: Where tool names are resolved.
        errors: Centralized error handler.
        agent: Handle exposed to capabilities as ``ctx.agent``.
    """

    def __init__(self, registry: CapabilityRegistry, errors: ErrorHandler, agent: Any = None) -> None:
        self.registry = registry
        self.errors = errors
        self.agent = agent

    def resolve(self, name: str) -> Capability:
        """Return the capability registered as ``name`` or raise ``ToolNotFoundError``."""
        cap = self.registry.find(name)
        if cap is None:
            raise ToolNotFoundError(name)
        return cap

    def validate(self, cap: Capability, raw_args: Any) -> Any:
        """Validate ``raw_args`` against the capability's shape, keeping per-field diagnostics."""
        try:
            return cap.schema.model_validate(raw_args)
        except PydanticValidationError as e:
            raise CapabilityValidationError(cap.name, issues_from_pydantic(e)) from e

    async def invoke(
        self,
        name: str,
        raw_args: Any,
        *,
        action: Any = None,
        messages: Optional[List[Dict[str, Any]]] = None,
    ) -> str:
        """
        Resolve, validate and run a capability.

        ``run`` is never called when validation fails.

        Raises:
            ToolNotFoundError: Unknown tool name.
            CapabilityValidationError: Arguments do not match the input shape.
            ActionValidationError: ``action`` was given as a payload that is not a valid action.
        """
        cap = self.resolve(name)
        args = self.validate(cap, raw_args)
        ctx = CapabilityContext(
            args=args,
            action=parse_action(action) if action is not None else None,
            messages=list(messages or []),
            agent=self.agent,
        )
        logger.debug(f"Executing tool: {name}")
        return await cap.execute(ctx)

    async def dispatch(self, name: str, body: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
        """
        Handle a tool route request.

        Args:
            name: Tool name from the route.
            body: Request body ``{"args": ..., "action": ..., "messages": [...]}``.

        Returns:
            ``{"result": <string returned by the capability>}``.

        Raises:
            BadRequestError: Missing or unknown tool name.
            CapabilityValidationError: Invalid arguments.
            Exception: Whatever the capability raised. Every failure is reported
                as ``handle_tool_route`` before it propagates.
        """
        body = body or {}
        try:
            if not name:
                raise BadRequestError("Tool name is required")
            result = await self.invoke(
                name,
                body.get("args"),
                action=body.get("action"),
                messages=body.get("messages"),
            )
            return {"result": result}
        except Exception as e:
            self.errors.notify(e, ErrorContext.handle_tool_route, tool_name=name, request=dict(body))
            raise
