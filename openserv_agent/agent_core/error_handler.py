"""Centralized error reporting.

Every failure that crosses a component boundary is reported here exactly once,
tagged with the call site, before the caller either contains it or re-raises
it. Host applications plug their own alerting in through ``on_error``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Optional

from openserv_agent.core.logging_config import get_logger

logger = get_logger(__name__)

ErrorCallback = Callable[[Exception, Dict[str, Any]], None]

_REPORTED_ATTR = "_openserv_reported"


class ErrorContext(str, Enum):
    process = "process"
    do_task = "do_task"
    respond_to_chat = "respond_to_chat"
    tool_execution = "tool_execution"
    handle_tool_route = "handle_tool_route"
    handle_root_route = "handle_root_route"


class ErrorHandler:
    """
    Error reporting strategy resolved once at agent construction.

    Args:
        on_error: Optional callback receiving ``(error, context)`` where
            ``context`` is a dict with a ``"context"`` tag plus call-site
            details. Defaults to logging the error.
    """

    def __init__(self, on_error: Optional[ErrorCallback] = None) -> None:
        self._callback: ErrorCallback = on_error or self._log_error

    def notify(self, error: Exception, context: ErrorContext, **details: Any) -> None:
        """
        Report ``error`` for the given call site.

        An error already reported by an inner boundary (``process`` called from
        a task handler or a capability) is not reported again by the outer one.
        """
        if getattr(error, _REPORTED_ATTR, False):
            return
        setattr(error, _REPORTED_ATTR, True)
        self._callback(error, {"context": context.value, **details})

    @staticmethod
    def _log_error(error: Exception, context: Dict[str, Any]) -> None:
        logger.error(
            f"Error in agent operation [{context.get('context')}]: {error}",
            exc_info=(type(error), error, error.__traceback__),
            extra={"error_type": type(error).__name__, "error_context": context},
        )
