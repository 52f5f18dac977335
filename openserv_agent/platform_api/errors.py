"""Error types specific to the OpenServ platform and runtime API layer.

Purpose:
- Provide typed exceptions thrown by ``PlatformApiClient`` and ``RuntimeApiClient``.
- Expose HTTP-oriented context (status code, error body) for diagnosis.

Usage:
- Catch ``PlatformApiError`` and inspect ``status_code`` or ``details``.
"""

from __future__ import annotations

from typing import Any, Optional

from openserv_agent.agent_core.errors import CollaboratorError


class PlatformApiError(CollaboratorError):
    """Raised when a platform or runtime request fails.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code, when the server answered.
        details: Response body or transport error detail.
    """
    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details
