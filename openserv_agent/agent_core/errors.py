"""Error types for the agent core.

Defines the exception hierarchy raised by the capability registry, the tool
dispatch pipeline, the conversation loop and the agent facade.

Every failure that crosses a component boundary is reported once through the
centralized ``ErrorHandler`` before it is either contained or re-raised; the
types below let callers tell client-input problems (validation, unknown tool)
apart from wiring bugs and collaborator failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .schemas.diagnostics import FieldIssue


class AgentError(Exception):
    """Base error for all agent exceptions."""


class ConfigurationError(AgentError):
    """Raised when required configuration (credentials, env values) is missing or invalid."""


class ValidationError(AgentError):
    """Raised when input fails a declared shape.

    Args:
        message: Human-readable summary of the failure.
        issues: Per-field diagnostics (path, expected, received).
    """

    def __init__(self, message: str, issues: Optional[List["FieldIssue"]] = None) -> None:
        super().__init__(message)
        self.issues: List["FieldIssue"] = list(issues or [])


class CapabilityValidationError(ValidationError):
    """Raised when tool arguments do not match a capability's input shape."""

    def __init__(self, tool_name: str, issues: List["FieldIssue"]) -> None:
        super().__init__("\n".join(issue.message for issue in issues), issues)
        self.tool_name = tool_name


class ActionValidationError(ValidationError):
    """Raised when an inbound action payload does not match the action union."""

    def __init__(self, issues: List["FieldIssue"]) -> None:
        super().__init__("Invalid action payload:\n" + "\n".join(issue.message for issue in issues), issues)


class BadRequestError(AgentError):
    """Client-side request problem; transports may map it to HTTP 400."""

    status_code = 400


class ToolNotFoundError(BadRequestError):
    """Raised when no capability is registered under the requested name."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f'Tool "{tool_name}" not found')
        self.tool_name = tool_name


class DuplicateCapabilityError(AgentError):
    """Raised when registering a capability whose name is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Tool with name "{name}" already exists')
        self.name = name


class RegistrySealedError(AgentError):
    """Raised when registering a capability after the agent started serving."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Cannot register tool "{name}": the agent is already serving requests')
        self.name = name


class CollaboratorError(AgentError):
    """Raised when an external collaborator (chat completion, platform, runtime) fails."""


class EmptyResponseError(CollaboratorError):
    """Raised when the chat completion response carries no choice or message."""

    def __init__(self) -> None:
        super().__init__("No response from OpenAI")


class MaxIterationsExceededError(AgentError):
    """Raised when the conversation loop runs out of iterations while tools are still requested."""

    def __init__(self, max_iterations: int) -> None:
        super().__init__(f"Max iterations ({max_iterations}) reached without completion")
        self.max_iterations = max_iterations


class ServerStartError(AgentError):
    """Raised when the HTTP listener cannot be bound."""
