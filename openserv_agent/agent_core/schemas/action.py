"""Inbound action payloads sent by the OpenServ platform.

The platform posts one of two action kinds to the agent's root route:

- ``do-task``: the agent was assigned a task inside a workspace.
- ``respond-chat-message``: a user wrote to the agent in the workspace chat.

Both carry the agent identity, the workspace, connected integrations and the
agent's memories. ``Action`` is a discriminated union on ``type``; use
``parse_action`` to validate a raw payload. Actions are built fresh per request
and never mutated afterwards.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import Field, StrictBool, TypeAdapter, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ActionValidationError
from .base import BaseSchema
from .diagnostics import issues_from_pydantic


class AgentKind(str, Enum):
    external = "external"
    eliza = "eliza"
    openserv = "openserv"


class TaskStatus(str, Enum):
    to_do = "to-do"
    in_progress = "in-progress"
    human_assistance_required = "human-assistance-required"
    error = "error"
    done = "done"
    cancelled = "cancelled"


class AssistanceRequestType(str, Enum):
    text = "text"
    project_manager_plan_review = "project-manager-plan-review"


class AssistanceRequestStatus(str, Enum):
    pending = "pending"
    responded = "responded"


class AgentIdentity(BaseSchema):
    """The agent instance the action is addressed to.

    ``system_prompt`` is only meaningful for agents built with the platform's
    agent builder: it is required when ``is_built_by_agent_builder`` is true and
    discarded otherwise. The flag must be a JSON boolean; strings such as
    ``"true"`` are rejected.
    """

    id: int
    name: str
    kind: AgentKind
    is_built_by_agent_builder: StrictBool = Field(alias="isBuiltByAgentBuilder")
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")

    @model_validator(mode="before")
    @classmethod
    def _system_prompt_follows_builder_flag(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        built = data.get("isBuiltByAgentBuilder", data.get("is_built_by_agent_builder"))
        if built is True:
            prompt = data.get("systemPrompt", data.get("system_prompt"))
            if not isinstance(prompt, str):
                raise ValueError("systemPrompt is required when isBuiltByAgentBuilder is true")
        elif built is False:
            data = {k: v for k, v in data.items() if k not in ("systemPrompt", "system_prompt")}
        return data


class Attachment(BaseSchema):
    id: int
    path: str
    full_url: str = Field(alias="fullUrl")
    summary: Optional[str] = None


class DependencyTask(BaseSchema):
    id: int
    description: str
    output: Optional[str] = None
    status: TaskStatus
    attachments: List[Attachment]


class AssistanceRequest(BaseSchema):
    id: int
    type: AssistanceRequestType
    question: str
    status: AssistanceRequestStatus
    agent_dump: Any = Field(default=None, alias="agentDump")
    human_response: Optional[str] = Field(default=None, alias="humanResponse")


class TaskContext(BaseSchema):
    """The task the agent has to work on."""

    id: int
    description: str = Field(description="Short description of the task, usually 'Do [something]'")
    body: Optional[str] = None
    expected_output: Optional[str] = Field(default=None, alias="expectedOutput")
    input: Optional[str] = Field(default=None, description="Typically the output of another task")
    dependencies: List[DependencyTask]
    human_assistance_requests: List[AssistanceRequest] = Field(alias="humanAssistanceRequests")


class WorkspaceAgent(BaseSchema):
    id: int
    name: str
    capabilities_description: str


class WorkspaceContext(BaseSchema):
    id: int
    goal: str
    bucket_folder: str
    agents: List[WorkspaceAgent]


class OpenAPIInfo(BaseSchema):
    title: str
    description: str


class Integration(BaseSchema):
    id: int
    connection_id: str
    provider_config_key: str
    provider: str
    created: str
    metadata: Optional[Dict[str, Any]] = None
    scopes: Optional[List[str]] = None
    open_api: OpenAPIInfo = Field(alias="openAPI")


class ChatIntegration(Integration):
    """Integration as sent with chat actions, where ``created`` may be omitted."""

    created: Optional[str] = None  # type: ignore[assignment]


class Memory(BaseSchema):
    id: int
    memory: str
    created_at: datetime = Field(alias="createdAt")


class ChatAuthor(str, Enum):
    agent = "agent"
    user = "user"


class ChatTurn(BaseSchema):
    id: int
    author: ChatAuthor
    message: str
    created_at: datetime = Field(alias="createdAt")


class DoTaskAction(BaseSchema):
    type: Literal["do-task"]
    me: AgentIdentity
    task: TaskContext
    workspace: WorkspaceContext
    integrations: List[Integration]
    memories: List[Memory]


class RespondChatMessageAction(BaseSchema):
    type: Literal["respond-chat-message"]
    me: AgentIdentity
    messages: List[ChatTurn]
    workspace: WorkspaceContext
    integrations: List[ChatIntegration]
    memories: List[Memory]


Action = Annotated[Union[DoTaskAction, RespondChatMessageAction], Field(discriminator="type")]

ACTION_TYPES = ("do-task", "respond-chat-message")

_action_adapter: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(payload: Any) -> Union[DoTaskAction, RespondChatMessageAction]:
    """
    Validate a raw payload against the action union.

    Args:
        payload: Decoded JSON body (or an already-built action instance).

    Returns:
        The validated ``DoTaskAction`` or ``RespondChatMessageAction``.

    Raises:
        ActionValidationError: With per-field issues; unknown ``type`` values
            are reported with the list of valid tags.
    """
    if isinstance(payload, (DoTaskAction, RespondChatMessageAction)):
        return payload
    try:
        return _action_adapter.validate_python(payload)
    except PydanticValidationError as e:
        # Tagged-union locations start with the tag itself; report paths relative to the action
        raise ActionValidationError(issues_from_pydantic(e, drop_leading=ACTION_TYPES)) from e
