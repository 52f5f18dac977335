"""OpenServ Agent.

This package lets a developer stand up an autonomous agent for the OpenServ
platform: an HTTP service that registers named, schema-validated tools
(*capabilities*), runs them on request, and drives a tool-calling
conversation with an OpenAI chat-completion model.

Core subpackages
----------------

- ``openserv_agent.agent_core``:

  - The ``Agent`` facade and its HTTP lifecycle.
  - Capabilities, the capability registry and the tool dispatch pipeline.
  - The conversation loop and the root action router.
  - Platform action models (``do-task``, ``respond-chat-message``).

- ``openserv_agent.platform_api``: async HTTP clients for the OpenServ
  platform and runtime APIs.

- ``openserv_agent.server``: the FastAPI application (health, root action
  route, tool route) and environment-backed settings.

Typical workflow
----------------

1. Create an ``Agent`` with a system prompt.
2. Register capabilities with ``add_capability``.
3. ``await agent.start()``; the platform posts actions to ``/`` and tool
   calls to ``/tools/{name}``.
4. Call ``agent.process(messages)`` to run the model with the registered
   tools directly.
"""

from .agent_core.agent import Agent
from .agent_core.capabilities import Capability, CapabilityContext
from .agent_core.errors import (
    ActionValidationError,
    AgentError,
    BadRequestError,
    CapabilityValidationError,
    ConfigurationError,
    ToolNotFoundError,
)
from .agent_core.schemas import DoTaskAction, RespondChatMessageAction, TaskStatus, parse_action

__version__ = "1.0.0"

__all__ = [
    "ActionValidationError",
    "Agent",
    "AgentError",
    "BadRequestError",
    "Capability",
    "CapabilityContext",
    "CapabilityValidationError",
    "ConfigurationError",
    "DoTaskAction",
    "RespondChatMessageAction",
    "TaskStatus",
    "ToolNotFoundError",
    "parse_action",
]
