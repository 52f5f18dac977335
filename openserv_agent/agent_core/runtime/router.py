"""Root action routing.

The platform posts actions to the agent's root route and expects an immediate
acknowledgment. ``RootActionRouter.route`` validates the payload, then starts
the matching handler as a background task:

- ``do-task`` -> ``do_task(agent, action)``
- ``respond-chat-message`` -> ``respond_to_chat(agent, action)``

Handlers are plain async callables injected at agent construction. The
defaults forward the conversation to the OpenServ runtime; specialised agents
replace them to handle actions directly. Handler failures are reported once
(``do_task`` / ``respond_to_chat``) and never reach the transport.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from openserv_agent.core.logging_config import get_logger

from ..error_handler import ErrorContext, ErrorHandler
from ..errors import ActionValidationError
from ..schemas.action import ChatAuthor, DoTaskAction, RespondChatMessageAction, parse_action

logger = get_logger(__name__)

TaskHandler = Callable[[Any, DoTaskAction], Awaitable[None]]
ChatHandler = Callable[[Any, RespondChatMessageAction], Awaitable[None]]


def task_messages(system_prompt: str, action: DoTaskAction) -> List[Dict[str, Any]]:
    """System prompt, then the task description as a user turn when present."""
    messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    if action.task.description:
        messages.append({"role": "user", "content": action.task.description})
    return messages


def chat_messages(system_prompt: str, action: RespondChatMessageAction) -> List[Dict[str, Any]]:
    """System prompt, then every chat turn mapped to user/assistant by author."""
    messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    for turn in action.messages:
        role = "user" if turn.author == ChatAuthor.user else "assistant"
        messages.append({"role": role, "content": turn.message})
    return messages


async def default_do_task(agent: Any, action: DoTaskAction) -> None:
    """Forward the task to the runtime's ``/execute`` endpoint."""
    await agent.runtime.execute(
        tools=agent.registry.runtime_tools(),
        messages=task_messages(agent.system_prompt, action),
        action=action,
    )


async def default_respond_to_chat(agent: Any, action: RespondChatMessageAction) -> None:
    """Forward the chat to the runtime's ``/chat`` endpoint."""
    await agent.runtime.chat(
        tools=agent.registry.runtime_tools(),
        messages=chat_messages(agent.system_prompt, action),
        action=action,
    )


class RootActionRouter:
    """
    Validates inbound actions and starts the matching handler.

    Args:
        agent: Passed as the first argument to every handler.
        errors: Centralized error handler.
        do_task: Handler for ``do-task`` actions (defaults to runtime forwarding).
        respond_to_chat: Handler for ``respond-chat-message`` actions (defaults to runtime forwarding).
    """

    def __init__(
        self,
        agent: Any,
        errors: ErrorHandler,
        do_task: Optional[TaskHandler] = None,
        respond_to_chat: Optional[ChatHandler] = None,
    ) -> None:
        self.agent = agent
        self.errors = errors
        self.do_task: TaskHandler = do_task or default_do_task
        self.respond_to_chat: ChatHandler = respond_to_chat or default_respond_to_chat
        self._pending: Set[asyncio.Task] = set()

    async def route(self, body: Any) -> None:
        """
        Validate ``body`` and start the handler without awaiting it.

        Invalid payloads are reported as ``handle_root_route``; nothing is raised.
        """
        try:
            action = parse_action(body)
        except ActionValidationError as e:
            self.errors.notify(e, ErrorContext.handle_root_route, request={"body": body})
            return

        if isinstance(action, DoTaskAction):
            logger.info(f"Received task {action.task.id} in workspace {action.workspace.id}")
            self._spawn(self.do_task, action, ErrorContext.do_task)
        else:
            logger.info(f"Received chat message in workspace {action.workspace.id}")
            self._spawn(self.respond_to_chat, action, ErrorContext.respond_to_chat)

    def _spawn(
        self,
        handler: Callable[[Any, Any], Awaitable[None]],
        action: Union[DoTaskAction, RespondChatMessageAction],
        context: ErrorContext,
    ) -> None:
        task = asyncio.create_task(self._run(handler, action, context))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _run(
        self,
        handler: Callable[[Any, Any], Awaitable[None]],
        action: Union[DoTaskAction, RespondChatMessageAction],
        context: ErrorContext,
    ) -> None:
        try:
            await handler(self.agent, action)
        except Exception as e:
            self.errors.notify(e, context, action=action)

    @property
    def pending(self) -> int:
        """Number of handlers still running."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every handler started so far to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
