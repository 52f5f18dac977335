"""
Conversation Loop
=================

Drives a bounded tool-calling exchange with the chat-completion backend.

Loop:
    messages
       │
       ▼
    chat completion (with every capability as a function tool)
       │
    ┌─ tool calls requested? ─┐
    No                        Yes
    │                         │
    ▼                         ▼
    return completion    run all tool calls concurrently
                              │
                              ▼
                         append assistant message + one tool message per call
                              │
                              └── next iteration (at most MAX_ITERATIONS)

A failing tool call never aborts its siblings: its tool message carries
``{"error": message}`` and the failure is reported as ``tool_execution``.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Sequence

import openai

from openserv_agent.core.logging_config import get_logger

from ..capabilities.dispatch import ToolDispatcher
from ..capabilities.registry import CapabilityRegistry
from ..error_handler import ErrorContext, ErrorHandler
from ..errors import AgentError, CollaboratorError, EmptyResponseError, MaxIterationsExceededError

logger = get_logger(__name__)


def to_message_param(message: Any) -> Dict[str, Any]:
    """Convert an SDK message object (or a plain mapping) into a request message dict."""
    if hasattr(message, "model_dump"):
        return message.model_dump(exclude_none=True)
    return dict(message)


class ConversationLoop:
    """
    Tool-calling loop over an OpenAI-compatible chat completion client.

    Args:
        registry: Capabilities offered to the model.
        dispatcher: Executes the tool calls the model requests.
        errors: Centralized error handler.
        client_provider: Returns the chat completion client; raises
            ``ConfigurationError`` when no credential is configured.
        model: Chat completion model name.
    """

    # Maximum completion requests per call to prevent unbounded model/tool ping-pong
    MAX_ITERATIONS = 10

    def __init__(
        self,
        registry: CapabilityRegistry,
        dispatcher: ToolDispatcher,
        errors: ErrorHandler,
        client_provider: Callable[[], Any],
        model: str = "gpt-4o",
    ) -> None:
        self.registry = registry
        self.dispatcher = dispatcher
        self.errors = errors
        self.client_provider = client_provider
        self.model = model

    async def process(self, messages: Sequence[Any], *, action: Any = None) -> Any:
        """
        Run the loop until the model answers without tool calls.

        Args:
            messages: Initial conversation (dicts or SDK message objects).
            action: Optional platform action forwarded to every tool call.

        Returns:
            The final ``ChatCompletion``.

        Raises:
            ConfigurationError: No chat completion credential configured.
            EmptyResponseError: A completion carried no choice or message.
            CollaboratorError: The chat completion request failed.
            MaxIterationsExceededError: Tools were still requested after
                ``MAX_ITERATIONS`` completions.
        """
        try:
            client = self.client_provider()
            current: List[Dict[str, Any]] = [to_message_param(m) for m in messages]

            for iteration in range(self.MAX_ITERATIONS):
                completion = await self._complete(client, current)

                if not completion.choices or completion.choices[0].message is None:
                    raise EmptyResponseError()
                message = completion.choices[0].message

                if not message.tool_calls:
                    logger.debug(f"Conversation finished after {iteration + 1} completion(s)")
                    return completion

                logger.debug(f"Tool iteration {iteration + 1}: {len(message.tool_calls)} call(s)")
                snapshot = list(current)
                results = await asyncio.gather(
                    *(self._run_tool_call(call, snapshot, action) for call in message.tool_calls)
                )

                current.append(to_message_param(message))
                current.extend(results)

            raise MaxIterationsExceededError(self.MAX_ITERATIONS)
        except Exception as e:
            self.errors.notify(e, ErrorContext.process)
            raise

    async def _complete(self, client: Any, messages: List[Dict[str, Any]]) -> Any:
        request: Dict[str, Any] = {"model": self.model, "messages": messages}
        if len(self.registry):
            request["tools"] = self.registry.openai_tools()
        try:
            return await client.chat.completions.create(**request)
        except openai.OpenAIError as e:
            raise CollaboratorError(f"Chat completion request failed: {e}") from e

    async def _run_tool_call(self, call: Any, messages: List[Dict[str, Any]], action: Any) -> Dict[str, Any]:
        """Execute one tool call; failures become an error payload in the tool message."""
        function = getattr(call, "function", None)
        try:
            if function is None:
                raise AgentError("Tool call function is missing")
            args: Optional[Any] = json.loads(function.arguments or "{}")
            result = await self.dispatcher.invoke(function.name, args, action=action, messages=messages)
            content = json.dumps(result)
        except Exception as e:
            self.errors.notify(
                e,
                ErrorContext.tool_execution,
                tool_call_id=call.id,
                tool_name=getattr(function, "name", None),
            )
            content = json.dumps({"error": str(e)})
        return {"role": "tool", "tool_call_id": call.id, "content": content}
