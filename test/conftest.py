from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai.types.chat import ChatCompletion
from pydantic import BaseModel

from openserv_agent.agent_core.agent import Agent
from openserv_agent.server.core.config import Settings


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://test",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


class EchoArgs(BaseModel):
    input: str


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        OPENSERV_API_KEY="test-openserv-key",
        OPENSERV_API_URL="http://mock-platform",
        OPENSERV_RUNTIME_URL="http://mock-runtime",
        OPENAI_API_KEY="test-openai-key",
        OPENAI_MODEL="gpt-4o",
        HOST="127.0.0.1",
        PORT="7378",
        LOG_LEVEL="info",
    )


@pytest.fixture
def openai_client() -> MagicMock:
    """Chat completion client double; set ``chat.completions.create.side_effect`` per test."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock()
    return client


@pytest.fixture
def make_completion() -> Callable[..., ChatCompletion]:
    """Build real ``ChatCompletion`` objects for the client double to return."""

    def _make(content: Optional[str] = None, tool_calls: Optional[List[Dict[str, Any]]] = None) -> ChatCompletion:
        message: Dict[str, Any] = {"role": "assistant", "content": content}
        if tool_calls:
            message["tool_calls"] = [
                {
                    "id": call["id"],
                    "type": "function",
                    "function": {"name": call["name"], "arguments": call.get("arguments", "{}")},
                }
                for call in tool_calls
            ]
        return ChatCompletion.model_validate(
            {
                "id": "chatcmpl-test",
                "object": "chat.completion",
                "created": 1700000000,
                "model": "gpt-4o",
                "choices": [
                    {
                        "index": 0,
                        "finish_reason": "tool_calls" if tool_calls else "stop",
                        "message": message,
                    }
                ],
            }
        )

    return _make


@pytest.fixture
def errors_seen() -> List[Dict[str, Any]]:
    return []


@pytest.fixture
def agent(settings: Settings, openai_client: MagicMock, errors_seen: List[Dict[str, Any]]) -> Agent:
    """An agent with an ``echo`` tool whose errors are collected in ``errors_seen``."""

    def on_error(error: Exception, context: Dict[str, Any]) -> None:
        errors_seen.append({"error": error, **context})

    a = Agent(
        system_prompt="You are a test agent.",
        settings=settings,
        openai_client=openai_client,
        on_error=on_error,
    )
    a.add_capability(
        name="echo",
        description="Echo the input back",
        schema=EchoArgs,
        run=lambda ctx: ctx.args.input,
    )
    return a


@pytest.fixture
def do_task_payload() -> Dict[str, Any]:
    return {
        "type": "do-task",
        "me": {"id": 1, "name": "test-agent", "kind": "external", "isBuiltByAgentBuilder": False},
        "task": {
            "id": 10,
            "description": "Summarise the report",
            "body": "Use the attached file",
            "expectedOutput": "A short summary",
            "input": "report.pdf",
            "dependencies": [],
            "humanAssistanceRequests": [],
        },
        "workspace": {
            "id": 100,
            "goal": "Quarterly review",
            "bucket_folder": "ws-100",
            "agents": [{"id": 1, "name": "test-agent", "capabilities_description": "echo"}],
        },
        "integrations": [],
        "memories": [],
    }


@pytest.fixture
def chat_payload() -> Dict[str, Any]:
    return {
        "type": "respond-chat-message",
        "me": {"id": 1, "name": "test-agent", "kind": "external", "isBuiltByAgentBuilder": False},
        "messages": [
            {"author": "user", "createdAt": "2024-01-01T00:00:00Z", "id": 1, "message": "Hi"},
            {"author": "agent", "createdAt": "2024-01-01T00:00:05Z", "id": 2, "message": "Hello!"},
            {"author": "user", "createdAt": "2024-01-01T00:00:10Z", "id": 3, "message": "Echo this"},
        ],
        "workspace": {
            "id": 100,
            "goal": "Quarterly review",
            "bucket_folder": "ws-100",
            "agents": [],
        },
        "integrations": [],
        "memories": [],
    }
