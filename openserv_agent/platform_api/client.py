from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from openserv_agent.agent_core.schemas.action import TaskStatus

from .errors import PlatformApiError

API_KEY_HEADER = "x-openserv-key"


class _OpenServClient:
    """Shared plumbing for the OpenServ HTTP clients: auth header, error mapping, JSON decoding."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    def _headers(self, *, json_body: bool = True) -> Dict[str, str]:
        headers = {API_KEY_HEADER: self.api_key}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Send a request and return the decoded JSON body (``None`` for empty bodies).

        Raises:
            PlatformApiError: On transport failures and non-2xx responses.
        """
        url = f"{self.base_url}{path}"
        headers = kwargs.pop("headers", None) or self._headers(json_body="files" not in kwargs)
        self._logger.debug("%s: %s %s", type(self).__name__, method, url)
        try:
            r = await self._client.request(method, url, headers=headers, **kwargs)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PlatformApiError(
                f"{method} {path} failed: {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise PlatformApiError(f"{method} {path} failed: {e}", details=str(e)) from e
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError:
            return r.text

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, json: Optional[Any] = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Optional[Any] = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def aclose(self) -> None:
        await self._client.aclose()


class PlatformApiClient(_OpenServClient):
    """
    Thin async HTTP client for the OpenServ platform API.

    Each method maps 1:1 onto a workspace/task endpoint and returns the
    decoded JSON response. Capabilities reach these through the agent
    facade to report progress back to the platform.
    """

    async def get_files(self, *, workspace_id: int) -> Any:
        return await self.get(f"/workspaces/{workspace_id}/files")

    async def upload_file(
        self,
        *,
        workspace_id: int,
        path: str,
        file: Union[bytes, str],
        task_ids: Optional[Union[List[int], int]] = None,
        skip_summarizer: Optional[bool] = None,
    ) -> Any:
        """Upload a file (multipart) to the workspace; text content is sent as ``text/plain``."""
        data: Dict[str, str] = {"path": path}
        if task_ids:
            data["taskIds"] = json.dumps(task_ids)
        if skip_summarizer is not None:
            data["skipSummarizer"] = "true" if skip_summarizer else "false"
        if isinstance(file, str):
            files = {"file": (path, file.encode("utf-8"), "text/plain")}
        else:
            files = {"file": (path, file, "application/octet-stream")}
        return await self.request("POST", f"/workspaces/{workspace_id}/file", data=data, files=files)

    async def mark_task_as_errored(self, *, workspace_id: int, task_id: int, error: str) -> Any:
        return await self.post(f"/workspaces/{workspace_id}/tasks/{task_id}/error", {"error": error})

    async def complete_task(self, *, workspace_id: int, task_id: int, output: str) -> Any:
        return await self.put(f"/workspaces/{workspace_id}/tasks/{task_id}/complete", {"output": output})

    async def send_chat_message(self, *, workspace_id: int, agent_id: int, message: str) -> Any:
        return await self.post(f"/workspaces/{workspace_id}/agent-chat/{agent_id}/message", {"message": message})

    async def get_task_detail(self, *, workspace_id: int, task_id: int) -> Any:
        return await self.get(f"/workspaces/{workspace_id}/tasks/{task_id}/detail")

    async def get_agents(self, *, workspace_id: int) -> Any:
        return await self.get(f"/workspaces/{workspace_id}/agents")

    async def get_tasks(self, *, workspace_id: int) -> Any:
        return await self.get(f"/workspaces/{workspace_id}/tasks")

    async def create_task(
        self,
        *,
        workspace_id: int,
        assignee: int,
        description: str,
        body: str,
        input: str,
        expected_output: str,
        dependencies: Sequence[int] = (),
    ) -> Any:
        return await self.post(
            f"/workspaces/{workspace_id}/task",
            {
                "assignee": assignee,
                "description": description,
                "body": body,
                "input": input,
                "expectedOutput": expected_output,
                "dependencies": list(dependencies),
            },
        )

    async def add_log_to_task(
        self,
        *,
        workspace_id: int,
        task_id: int,
        severity: str,
        type: str,
        body: Union[str, Dict[str, Any]],
    ) -> Any:
        """Attach a log entry; ``severity`` is info/warning/error, ``type`` is text/openai-message."""
        return await self.post(
            f"/workspaces/{workspace_id}/tasks/{task_id}/log",
            {"severity": severity, "type": type, "body": body},
        )

    async def request_human_assistance(
        self,
        *,
        workspace_id: int,
        task_id: int,
        type: str,
        question: Union[str, Dict[str, Any]],
        agent_dump: Optional[Dict[str, Any]] = None,
    ) -> Any:
        payload: Dict[str, Any] = {"type": type, "question": question}
        if agent_dump is not None:
            payload["agentDump"] = agent_dump
        return await self.post(f"/workspaces/{workspace_id}/tasks/{task_id}/human-assistance", payload)

    async def call_integration(
        self,
        *,
        workspace_id: int,
        integration_id: str,
        details: Dict[str, Any],
    ) -> Any:
        """Proxy a request through a workspace integration; ``details`` holds ``endpoint``, ``method`` and ``data``."""
        return await self.post(f"/workspaces/{workspace_id}/integration/{integration_id}/proxy", details)

    async def update_task_status(
        self,
        *,
        workspace_id: int,
        task_id: int,
        status: Union[TaskStatus, str],
    ) -> Any:
        value = TaskStatus(status).value
        return await self.put(f"/workspaces/{workspace_id}/tasks/{task_id}/status", {"status": value})


class RuntimeApiClient(_OpenServClient):
    """
    Thin async HTTP client for the OpenServ runtime.

    The default task and chat handlers forward the conversation here so the
    runtime can process it on the agent's behalf.
    """

    async def execute(self, *, tools: List[Dict[str, Any]], messages: List[Dict[str, Any]], action: Any) -> Any:
        return await self.post("/execute", {"tools": tools, "messages": messages, "action": _wire(action)})

    async def chat(self, *, tools: List[Dict[str, Any]], messages: List[Dict[str, Any]], action: Any) -> Any:
        return await self.post("/chat", {"tools": tools, "messages": messages, "action": _wire(action)})


def _wire(action: Any) -> Any:
    # Actions travel back under their platform (camelCase) names
    if hasattr(action, "model_dump"):
        return action.model_dump(mode="json", by_alias=True)
    return action
