"""
Agent Facade.

``Agent`` is the public entry point of the package. It owns:

- the capability registry (``add_capability`` / ``add_capabilities``),
- the tool dispatch pipeline behind ``POST /tools/{name}``,
- the conversation loop (``process``),
- the root action router behind ``POST /`` with injectable ``do_task`` /
  ``respond_to_chat`` handlers,
- thin pass-through calls to the OpenServ platform API,
- the HTTP listener lifecycle (``start`` / ``stop``),
- the centralized error handler.

Example:
    class Echo(BaseModel):
        input: str

    agent = Agent(system_prompt="You are a helpful assistant.")
    agent.add_capability(
        name="echo",
        description="Echo the input back",
        schema=Echo,
        run=lambda ctx: ctx.args.input,
    )
    await agent.start()
"""

from __future__ import annotations

import asyncio
import socket
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type, Union

import uvicorn
from openai import AsyncOpenAI
from pydantic import BaseModel

from openserv_agent.core.logging_config import get_logger
from openserv_agent.platform_api.client import PlatformApiClient, RuntimeApiClient
from openserv_agent.server.core.config import Settings, load_settings

from .capabilities.base import Capability, CapabilityRun
from .capabilities.dispatch import ToolDispatcher
from .capabilities.registry import CapabilityRegistry
from .error_handler import ErrorCallback, ErrorHandler
from .errors import ConfigurationError, ServerStartError
from .runtime.conversation import ConversationLoop
from .runtime.router import ChatHandler, RootActionRouter, TaskHandler

logger = get_logger(__name__)


class Agent:
    """
    An OpenServ agent.

    Args:
        system_prompt: System prompt used by the default task/chat handlers.
        api_key: OpenServ API key; falls back to ``OPENSERV_API_KEY``.
        openai_api_key: OpenAI key for ``process``; falls back to ``OPENAI_API_KEY``.
            Only checked when ``process`` runs.
        port: Listener port; falls back to ``PORT`` (default 7378). ``0`` picks a free port.
        host: Listener address; falls back to ``HOST`` (default ``0.0.0.0``).
        on_error: Callback ``(error, context)`` replacing the default error logging.
        do_task: Handler for ``do-task`` actions, called as ``do_task(agent, action)``.
        respond_to_chat: Handler for ``respond-chat-message`` actions.
        settings: Pre-built settings; loaded from the environment when omitted.
        openai_client: Chat completion client to use instead of building ``AsyncOpenAI``.
        platform_client: Platform API client override.
        runtime_client: Runtime API client override.

    Raises:
        ConfigurationError: If no OpenServ API key is available.
    """

    def __init__(
        self,
        system_prompt: str,
        *,
        api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        port: Optional[int] = None,
        host: Optional[str] = None,
        on_error: Optional[ErrorCallback] = None,
        do_task: Optional[TaskHandler] = None,
        respond_to_chat: Optional[ChatHandler] = None,
        settings: Optional[Settings] = None,
        openai_client: Any = None,
        platform_client: Optional[PlatformApiClient] = None,
        runtime_client: Optional[RuntimeApiClient] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self.api_key = api_key or self.settings.openserv_api_key
        if not self.api_key:
            raise ConfigurationError(
                "OpenServ API key is required. Please provide it in options or set OPENSERV_API_KEY environment variable."
            )

        self.system_prompt = system_prompt
        self.port = port if port is not None else self.settings.port
        self.host = host or self.settings.host

        self.errors = ErrorHandler(on_error)
        self.registry = CapabilityRegistry()

        self.platform = platform_client or PlatformApiClient(self.settings.openserv_api_url, api_key=self.api_key)
        self.runtime = runtime_client or RuntimeApiClient(
            f"{self.settings.openserv_runtime_url.rstrip('/')}/runtime", api_key=self.api_key
        )

        self._openai_api_key = openai_api_key or self.settings.openai_api_key
        self._openai = openai_client

        self.dispatcher = ToolDispatcher(self.registry, self.errors, agent=self)
        self.conversation = ConversationLoop(
            self.registry,
            self.dispatcher,
            self.errors,
            client_provider=lambda: self.openai,
            model=self.settings.openai_model,
        )
        self.router = RootActionRouter(self, self.errors, do_task=do_task, respond_to_chat=respond_to_chat)

        self._app = None
        self._server: Optional[uvicorn.Server] = None
        self._serve_task: Optional[asyncio.Task] = None

    # =====================================================================
    # Capabilities
    # =====================================================================

    def add_capability(
        self,
        *,
        name: str,
        description: str,
        schema: Type[BaseModel],
        run: CapabilityRun,
    ) -> "Agent":
        """
        Register a capability.

        Returns:
            The agent, for chaining.

        Raises:
            DuplicateCapabilityError: If the name is already registered.
            RegistrySealedError: If the agent already started serving.
        """
        self.registry.register(Capability(name=name, description=description, schema=schema, run=run))
        return self

    def add_capabilities(self, capabilities: Iterable[Union[Capability, Mapping[str, Any]]]) -> "Agent":
        """
        Register several capabilities in order.

        Items are ``Capability`` instances or mappings with ``name``,
        ``description``, ``schema`` and ``run``. Capabilities registered before
        a duplicate stay registered.
        """
        self.registry.register_many(
            cap if isinstance(cap, Capability) else Capability(**dict(cap)) for cap in capabilities
        )
        return self

    # =====================================================================
    # Chat completion
    # =====================================================================

    @property
    def openai(self) -> Any:
        """The chat completion client, built on first use."""
        if self._openai is None:
            if not self._openai_api_key:
                raise ConfigurationError(
                    "OpenAI API key is required for process(). "
                    "Please provide it in options or set OPENAI_API_KEY environment variable."
                )
            self._openai = AsyncOpenAI(api_key=self._openai_api_key, organization=self.settings.openai_organization)
        return self._openai

    async def process(self, messages: Sequence[Any], *, action: Any = None) -> Any:
        """Run the tool-calling conversation loop; see ``ConversationLoop.process``."""
        return await self.conversation.process(messages, action=action)

    # =====================================================================
    # Routes
    # =====================================================================

    async def handle_tool_route(self, tool_name: str, body: Optional[Mapping[str, Any]] = None) -> Dict[str, str]:
        """Validate and run a tool; failures are reported as ``handle_tool_route`` and re-raised."""
        return await self.dispatcher.dispatch(tool_name, body)

    async def handle_root_route(self, body: Any) -> None:
        """Validate an action and start its handler; never raises for invalid payloads."""
        await self.router.route(body)

    # =====================================================================
    # Platform pass-through
    # =====================================================================

    async def get_files(self, *, workspace_id: int) -> Any:
        return await self.platform.get_files(workspace_id=workspace_id)

    async def upload_file(self, **params: Any) -> Any:
        """See ``PlatformApiClient.upload_file``."""
        return await self.platform.upload_file(**params)

    async def mark_task_as_errored(self, *, workspace_id: int, task_id: int, error: str) -> Any:
        return await self.platform.mark_task_as_errored(workspace_id=workspace_id, task_id=task_id, error=error)

    async def complete_task(self, *, workspace_id: int, task_id: int, output: str) -> Any:
        return await self.platform.complete_task(workspace_id=workspace_id, task_id=task_id, output=output)

    async def send_chat_message(self, *, workspace_id: int, agent_id: int, message: str) -> Any:
        return await self.platform.send_chat_message(workspace_id=workspace_id, agent_id=agent_id, message=message)

    async def get_task_detail(self, *, workspace_id: int, task_id: int) -> Any:
        return await self.platform.get_task_detail(workspace_id=workspace_id, task_id=task_id)

    async def get_agents(self, *, workspace_id: int) -> Any:
        return await self.platform.get_agents(workspace_id=workspace_id)

    async def get_tasks(self, *, workspace_id: int) -> Any:
        return await self.platform.get_tasks(workspace_id=workspace_id)

    async def create_task(self, **params: Any) -> Any:
        """See ``PlatformApiClient.create_task``."""
        return await self.platform.create_task(**params)

    async def add_log_to_task(self, **params: Any) -> Any:
        """See ``PlatformApiClient.add_log_to_task``."""
        return await self.platform.add_log_to_task(**params)

    async def request_human_assistance(self, **params: Any) -> Any:
        """See ``PlatformApiClient.request_human_assistance``."""
        return await self.platform.request_human_assistance(**params)

    async def call_integration(self, *, workspace_id: int, integration_id: str, details: Dict[str, Any]) -> Any:
        return await self.platform.call_integration(
            workspace_id=workspace_id, integration_id=integration_id, details=details
        )

    async def update_task_status(self, *, workspace_id: int, task_id: int, status: Any) -> Any:
        return await self.platform.update_task_status(workspace_id=workspace_id, task_id=task_id, status=status)

    # =====================================================================
    # HTTP lifecycle
    # =====================================================================

    @property
    def app(self):
        """The FastAPI application serving this agent."""
        if self._app is None:
            from openserv_agent.server.main import create_app

            self._app = create_app(self)
        return self._app

    @property
    def running(self) -> bool:
        return self._server is not None

    async def start(self) -> None:
        """
        Bind the listener and serve until ``stop``.

        Returns once the server accepts connections. The registry is sealed
        from then on.

        Raises:
            ServerStartError: If the address cannot be bound or the server
                exits during startup.
        """
        if self._server is not None:
            return

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
        except OSError as e:
            sock.close()
            raise ServerStartError(f"Failed to bind {self.host}:{self.port}: {e}") from e
        self.port = sock.getsockname()[1]

        self.registry.seal()
        server = uvicorn.Server(uvicorn.Config(self.app, log_config=None))
        serve_task = asyncio.create_task(server.serve(sockets=[sock]))
        while not server.started:
            if serve_task.done():
                sock.close()
                raise ServerStartError(f"Agent server exited during startup on port {self.port}")
            await asyncio.sleep(0.01)

        self._server = server
        self._serve_task = serve_task
        logger.info(f"Agent server started on port {self.port}")

    async def stop(self) -> None:
        """Close the listener and wait for running action handlers; no-op if never started."""
        if self._server is None:
            return
        server, serve_task = self._server, self._serve_task
        self._server = None
        self._serve_task = None

        server.should_exit = True
        if serve_task is not None:
            await serve_task
        await self.router.drain()
        logger.info("Agent server stopped")

    async def aclose(self) -> None:
        """Stop serving and close the platform and runtime HTTP clients."""
        await self.stop()
        await self.platform.aclose()
        await self.runtime.aclose()

    def tools(self) -> List[str]:
        """Names of the registered capabilities, in registration order."""
        return self.registry.names()
