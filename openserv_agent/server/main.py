"""
Application Factory.

Builds the FastAPI application that serves one ``Agent``: the health check,
the root action route and the tool route. ``Agent.start`` serves the result
with uvicorn; tests drive it in-process through ``httpx.ASGITransport``.
"""

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from openserv_agent.core.logging_config import get_logger, setup_logging

from .api.v1 import actions, health, tools
from .exception_handlers import setup_exception_handlers

if TYPE_CHECKING:
    from openserv_agent.agent_core.agent import Agent

PROJECT_NAME = "OpenServ Agent"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and shutdown; outstanding action handlers are awaited on shutdown."""
    agent = app.state.agent
    logger.info(f"Starting up {PROJECT_NAME} with {len(agent.registry)} tool(s): {', '.join(agent.registry.names())}")

    yield

    logger.info(f"Shutting down {PROJECT_NAME}...")
    await agent.router.drain()


def create_app(agent: "Agent", *, configure_logging: bool = True) -> FastAPI:
    """
    Build the HTTP application for ``agent``.

    Args:
        agent: The agent whose routes are served; stored on ``app.state.agent``.
        configure_logging: Apply ``setup_logging`` using the agent's log level.

    Returns:
        The configured FastAPI application.
    """
    if configure_logging:
        setup_logging(log_level=agent.settings.log_level)

    app = FastAPI(
        title=PROJECT_NAME,
        description="""
        OpenServ Agent API

        Endpoints the OpenServ platform calls to hand tasks and chat messages
        to this agent and to run its tools directly.
        """,
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.agent = agent

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(actions.router)
    app.include_router(tools.router)
    return app
