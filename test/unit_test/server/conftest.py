from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from openserv_agent.server.main import create_app


@pytest_asyncio.fixture(name="client")
async def client_fixture(agent) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client bound in-process to the test agent's application."""
    app = create_app(agent, configure_logging=False)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client
    await agent.router.drain()
