"""
Unit tests for server exception handlers.

Tests cover the agent error mapping, the global fallback handler and
handler registration.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient

from openserv_agent.agent_core.errors import AgentError, BadRequestError, ToolNotFoundError
from openserv_agent.server.exception_handlers import setup_exception_handlers
from openserv_agent.server.exception_handlers.global_handler import (
    agent_error_handler,
    global_exception_handler,
)

HANDLER_LOGGER = "openserv_agent.server.exception_handlers.global_handler.logger"


@pytest.fixture
def mock_request():
    """Create a mock request object."""
    request = Mock(spec=Request)
    request.method = "POST"
    request.url.path = "/tools/echo"
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


class TestGlobalExceptionHandler:
    """Test suite for the global exception handler."""

    @pytest.mark.asyncio
    async def test_exception_handler_logs_error(self, mock_request):
        exc = ValueError("Test error")

        with patch(HANDLER_LOGGER) as mock_logger:
            await global_exception_handler(mock_request, exc)

            mock_logger.error.assert_called_once()
            call_args = mock_logger.error.call_args
            assert "Unhandled exception" in call_args[0][0]
            assert "Test error" in call_args[0][0]
            assert call_args[1]["extra"]["error_type"] == "ValueError"
            assert call_args[1]["extra"]["method"] == "POST"
            assert call_args[1]["extra"]["path"] == "/tools/echo"

    @pytest.mark.asyncio
    async def test_exception_handler_returns_500_json(self, mock_request):
        exc = RuntimeError("Test error")

        with patch(HANDLER_LOGGER):
            response = await global_exception_handler(mock_request, exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        body = json.loads(response.body.decode())
        assert body["error"] == "Internal server error"
        assert body["error_type"] == "RuntimeError"
        assert isinstance(body["error_id"], int)

    @pytest.mark.asyncio
    async def test_exception_handler_handles_missing_client(self, mock_request):
        mock_request.client = None

        with patch(HANDLER_LOGGER) as mock_logger:
            await global_exception_handler(mock_request, RuntimeError("x"))

            assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"

    @pytest.mark.asyncio
    async def test_exception_handler_error_id_is_unique(self, mock_request):
        with patch(HANDLER_LOGGER):
            response1 = await global_exception_handler(mock_request, RuntimeError("Error 1"))
            response2 = await global_exception_handler(mock_request, RuntimeError("Error 2"))

        body1 = json.loads(response1.body.decode())
        body2 = json.loads(response2.body.decode())
        assert body1["error_id"] != body2["error_id"]


class TestAgentErrorHandler:
    """Test suite for the agent error handler."""

    @pytest.mark.asyncio
    async def test_bad_request_keeps_status_code(self, mock_request):
        with patch(HANDLER_LOGGER):
            response = await agent_error_handler(mock_request, ToolNotFoundError("missing"))

        assert response.status_code == 400
        assert json.loads(response.body.decode()) == {"error": 'Tool "missing" not found'}

    @pytest.mark.asyncio
    async def test_other_agent_errors_are_500(self, mock_request):
        with patch(HANDLER_LOGGER) as mock_logger:
            response = await agent_error_handler(mock_request, AgentError("wiring problem"))

            mock_logger.warning.assert_called_once()

        assert response.status_code == 500
        assert json.loads(response.body.decode()) == {"error": "wiring problem"}


class TestSetupExceptionHandlers:
    """Test suite for setup_exception_handlers function."""

    def test_setup_exception_handlers_registers_handlers(self):
        app = FastAPI()

        with patch(HANDLER_LOGGER) as mock_logger:
            setup_exception_handlers(app)

            assert Exception in app.exception_handlers
            assert AgentError in app.exception_handlers
            mock_logger.debug.assert_called_once()

    @pytest.mark.asyncio
    async def test_escaped_errors_are_mapped(self):
        app = FastAPI()
        setup_exception_handlers(app)

        @app.get("/bad-request")
        async def bad_request():
            raise BadRequestError("nope")

        @app.get("/crash")
        async def crash():
            raise RuntimeError("crash")

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://localhost") as client:
            bad = await client.get("/bad-request")
            crashed = await client.get("/crash")

        assert bad.status_code == 400
        assert bad.json() == {"error": "nope"}
        assert crashed.status_code == 500
        assert crashed.json()["error_type"] == "RuntimeError"
