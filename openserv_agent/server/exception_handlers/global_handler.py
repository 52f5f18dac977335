"""
Application Exception Handlers.

Routes carry expected failures in their own response envelopes. The handlers
here catch what escapes a route: agent errors are mapped to their status code,
anything else becomes a 500 with an error ID that can be matched against the
logs.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from openserv_agent.agent_core.errors import AgentError
from openserv_agent.core.logging_config import get_logger

logger = get_logger(__name__)


async def agent_error_handler(request: Request, exc: AgentError) -> JSONResponse:
    """
    Map an ``AgentError`` that escaped a route to an ``{"error": ...}`` response.

    Errors that carry a ``status_code`` (bad requests) keep it; everything
    else is a 500.
    """
    status_code = getattr(exc, "status_code", 500)
    logger.warning(
        f"Agent error in {request.method} {request.url.path}: {exc}",
        extra={"error_type": type(exc).__name__, "path": request.url.path},
    )
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log an unhandled exception and return a generic 500 response.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with an error ID clients can quote when reporting issues
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(AgentError, agent_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
