"""
Tool Endpoint.

Runs a single registered capability by name. Failures are carried in the
response envelope as ``{"error": ...}``; a missing or unknown tool is a bad
request (HTTP 400).
"""

from typing import Optional

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from openserv_agent.agent_core.errors import BadRequestError, ValidationError
from openserv_agent.server.deps import AgentDep
from openserv_agent.server.schemas import ToolRequest, ToolResponse

router = APIRouter(tags=["tools"])


@router.post(
    "/tools/{tool_name}",
    response_model=ToolResponse,
    response_model_exclude_none=True,
    summary="Run Tool",
    description="Validate the arguments against the tool's schema and run it.",
    response_description="The tool's result, or the error that prevented it.",
    responses={
        200: {"description": "Tool ran, or failed while running (see `error`)"},
        400: {"description": "Unknown tool"},
    },
)
async def run_tool(tool_name: str, agent: AgentDep, payload: Optional[ToolRequest] = None):
    """
    Run a tool.

    - **args**: Arguments validated against the tool's schema.
    - **action**: Optional task/chat action the call belongs to.
    - **messages**: Optional conversation so far.
    """
    body = payload.model_dump() if payload is not None else {}
    try:
        return await agent.handle_tool_route(tool_name, body)
    except BadRequestError as e:
        return JSONResponse(status_code=e.status_code, content={"error": str(e)})
    except ValidationError as e:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"error": str(e), "issues": [issue.to_dict() for issue in e.issues]},
        )
    except Exception as e:
        # Already reported by the agent's error handler
        return JSONResponse(status_code=status.HTTP_200_OK, content={"error": str(e)})
