"""
Root Action Endpoint.

The OpenServ platform posts ``do-task`` and ``respond-chat-message`` actions
to the agent's root route. The route acknowledges immediately; the matching
handler keeps running in the background.
"""

import json

from fastapi import APIRouter, Request

from openserv_agent.core.logging_config import get_logger
from openserv_agent.server.deps import AgentDep
from openserv_agent.server.schemas import ActionAck

logger = get_logger(__name__)

router = APIRouter(tags=["actions"])


@router.post(
    "/",
    response_model=ActionAck,
    summary="Receive Action",
    description="Accept a task or chat action from the platform and handle it asynchronously.",
    response_description="Acknowledgment; sent before the action is handled.",
)
async def receive_action(request: Request, agent: AgentDep) -> ActionAck:
    """
    Receive an action.

    The body is validated against the action union. Invalid payloads are
    reported through the agent's error handler; the platform still gets an
    acknowledgment either way.
    """
    raw = await request.body()
    try:
        body = json.loads(raw) if raw else None
    except ValueError:
        logger.debug("Root route received a non-JSON body")
        body = raw.decode("utf-8", errors="replace")

    await agent.handle_root_route(body)
    return ActionAck()
