"""
Agent Dependency.

Resolves the ``Agent`` attached to the application for API endpoints.
"""

from typing import TYPE_CHECKING, Annotated, Any

from fastapi import Depends, Request

if TYPE_CHECKING:
    from openserv_agent.agent_core.agent import Agent


def get_agent(request: Request) -> "Agent":
    return request.app.state.agent


AgentDep = Annotated[Any, Depends(get_agent)]
