"""
API Schemas.

This module contains Pydantic models used for API request bodies and responses.
These schemas define the contract between the OpenServ platform and the agent.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolRequest(BaseModel):
    """
    Body of ``POST /tools/{tool_name}``.

    ``args`` is validated against the tool's own schema; ``action`` and
    ``messages`` are forwarded to the capability's run context.
    """

    args: Any = Field(
        default=None,
        description="Arguments for the tool, validated against its schema.",
        examples=[{"input": "hello"}],
    )
    action: Any = Field(
        default=None,
        description="The action (task or chat) the tool runs on behalf of; validated by the agent.",
    )
    messages: List[Any] = Field(
        default_factory=list,
        description="Conversation so far, when the tool runs inside a conversation.",
    )

    model_config = ConfigDict(extra="ignore")


class ToolResponse(BaseModel):
    """Envelope returned by the tool route: exactly one of ``result`` or ``error``."""

    result: Optional[str] = Field(default=None, description="The tool's output.")
    error: Optional[str] = Field(default=None, description="Why the tool call failed.")
    issues: Optional[List[Dict[str, str]]] = Field(
        default=None,
        description="Per-field diagnostics when the arguments failed validation.",
    )


class ActionAck(BaseModel):
    """Immediate acknowledgment of an inbound action."""

    status: str = Field(default="accepted", examples=["accepted"])


class HealthStatus(BaseModel):
    status: str = Field(default="ok", examples=["ok"])
    uptime: float = Field(..., description="Seconds since the server process started.", examples=[12.5])
