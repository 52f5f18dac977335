"""Pydantic schemas for platform payloads and validation diagnostics."""

from .action import (
    Action,
    AgentIdentity,
    AgentKind,
    ChatTurn,
    DoTaskAction,
    Integration,
    Memory,
    RespondChatMessageAction,
    TaskContext,
    TaskStatus,
    WorkspaceContext,
    parse_action,
)
from .diagnostics import FieldIssue, issues_from_pydantic

__all__ = [
    "Action",
    "AgentIdentity",
    "AgentKind",
    "ChatTurn",
    "DoTaskAction",
    "FieldIssue",
    "Integration",
    "Memory",
    "RespondChatMessageAction",
    "TaskContext",
    "TaskStatus",
    "WorkspaceContext",
    "issues_from_pydantic",
    "parse_action",
]
