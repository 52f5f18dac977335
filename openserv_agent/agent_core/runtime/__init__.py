"""Conversation loop and root action routing."""

from .conversation import ConversationLoop
from .router import RootActionRouter, default_do_task, default_respond_to_chat

__all__ = ["ConversationLoop", "RootActionRouter", "default_do_task", "default_respond_to_chat"]
