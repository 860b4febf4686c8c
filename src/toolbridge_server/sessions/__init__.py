"""Conversation state for toolbridge-server.

This package provides the message types, the in-memory ChatSession and the
ConversationStore that owns all conversations.
"""

from toolbridge_server.sessions.session import ChatSession
from toolbridge_server.sessions.store import ConversationStore
from toolbridge_server.sessions.types import (
    AssistantMessage,
    Message,
    SessionMetadata,
    SystemMessage,
    ToolMessage,
    UserMessage,
)

__all__ = [
    # Core classes
    "ChatSession",
    "ConversationStore",
    # Message types
    "Message",
    "UserMessage",
    "SystemMessage",
    "AssistantMessage",
    "ToolMessage",
    # Metadata
    "SessionMetadata",
]
