"""Data types for conversation state.

This module defines the message types that make up a conversation and the
metadata kept for each conversation.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from toolbridge_server.tools.types import ToolCall


def utc_timestamp() -> str:
    """Current time as ISO 8601 UTC with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def new_message_id() -> str:
    return uuid.uuid4().hex[:10]


@dataclass
class UserMessage:
    """A message from the user."""

    role: str = "user"
    content: str = ""
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        """Validate role is always 'user'."""
        self.role = "user"


@dataclass
class SystemMessage:
    """A system instruction message."""

    role: str = "system"
    content: str = ""
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        """Validate role is always 'system'."""
        self.role = "system"


@dataclass
class AssistantMessage:
    """A response from the model, optionally requesting tool calls."""

    role: str = "assistant"
    content: str = ""
    model: str = ""
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)
    eval_count: int | None = None
    prompt_eval_count: int | None = None
    tool_calls: list[ToolCall] | None = None

    def __post_init__(self) -> None:
        """Validate role is always 'assistant'."""
        self.role = "assistant"


@dataclass
class ToolMessage:
    """The result of one tool call, answering it by identifier."""

    role: str = "tool"
    tool_call_id: str = ""
    tool_name: str = ""
    content: str = ""
    success: bool = True
    message_id: str = field(default_factory=new_message_id)
    timestamp: str = field(default_factory=utc_timestamp)

    def __post_init__(self) -> None:
        """Validate role is always 'tool'."""
        self.role = "tool"


# Union type for all message types
Message = UserMessage | SystemMessage | AssistantMessage | ToolMessage


@dataclass
class SessionMetadata:
    """Metadata for a conversation."""

    session_id: str
    created_at: str
    updated_at: str
    message_count: int = 0
