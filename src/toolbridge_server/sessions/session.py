"""ChatSession class holding one conversation in memory.

Messages are only ever appended. The session does not persist itself;
conversation state lives for the lifetime of the process.
"""

import logging
import uuid

from toolbridge_server.sessions.types import (
    Message,
    SessionMetadata,
    SystemMessage,
    utc_timestamp,
)

logger = logging.getLogger(__name__)


class ChatSession:
    """A single conversation: ordered message history plus metadata."""

    def __init__(
        self,
        session_id: str,
        messages: list[Message] | None = None,
        metadata: SessionMetadata | None = None,
    ):
        """Initialize a ChatSession.

        Args:
            session_id: Conversation identifier
            messages: Initial message history (default: empty)
            metadata: Session metadata (default: auto-generated)
        """
        self.session_id = session_id
        self.messages: list[Message] = messages or []

        if metadata is None:
            now = utc_timestamp()
            self.metadata = SessionMetadata(
                session_id=session_id,
                created_at=now,
                updated_at=now,
                message_count=len(self.messages),
            )
        else:
            self.metadata = metadata

    def add_message(self, message: Message) -> None:
        """Append a message to the history.

        Updates the message_count in metadata and the updated_at timestamp.

        Args:
            message: The message to add
        """
        self.messages.append(message)
        self.metadata.message_count = len(self.messages)
        self.metadata.updated_at = utc_timestamp()

    def has_system_prompt(self) -> bool:
        """Check if the first message is a system message."""
        return len(self.messages) > 0 and isinstance(self.messages[0], SystemMessage)

    @staticmethod
    def generate_session_id() -> str:
        """Generate a new unique session ID.

        Returns:
            10-character hexadecimal string
        """
        return uuid.uuid4().hex[:10]
