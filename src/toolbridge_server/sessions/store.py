"""ConversationStore: in-memory, per-conversation message history.

Conversations are created lazily on first reference and kept for the
lifetime of the process. The store itself does not order concurrent requests
for the same conversation; callers serialize them with ``lock_for()``.
"""

import asyncio
import logging

from toolbridge_server.sessions.session import ChatSession
from toolbridge_server.sessions.types import Message, SystemMessage

logger = logging.getLogger(__name__)


class ConversationStore:
    """Owns every conversation's ordered message history."""

    def __init__(self, default_system_prompt: str) -> None:
        """Initialize the store.

        Args:
            default_system_prompt: Instruction seeded into every new conversation
        """
        self.default_system_prompt = default_system_prompt
        self._sessions: dict[str, ChatSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, conversation_id: str) -> ChatSession:
        """Get an existing conversation.

        Raises:
            KeyError: If the conversation has never been referenced
        """
        return self._sessions[conversation_id]

    def load_or_create(
        self, conversation_id: str, system_prompt: str | None = None
    ) -> list[Message]:
        """Return a conversation's messages, creating it if unseen.

        A new conversation starts with a single system message: the default
        instruction, followed by ``system_prompt`` on a new line if given.
        ``system_prompt`` is ignored for existing conversations.

        Args:
            conversation_id: Conversation identifier
            system_prompt: Optional caller-supplied persona text

        Returns:
            list[Message]: The conversation's messages, oldest first
        """
        session = self._sessions.get(conversation_id)
        if session is None:
            content = self.default_system_prompt
            if system_prompt:
                content = f"{content}\n{system_prompt}"

            session = ChatSession(session_id=conversation_id)
            session.add_message(SystemMessage(content=content))
            self._sessions[conversation_id] = session
            logger.info(f"Created conversation {conversation_id}")

        return session.messages

    def append(self, conversation_id: str, message: Message) -> None:
        """Append a message to the end of a conversation.

        Raises:
            KeyError: If the conversation has never been referenced
        """
        self._sessions[conversation_id].add_message(message)
        logger.debug(
            f"Appended {message.role} message to conversation {conversation_id}"
        )

    def lock_for(self, conversation_id: str) -> asyncio.Lock:
        """Return the lock serializing requests for one conversation."""
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock
