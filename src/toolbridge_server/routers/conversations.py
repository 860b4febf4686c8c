"""Conversations router for reading conversation history."""

import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from toolbridge_server.dependencies import get_conversation_store
from toolbridge_server.models.chat import MessageResponse, MessagesResponse
from toolbridge_server.sessions import ConversationStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get(
    "/{conversation_id}/messages",
    response_model=MessagesResponse,
    summary="Get conversation messages",
)
async def get_messages(
    conversation_id: str,
    store: Annotated[ConversationStore, Depends(get_conversation_store)],
) -> MessagesResponse:
    """Get all messages of a conversation, oldest first.

    Args:
        conversation_id: The conversation ID
        store: Injected ConversationStore

    Returns:
        The messages of the conversation

    Raises:
        HTTPException: 404 if the conversation is unknown
    """
    try:
        session = store.get(conversation_id)
    except KeyError:
        logger.warning(f"Conversation {conversation_id} not found")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Conversation {conversation_id} not found",
        )

    message_responses = [MessageResponse(**asdict(msg)) for msg in session.messages]
    return MessagesResponse(
        conversation_id=conversation_id,
        message_count=session.metadata.message_count,
        messages=message_responses,
    )
