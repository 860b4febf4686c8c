"""Chat API endpoint.

This module provides the endpoint that accepts a user message, runs the
orchestration loop for the conversation and returns the final answer.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from toolbridge_server.dependencies import (
    get_conversation_store,
    get_orchestration_loop,
)
from toolbridge_server.errors import ModelCallError
from toolbridge_server.models.chat import ChatRequest, ChatResponse
from toolbridge_server.services import OrchestrationLoop
from toolbridge_server.sessions import ChatSession, ConversationStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat/openai", response_model=ChatResponse, include_in_schema=False)
@router.post("/chat", response_model=ChatResponse)
async def chat(
    request_body: ChatRequest,
    store: Annotated[ConversationStore, Depends(get_conversation_store)],
    loop: Annotated[OrchestrationLoop, Depends(get_orchestration_loop)],
) -> ChatResponse:
    """Send a message and receive the assistant's final answer.

    Tool calls requested by the model are executed against the MCP server
    before the answer is produced. Requests for the same conversation are
    processed one at a time.

    Args:
        request_body: Chat request containing the message and optional ids
        store: Injected conversation store
        loop: Injected orchestration loop

    Returns:
        ChatResponse with the conversation id and the answer text

    Raises:
        HTTPException: 502 if the completion service fails
    """
    conversation_id = request_body.conversation_id or ChatSession.generate_session_id()

    async with store.lock_for(conversation_id):
        try:
            result = await loop.run(
                conversation_id,
                request_body.message,
                system_prompt=request_body.system_prompt,
            )
        except ModelCallError as e:
            logger.warning(
                f"Chat failed for conversation {conversation_id}: {e.code}"
            )
            raise HTTPException(
                status_code=502,
                detail={
                    "error": {
                        "code": e.code,
                        "message": e.message,
                        "details": {"conversation_id": conversation_id},
                    }
                },
            )

    return ChatResponse(conversation_id=conversation_id, text=result.text)
