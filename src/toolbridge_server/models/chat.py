"""Pydantic models for chat API requests and responses.

Field names are exposed in camelCase on the wire (``conversationId``,
``systemPrompt``) and accepted in snake_case as well.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    conversation_id: str | None = Field(
        default=None,
        description="Conversation to continue. A new conversation is started when omitted.",
    )
    system_prompt: str | None = Field(
        default=None,
        description="Persona text appended to the default instruction of a new conversation.",
    )
    message: str = Field(description="The user message to send.")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "conversationId": "a1b2c3d4e5",
                    "message": "What is the status of order 7?",
                },
                {
                    "systemPrompt": "Answer in one sentence.",
                    "message": "Hello",
                },
            ]
        },
    )

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be empty")
        return value


class ChatResponse(BaseModel):
    """Response body for POST /chat."""

    conversation_id: str = Field(description="Conversation identifier")
    text: str = Field(description="The assistant's answer")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "conversationId": "a1b2c3d4e5",
                "text": "Order 7 has shipped.",
            }
        },
    )


class MessageResponse(BaseModel):
    """Response model for a single message of a conversation."""

    role: str
    content: str
    message_id: str | None = None
    timestamp: str | None = None
    model: str | None = None
    eval_count: int | None = None
    prompt_eval_count: int | None = None
    tool_calls: list[dict] | None = None
    tool_call_id: str | None = None
    tool_name: str | None = None
    success: bool | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessagesResponse(BaseModel):
    """Response model for GET /conversations/{conversation_id}/messages."""

    conversation_id: str
    message_count: int
    messages: list[MessageResponse]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
