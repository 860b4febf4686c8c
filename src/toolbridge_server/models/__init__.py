"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from toolbridge_server.models.chat import (
    ChatRequest,
    ChatResponse,
    MessageResponse,
    MessagesResponse,
)
from toolbridge_server.models.health import HealthResponse

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
    "MessageResponse",
    "MessagesResponse",
]
