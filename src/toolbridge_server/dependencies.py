"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject settings and the objects created at startup.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from toolbridge_server.config import ToolbridgeSettings
from toolbridge_server.ollama import OllamaClient
from toolbridge_server.services import OrchestrationLoop
from toolbridge_server.sessions import ConversationStore
from toolbridge_server.tools import ToolCatalog, ToolExecutor


@lru_cache
def get_settings() -> ToolbridgeSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the TOOLBRIDGE_ prefix.

    Returns:
        ToolbridgeSettings: The application configuration settings.
    """
    return ToolbridgeSettings()


def _require_state(request: Request, name: str, label: str):
    if not hasattr(request.app.state, name):
        raise HTTPException(
            status_code=503,
            detail=f"{label} not initialized",
        )
    return getattr(request.app.state, name)


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client from app state.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    return _require_state(request, "ollama_client", "Ollama client")


def get_tool_catalog(request: Request) -> ToolCatalog:
    """Get the tool catalog from app state.

    Raises:
        HTTPException: If the catalog is not initialized (503 Service Unavailable).
    """
    return _require_state(request, "tool_catalog", "Tool catalog")


def get_tool_executor(request: Request) -> ToolExecutor:
    """Get the tool executor from app state.

    Raises:
        HTTPException: If the executor is not initialized (503 Service Unavailable).
    """
    return _require_state(request, "tool_executor", "Tool executor")


def get_conversation_store(request: Request) -> ConversationStore:
    """Get the conversation store from app state.

    Raises:
        HTTPException: If the store is not initialized (503 Service Unavailable).
    """
    return _require_state(request, "conversation_store", "Conversation store")


def get_orchestration_loop(request: Request) -> OrchestrationLoop:
    """Get an OrchestrationLoop wired to the application's shared objects.

    Creates a new loop for each request; the store, catalog, executor and
    client it uses are the single instances created at startup.

    Args:
        request: The FastAPI request object.

    Returns:
        OrchestrationLoop: A loop configured from settings.

    Raises:
        HTTPException: If startup objects are missing (503 Service Unavailable).
    """
    # Use settings from app.state instead of cached get_settings()
    # This ensures tests can use their own isolated settings
    settings: ToolbridgeSettings = request.app.state.settings

    return OrchestrationLoop(
        store=get_conversation_store(request),
        catalog=get_tool_catalog(request),
        executor=get_tool_executor(request),
        completion_client=get_ollama_client(request),
        model=settings.model,
        max_steps=settings.max_steps,
        options={
            "temperature": settings.temperature,
            "num_predict": settings.max_tokens,
        },
    )
