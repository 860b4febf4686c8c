"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolbridge_server import __version__
from toolbridge_server.config import ToolbridgeSettings
from toolbridge_server.ollama import OllamaClient
from toolbridge_server.routers import chat, conversations, health
from toolbridge_server.sessions import ConversationStore
from toolbridge_server.tools import ToolCatalog, ToolExecutor, ToolHostConnection

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    Expensive and shared objects (the Ollama client, the MCP connection, the
    tool catalog and the conversation store) are created once at startup and
    stored in app.state for reuse across all requests. The MCP connection
    itself is only opened on first use.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: ToolbridgeSettings = app.state.settings

    app.state.ollama_client = OllamaClient(
        host=settings.ollama_host,
        headers=settings.completion_headers,
    )
    app.state.tool_host = ToolHostConnection(
        url=settings.mcp_server_url,
        client_name=settings.mcp_client_name,
        connect_timeout=settings.mcp_connect_timeout,
    )
    app.state.tool_catalog = ToolCatalog(app.state.tool_host)
    app.state.tool_executor = ToolExecutor(app.state.tool_host)
    app.state.conversation_store = ConversationStore(
        default_system_prompt=settings.default_system_prompt
    )

    logger.info(f"Target MCP URL: {settings.mcp_server_url}")
    logger.info(f"Model: {settings.model}")

    connected = await app.state.ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    # Pre-load tools; a failure here only means the catalog retries later
    await app.state.tool_catalog.get_tools()

    yield

    # Shutdown: Clean up resources
    if hasattr(app.state, "tool_host"):
        await app.state.tool_host.close()
        logger.info("MCP connection closed")
    if hasattr(app.state, "ollama_client"):
        await app.state.ollama_client.close()
        logger.info("Ollama client closed")


def create_app(settings: ToolbridgeSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional ToolbridgeSettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.

    Raises:
        ConfigurationError: If a required credential is missing.
    """
    if settings is None:
        from toolbridge_server.dependencies import get_settings

        settings = get_settings()

    settings.validate_credentials()

    app = FastAPI(
        title="toolbridge-server",
        description="Gateway letting an Ollama model call MCP tools mid-conversation",
        version=__version__,
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(chat.router)
    app.include_router(conversations.router)

    return app
