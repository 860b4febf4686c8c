"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from toolbridge_server import __version__
from toolbridge_server.models.health import HealthResponse
from toolbridge_server.ollama import OllamaClient
from toolbridge_server.tools import ToolCatalog, ToolHostConnection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint.

    Reports liveness, whether the MCP session is open, how many tools the
    catalog holds and, if the client is initialized, Ollama connectivity.

    Args:
        request: The FastAPI request object.

    Returns:
        HealthResponse: Health status and connection information.
    """
    settings = request.app.state.settings
    mcp_connected = False
    tools_loaded = 0
    catalog_state = "uninitialized"
    ollama_connected = None

    if hasattr(request.app.state, "tool_host"):
        tool_host: ToolHostConnection = request.app.state.tool_host
        mcp_connected = bool(tool_host.connected)

    if hasattr(request.app.state, "tool_catalog"):
        catalog: ToolCatalog = request.app.state.tool_catalog
        tools_loaded = len(catalog)
        catalog_state = catalog.state.value

    if hasattr(request.app.state, "ollama_client"):
        ollama_client: OllamaClient = request.app.state.ollama_client
        try:
            ollama_connected = await ollama_client.check_connection()
            logger.debug(f"Ollama connectivity check: {ollama_connected}")
        except Exception as e:
            logger.warning(f"Ollama connectivity check failed: {e}")
            ollama_connected = False

    return HealthResponse(
        status="ok",
        version=__version__,
        model=settings.model,
        mcp_server_url=settings.mcp_server_url,
        mcp_connected=mcp_connected,
        tools_loaded=tools_loaded,
        catalog_state=catalog_state,
        ollama_connected=ollama_connected,
    )
