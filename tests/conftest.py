"""Pytest configuration and shared fixtures for toolbridge-server tests.

This module provides common fixtures used across all test modules,
including test app creation, mocked external clients and async client setup.
"""

from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from toolbridge_server import create_app
from toolbridge_server.config import ToolbridgeSettings


@pytest.fixture
def test_settings():
    """Create test settings that do not depend on the environment.

    Returns:
        ToolbridgeSettings: Settings instance configured for testing.
    """
    return ToolbridgeSettings(
        host="127.0.0.1",
        port=3002,
        ollama_host="http://localhost:11434",
        model="llama3.2:latest",
        api_key="test-key",
        mcp_server_url="http://mcp.test/mcp",
        max_steps=8,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def mock_ollama_client():
    """Mock OllamaClient so the app lifespan never talks to a real Ollama."""
    with patch("toolbridge_server.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True
        mock_client_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def mock_tool_host():
    """Mock ToolHostConnection so the app lifespan never opens an MCP session.

    The mock reports an open connection and no tools by default.
    """
    with patch("toolbridge_server.app.ToolHostConnection") as mock_host_class:
        mock_instance = AsyncMock()
        mock_instance.url = "http://mcp.test/mcp"
        mock_instance.connected = True
        mock_instance.list_tools.return_value = []
        mock_host_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app, mock_ollama_client, mock_tool_host):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.
        mock_ollama_client: Mocked completion client used by the lifespan.
        mock_tool_host: Mocked MCP connection used by the lifespan.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
