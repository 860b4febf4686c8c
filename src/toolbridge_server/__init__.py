"""toolbridge-server: gateway between an Ollama model and an MCP tool host.

This package provides a REST API that keeps per-conversation history, offers
the MCP server's tools to the model, and executes the tool calls the model
requests before returning its final answer.
"""

__version__ = "0.1.0"

from toolbridge_server.app import create_app  # noqa: E402

__all__ = ["create_app", "__version__"]
