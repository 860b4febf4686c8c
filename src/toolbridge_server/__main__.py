"""CLI entry point for toolbridge-server.

This module provides the command-line interface for starting the server.
It can be invoked as `toolbridge-server` (via the script entry point) or
`python -m toolbridge_server`.
"""

import argparse
import logging
import sys

import uvicorn
from pydantic import ValidationError

from toolbridge_server import __version__, create_app
from toolbridge_server.config import ToolbridgeSettings
from toolbridge_server.errors import ConfigurationError

logger = logging.getLogger("toolbridge_server")


def main() -> int:
    """Main entry point for the toolbridge-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.

    Returns:
        int: Process exit code (1 on configuration errors)
    """
    parser = argparse.ArgumentParser(
        prog="toolbridge-server",
        description="Gateway letting an Ollama model call MCP tools mid-conversation",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"toolbridge-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via TOOLBRIDGE_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 3002, can be set via TOOLBRIDGE_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via TOOLBRIDGE_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model used for completions (can be set via TOOLBRIDGE_MODEL)",
    )

    parser.add_argument(
        "--mcp-server-url",
        type=str,
        default=None,
        help="MCP server URL (default: http://localhost:8000/mcp, can be set via TOOLBRIDGE_MCP_SERVER_URL)",
    )

    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Maximum model round-trips per message (default: 8, can be set via TOOLBRIDGE_MAX_STEPS)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via TOOLBRIDGE_LOG_LEVEL)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.ollama_host is not None:
        settings_kwargs["ollama_host"] = args.ollama_host
    if args.model is not None:
        settings_kwargs["model"] = args.model
    if args.mcp_server_url is not None:
        settings_kwargs["mcp_server_url"] = args.mcp_server_url
    if args.max_steps is not None:
        settings_kwargs["max_steps"] = args.max_steps
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    try:
        settings = ToolbridgeSettings(**settings_kwargs)
    except ValidationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        app = create_app(settings=settings)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logger.info(f"toolbridge-server listening on http://{settings.host}:{settings.port}")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
