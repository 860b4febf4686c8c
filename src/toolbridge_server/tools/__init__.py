"""Tool discovery, schema translation and execution layer.

This package connects to the MCP tool host, translates its tool schemas into
the completion service's function format, and executes tool calls requested
by the model.
"""

from toolbridge_server.tools.catalog import CatalogState, ToolCatalog
from toolbridge_server.tools.executor import ToolExecutor
from toolbridge_server.tools.extractor import extract
from toolbridge_server.tools.host import ToolHostConnection
from toolbridge_server.tools.types import ToolCall, ToolDefinition, ToolResult

__all__ = [
    "CatalogState",
    "ToolCall",
    "ToolCatalog",
    "ToolDefinition",
    "ToolExecutor",
    "ToolHostConnection",
    "ToolResult",
    "extract",
]
