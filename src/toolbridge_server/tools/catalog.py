"""Tool catalog: discovery, translation and caching of tool schemas.

The catalog asks the tool host for its tools once, translates them into the
completion service's function-schema format and caches the result. When
discovery fails the catalog reports an empty tool set and tries again on the
next call; a failure is never cached.
"""

import asyncio
import logging
from enum import Enum
from typing import Any

from toolbridge_server.errors import ToolCatalogUnavailable
from toolbridge_server.tools.host import ToolHostConnection
from toolbridge_server.tools.types import ToolDefinition

logger = logging.getLogger(__name__)


class CatalogState(str, Enum):
    UNINITIALIZED = "uninitialized"
    POPULATED = "populated"
    EMPTY_AFTER_FAILURE = "empty_after_failure"


class ToolCatalog:
    """Cached, translated set of tools offered to the completion service."""

    def __init__(self, connection: ToolHostConnection) -> None:
        """Initialize the catalog.

        Args:
            connection: Connection to the tool host used for discovery
        """
        self.connection = connection
        self.state = CatalogState.UNINITIALIZED
        self._definitions: dict[str, ToolDefinition] = {}
        self._schemas: list[dict[str, Any]] = []
        self._discovery: asyncio.Task | None = None

    @property
    def is_populated(self) -> bool:
        return self.state is CatalogState.POPULATED

    @property
    def definitions(self) -> dict[str, ToolDefinition]:
        """Discovered tools keyed by name (empty until populated)."""
        return dict(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    async def get_tools(self) -> list[dict[str, Any]]:
        """Return the tool schemas, discovering them on first use.

        Concurrent callers share one in-flight discovery and all receive its
        outcome. Once it has settled, the next call after a failure starts a
        new attempt.

        Returns:
            list[dict]: Function schemas, or an empty list if discovery failed
        """
        if self.is_populated:
            return list(self._schemas)

        if self._discovery is None:
            self._discovery = asyncio.create_task(self._refresh())
        await asyncio.shield(self._discovery)

        return list(self._schemas)

    async def _refresh(self) -> None:
        """Run one discovery attempt, degrading to no tools on failure."""
        try:
            await self._discover()
        except ToolCatalogUnavailable as e:
            logger.warning(f"Tool catalog unavailable, continuing without tools: {e}")
            self.state = CatalogState.EMPTY_AFTER_FAILURE
        finally:
            self._discovery = None

    async def _discover(self) -> None:
        """Fetch tools from the tool host and populate the cache.

        Raises:
            ToolCatalogUnavailable: If the host cannot be reached or answers
                with something that is not a tool list
        """
        try:
            tools = await self.connection.list_tools()
        except Exception as e:
            raise ToolCatalogUnavailable(f"Failed to fetch tools from MCP: {e}") from e

        definitions: dict[str, ToolDefinition] = {}
        try:
            for tool in tools:
                definition = ToolDefinition.from_mcp_tool(tool)
                if definition.name in definitions:
                    logger.warning(f"Duplicate tool '{definition.name}' ignored")
                    continue
                definitions[definition.name] = definition
        except (TypeError, ValueError) as e:
            raise ToolCatalogUnavailable(f"Malformed tool list from MCP: {e}") from e

        self._definitions = definitions
        self._schemas = [d.to_function_schema() for d in definitions.values()]
        self.state = CatalogState.POPULATED
        logger.info(f"Discovered {len(definitions)} tools from MCP")
