"""Lazy, shared connection to the MCP tool host.

The MCP SDK transports are built on anyio task groups, which must be entered
and exited by the same task. The connection is therefore owned by one
background task that opens the streamable HTTP transport and the
``ClientSession``, publishes the session, and keeps both open until
``close()`` is called. Request handlers only ever borrow the session.
"""

import asyncio
import logging
from typing import Any

from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client
from mcp.types import Implementation

from toolbridge_server import __version__

logger = logging.getLogger(__name__)


class ToolHostConnection:
    """Process-wide connection to an MCP server.

    The connection is established on first use and reused afterwards.
    Concurrent first users share a single connection attempt. If the
    connection drops, the next use reconnects.

    Attributes:
        url: The MCP server URL (streamable HTTP endpoint)
        client_name: Client name announced during MCP initialization
        connect_timeout: Seconds to wait for the session to initialize
    """

    def __init__(
        self,
        url: str,
        client_name: str = "toolbridge-server",
        connect_timeout: float = 10.0,
    ) -> None:
        self.url = url
        self.client_name = client_name
        self.connect_timeout = connect_timeout
        self._session: ClientSession | None = None
        self._task: asyncio.Task | None = None
        self._closing = asyncio.Event()
        self._connecting: asyncio.Task | None = None

    @property
    def connected(self) -> bool:
        """Whether an initialized MCP session is currently open."""
        return self._session is not None and self._task is not None and not self._task.done()

    async def connect(self) -> ClientSession:
        """Return the shared session, connecting on first use.

        Concurrent callers share one in-flight connection attempt and all
        receive its outcome, success or failure. Once it has settled, the next
        call after a failure starts a new attempt.

        Returns:
            ClientSession: The initialized MCP client session

        Raises:
            Exception: If the MCP server cannot be reached or initialization fails
        """
        if self.connected:
            return self._session  # type: ignore[return-value]

        if self._connecting is None:
            self._connecting = asyncio.create_task(
                self._establish(), name="mcp-connect"
            )
        return await asyncio.shield(self._connecting)

    async def _establish(self) -> ClientSession:
        """Start the owning task and wait until its session is initialized."""
        try:
            logger.info(f"Connecting to MCP server at {self.url}...")
            ready: asyncio.Future = asyncio.get_running_loop().create_future()
            self._closing = asyncio.Event()
            self._task = asyncio.create_task(self._run(ready), name="mcp-connection")

            try:
                session = await asyncio.wait_for(
                    asyncio.shield(ready), timeout=self.connect_timeout
                )
            except asyncio.TimeoutError:
                await self._abort(ready)
                raise ConnectionError(
                    f"MCP server at {self.url} did not initialize within "
                    f"{self.connect_timeout}s"
                ) from None

            logger.info("MCP client connected")
            return session
        finally:
            self._connecting = None

    async def _abort(self, ready: asyncio.Future) -> None:
        """Cancel a connection attempt that never became ready."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        if ready.done() and not ready.cancelled():
            ready.exception()

    async def _run(self, ready: asyncio.Future) -> None:
        """Own the transport and session for the lifetime of the connection."""
        try:
            async with streamablehttp_client(self.url) as (read_stream, write_stream, _):
                async with ClientSession(
                    read_stream,
                    write_stream,
                    client_info=Implementation(
                        name=self.client_name, version=__version__
                    ),
                ) as session:
                    await session.initialize()
                    self._session = session
                    ready.set_result(session)
                    await self._closing.wait()
        except Exception as e:
            if not ready.done():
                ready.set_exception(e)
            else:
                logger.warning(f"MCP connection to {self.url} lost: {e}")
        finally:
            self._session = None
            if not ready.done():
                ready.set_exception(ConnectionError("MCP connection closed"))

    async def list_tools(self) -> list[Any]:
        """List the tools offered by the MCP server.

        Returns:
            list: ``mcp.types.Tool`` objects in the order the server reports them
        """
        session = await self.connect()
        result = await session.list_tools()
        return list(result.tools)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """Invoke a tool on the MCP server.

        Args:
            name: Tool name
            arguments: Parsed tool arguments

        Returns:
            mcp.types.CallToolResult: The raw tool result
        """
        session = await self.connect()
        return await session.call_tool(name, arguments)

    async def close(self) -> None:
        """Close the connection and wait for the owning task to finish."""
        if self._task is None:
            return

        self._closing.set()
        try:
            await self._task
        finally:
            self._task = None
            self._session = None
        logger.debug("MCP connection closed")
