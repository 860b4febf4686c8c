"""Execution of single tool calls against the tool host.

Every failure (unparsable arguments, transport errors, tool-side errors) is
turned into a failed ToolResult whose content describes the problem, so the
model can read it and correct itself. ``execute`` never raises.
"""

import json
import logging
from typing import Any

from toolbridge_server.errors import ArgumentParseError, ToolExecutionError
from toolbridge_server.tools import extractor
from toolbridge_server.tools.host import ToolHostConnection
from toolbridge_server.tools.types import ToolCall, ToolResult

logger = logging.getLogger(__name__)


def parse_arguments(tool_call: ToolCall) -> dict[str, Any]:
    """Parse the raw argument payload of a tool call.

    An empty payload is treated as no arguments.

    Raises:
        ArgumentParseError: If the payload is not a JSON object
    """
    raw = tool_call.arguments
    if raw is None or not raw.strip():
        return {}

    try:
        arguments = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ArgumentParseError(tool_call.name, f"malformed JSON ({e.msg})") from e

    if not isinstance(arguments, dict):
        raise ArgumentParseError(
            tool_call.name, f"expected a JSON object, got {type(arguments).__name__}"
        )
    return arguments


def _error_payload(message: str, tool_name: str) -> str:
    return json.dumps(
        {"error": f"{message}. Please check arguments.", "tool": tool_name},
        ensure_ascii=False,
    )


class ToolExecutor:
    """Invokes tools on the tool host and normalizes their results."""

    def __init__(self, connection: ToolHostConnection) -> None:
        self.connection = connection

    async def execute(self, tool_call: ToolCall) -> ToolResult:
        """Execute one tool call.

        Args:
            tool_call: The tool call requested by the model

        Returns:
            ToolResult: Success with the extracted payload, or failure with an
                error description
        """
        logger.info(f"Executing tool: {tool_call.name}")

        try:
            arguments = parse_arguments(tool_call)
        except ArgumentParseError as e:
            logger.warning(f"Rejected tool call {tool_call.id}: {e}")
            return ToolResult(success=False, content=_error_payload(str(e), e.tool_name))

        try:
            raw_result = await self._invoke(tool_call.name, arguments)
        except ToolExecutionError as e:
            logger.warning(f"Tool error ({tool_call.name}): {e.message}")
            return ToolResult(success=False, content=_error_payload(str(e), e.tool_name))

        content = extractor.extract(raw_result)
        if extractor.is_error_result(raw_result):
            logger.warning(f"Tool {tool_call.name} reported an error: {content}")
            return ToolResult(
                success=False,
                content=_error_payload(
                    f"Tool execution failed: {content}", tool_call.name
                ),
            )

        return ToolResult(success=True, content=content)

    async def _invoke(self, name: str, arguments: dict[str, Any]) -> Any:
        """Call the tool host, wrapping any failure in ToolExecutionError."""
        try:
            return await self.connection.call_tool(name, arguments)
        except Exception as e:
            raise ToolExecutionError(name, str(e) or type(e).__name__) from e
