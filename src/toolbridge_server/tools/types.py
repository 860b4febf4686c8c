"""Type definitions for the tool layer.

This module contains the dataclasses exchanged between the tool catalog,
the tool executor and the orchestration loop.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ToolDefinition:
    """A tool as declared by the tool host.

    Attributes:
        name: Tool name, unique within the catalog
        description: Human readable description
        input_schema: JSON schema describing the tool arguments
    """

    name: str
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_mcp_tool(tool: Any) -> "ToolDefinition":
        """Create a ToolDefinition from an MCP tool object or dict.

        Args:
            tool: An ``mcp.types.Tool`` or a dict with the same keys

        Returns:
            ToolDefinition: Parsed tool definition

        Raises:
            ValueError: If the tool has no name
        """

        def get_value(obj: Any, key: str, default: Any = None) -> Any:
            if isinstance(obj, dict):
                return obj.get(key, default)
            return getattr(obj, key, default)

        name = get_value(tool, "name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Tool without a name: {tool!r}")

        schema = get_value(tool, "inputSchema")
        if schema is None:
            schema = get_value(tool, "input_schema")

        return ToolDefinition(
            name=name,
            description=get_value(tool, "description") or "",
            input_schema=dict(schema) if isinstance(schema, dict) else {},
        )

    def to_function_schema(self) -> dict[str, Any]:
        """Translate into the completion service's function-schema format."""
        parameters = dict(self.input_schema) or {"type": "object", "properties": {}}
        parameters.setdefault("type", "object")
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


@dataclass
class ToolCall:
    """A request from the model to invoke one tool.

    Attributes:
        id: Opaque identifier, echoed back in the answering tool message
        name: Name of the tool to invoke
        arguments: Raw argument payload as JSON text
    """

    id: str
    name: str
    arguments: str = "{}"

    @staticmethod
    def generate_id() -> str:
        """Generate an identifier for a tool call that arrived without one."""
        return f"call_{uuid.uuid4().hex[:12]}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolCall":
        function = data.get("function", {})
        return cls(
            id=data.get("id") or cls.generate_id(),
            name=function.get("name", ""),
            arguments=function.get("arguments", "{}"),
        )


@dataclass
class ToolResult:
    """Outcome of one tool call.

    A ToolResult is always produced, also on failure. Failures are encoded in
    ``content`` with ``success=False``.
    """

    success: bool
    content: str
