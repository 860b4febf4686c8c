"""Error taxonomy for toolbridge-server.

Only ConfigurationError and ModelCallError ever reach a caller. The tool
related errors are raised internally and converted into tool messages so the
model can see what went wrong and correct itself.
"""


class ToolbridgeError(Exception):
    """Base class for all toolbridge-server errors."""


class ConfigurationError(ToolbridgeError):
    """A required setting is missing or invalid. Fatal at startup."""


class ToolCatalogUnavailable(ToolbridgeError):
    """Tool discovery against the tool host failed.

    Non-fatal: the catalog degrades to an empty tool set and discovery is
    retried on the next use.
    """


class ArgumentParseError(ToolbridgeError):
    """The arguments of a tool call could not be parsed into a JSON object."""

    def __init__(self, tool_name: str, detail: str) -> None:
        self.tool_name = tool_name
        self.detail = detail
        super().__init__(f"Invalid arguments for tool '{tool_name}': {detail}")


class ToolExecutionError(ToolbridgeError):
    """Invoking a tool on the tool host failed."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        self.message = message
        super().__init__(f"Tool execution failed: {message}")


class ModelCallError(ToolbridgeError):
    """The completion service call failed; the request cannot proceed."""

    def __init__(self, message: str, code: str = "model_error") -> None:
        self.code = code
        self.message = message
        super().__init__(message)
