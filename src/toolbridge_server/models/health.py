"""Health check response model."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of toolbridge-server.
        mcp_connected: Whether the MCP session is currently open.
        tools_loaded: Number of tools in the catalog.
        catalog_state: uninitialized, populated or empty_after_failure.
        ollama_connected: Whether Ollama answered a connectivity check.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of toolbridge-server")
    model: str = Field(..., description="Model used for completions")
    mcp_server_url: str = Field(..., description="MCP server URL")
    mcp_connected: bool = Field(default=False, description="Whether MCP is connected")
    tools_loaded: int = Field(default=0, description="Number of tools in the catalog")
    catalog_state: str = Field(
        default="uninitialized", description="State of the tool catalog"
    )
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is connected",
    )

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
