"""Configuration module for toolbridge-server using pydantic-settings."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from toolbridge_server.errors import ConfigurationError

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant.\n"
    "IMPORTANT: If you need to use a tool, generate the tool call silently.\n"
    'Do NOT describe what you are doing (e.g. do not write "I will check...").\n'
    "Just execute the function."
)


class ToolbridgeSettings(BaseSettings):
    """Main configuration settings for toolbridge-server.

    All settings can be overridden via environment variables with the
    TOOLBRIDGE_ prefix. For example, TOOLBRIDGE_MCP_SERVER_URL will override
    the mcp_server_url setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3002

    # Completion service (Ollama)
    ollama_host: str = "http://localhost:11434"
    model: str = "llama3.2:latest"
    api_key: SecretStr | None = None
    require_api_key: bool = True
    temperature: float = 0.1
    max_tokens: int = 1024

    # Tool host (MCP)
    mcp_server_url: str = "http://localhost:8000/mcp"
    mcp_client_name: str = "toolbridge-server"
    mcp_connect_timeout: float = 10.0

    # Orchestration
    max_steps: int = Field(default=8, ge=1)
    default_system_prompt: str = DEFAULT_SYSTEM_PROMPT

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="TOOLBRIDGE_")

    def validate_credentials(self) -> None:
        """Fail fast when a required credential is absent.

        Raises:
            ConfigurationError: If an API key is required but not configured.
        """
        if not self.require_api_key:
            return
        if self.api_key is None or not self.api_key.get_secret_value().strip():
            raise ConfigurationError(
                "TOOLBRIDGE_API_KEY is missing in environment variables"
            )

    @property
    def completion_headers(self) -> dict[str, str]:
        """HTTP headers sent with every completion service request."""
        if self.api_key is None:
            return {}
        return {"Authorization": f"Bearer {self.api_key.get_secret_value()}"}
