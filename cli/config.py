"""Configuration management for the CLI tool."""

from pydantic import BaseModel, Field

CONTEXT_PATH = "/api/v1/ai/find-context"
GLOBAL_CONTEXT_PATH = "/api/v1/ai/find-context-global"


class CLIConfig(BaseModel):
    """CLI configuration settings."""

    host: str = Field(
        default="localhost",
        description="Server host",
    )
    port: int = Field(
        default=8080,
        description="Server port",
    )
    user_id: int = Field(
        description="User id sent as the identity header",
        gt=0,
    )
    user_id_header: str = Field(
        default="X-User-Id",
        description="Header the server reads the requester id from",
    )
    room_id: int | None = Field(
        default=None,
        description="Room to search; omit to search every room of the user",
    )
    timeout: float = Field(
        default=60.0,
        description="HTTP timeout in seconds",
    )

    @property
    def base_url(self) -> str:
        """Get the base URL for the API."""
        return f"http://{self.host}:{self.port}"

    @property
    def context_url(self) -> str:
        """URL of the endpoint matching the configured scope."""
        path = GLOBAL_CONTEXT_PATH if self.room_id is None else CONTEXT_PATH
        return f"{self.base_url}{path}"
