"""Configuration management with pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOCAL_HOSTNAME = "localhost"


class KeepwarmSettings(BaseSettings):
    """keepwarm application settings loaded from environment variables.

    All settings use the KEEPWARM_ prefix for environment variables.
    """

    # Backend selection
    api_url: str | None = Field(
        default=None,
        description="Explicit API base URL; overrides hostname-based selection",
    )
    page_hostname: str | None = Field(
        default=None,
        description="Hostname the whiteboard client is served from",
    )
    local_api_url: str = Field(
        default="http://localhost:5050",
        description="API base URL used when the client runs on localhost",
    )
    production_api_url: str = Field(
        default="https://collaborative-whiteboard-i6ri.onrender.com",
        description="API base URL used everywhere else",
    )

    # Keepalive configuration
    interval_ms: int = Field(
        default=10 * 60 * 1000,  # 10 minutes
        description="Milliseconds between keepalive pings",
    )
    request_timeout: float = Field(
        default=30.0,
        description="HTTP transport timeout in seconds",
    )
    config_dir: Path = Field(
        default=Path.home() / ".config" / "keepwarm",
        description="Directory for the keepalive PID and status files",
    )

    # Logging configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format: console or json")

    model_config = SettingsConfigDict(
        env_prefix="KEEPWARM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def resolved_api_url(self) -> str:
        """API base URL for the current environment.

        An explicit ``api_url`` wins. Otherwise a client served from
        localhost talks to the local backend and any other host talks to
        the production deployment.
        """
        if self.api_url:
            return self.api_url
        if self.page_hostname == LOCAL_HOSTNAME:
            return self.local_api_url
        return self.production_api_url


# Global settings instance
_settings: KeepwarmSettings | None = None


def get_settings() -> KeepwarmSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = KeepwarmSettings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None
