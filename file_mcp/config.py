"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central settings pulled from .env / environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_env: str = "development"
    log_level: str = "INFO"

    # MCP
    mcp_server_name: str = "File MCP Server"
    mcp_server_version: str = "1.0.0"

    # Tracing
    sentry_dsn: str | None = None
    """Sentry DSN. When unset, spans and exceptions are kept local."""

    sentry_traces_sample_rate: float = 1.0
    sentry_profiles_sample_rate: float = 1.0

    # Tools
    list_stat_concurrency: int = 32
    """Maximum number of concurrent stat calls issued by ``listfiles``."""

    # SSE transport
    fastapi_host: str = "0.0.0.0"
    fastapi_port: int = 8000


settings = Settings()
