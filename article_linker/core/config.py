"""Application configuration loaded from environment variables.

All configuration is via environment variables (or a local .env file).
The link injection engine itself reads no settings; only the HTTP layer
uses them to fill in request defaults.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Article Linker")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # Server
    port: int = Field(default=8000, description="Port to bind to")
    host: str = Field(default="0.0.0.0", description="Host to bind to")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format: json or text")

    # CORS
    frontend_url: str | None = Field(
        default=None,
        description="Frontend origin allowed by CORS (all origins when unset)",
    )

    # Link injection defaults
    default_locale: str = Field(
        default="pt-BR",
        description="Locale used to build article URLs when a request omits it",
    )
    max_links_per_article: int = Field(
        default=1,
        ge=0,
        description="Link budget per related article when a request omits it",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
