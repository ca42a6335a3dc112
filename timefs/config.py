"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration for the shell and the HTTP app.

    Every field can be set through a ``TIMEFS_`` prefixed environment
    variable, e.g. ``TIMEFS_LOG_LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TIMEFS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Root log level")
    log_format: Literal["text", "json"] = Field(
        default="text", description="Human-readable text or one JSON object per line"
    )

    # Analytics / tree view
    default_top_k: int = Field(
        default=10,
        ge=1,
        description="Entries shown by RECENT_FILES / BIGGEST_TREES when no count is given",
    )
    page_size: int = Field(default=10, ge=1, description="Tree view nodes per page")

    # HTTP server
    host: str = Field(default="127.0.0.1", description="Bind address for `timefs serve`")
    port: int = Field(default=8000, ge=1, le=65535, description="Port for `timefs serve`")


@lru_cache
def get_settings() -> Settings:
    return Settings()
