"""Configuration management for the Pollster service."""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field(default="Pollster")
    version: str = Field(default="0.1.0")
    docs_url: str | None = Field(default="/docs")
    redoc_url: str | None = Field(default="/redoc")
    openapi_url: str = Field(default="/openapi.json")

    database_url: str = Field(default="postgresql+psycopg://pollster:pollster@db:5432/pollster")
    database_echo: bool = Field(default=False)

    enable_metrics: bool = Field(default=True)
    enable_tracing: bool = Field(default=False)
    otel_exporter_endpoint: str | None = Field(default=None)
    audit_log_enabled: bool = Field(default=True)

    jwt_algorithm: str = Field(default="HS256")
    jwt_secret: str = Field(default="change-me-in-production")
    access_token_expire_minutes: int = Field(default=60 * 24 * 30)

    default_page_size: int = Field(default=20)
    max_page_size: int = Field(default=100)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POLLSTER_",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
