"""Configuration settings for the backend API."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # Ignore extra environment variables
    )

    # API
    api_title: str = "DumpLens Diagram API"
    api_version: str = "1.0.0"
    # Default to common local dev origins (Vite=5173, Next=3000).
    # Can be overridden via env var: CORS_ORIGINS='["http://localhost:5173"]'
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Upstream dump service (serves schema graphs and table rows)
    dump_service_url: str = "http://127.0.0.1:8080"
    dump_service_timeout: float = 30.0

    # Number of (dump_id, database) schema graphs kept in memory
    schema_cache_size: int = 32

    # Raster export
    export_background: str = "#ffffff"

    log_level: str = "INFO"


settings = Settings()
