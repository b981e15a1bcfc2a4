"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Health Metrics server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Default to loopback; there is no auth layer in front of the health data.
    hms_host: str = "127.0.0.1"
    hms_port: int = 8001
    hms_log_level: str = "info"
    # If binding to non-loopback, refuse to start unless this is set true.
    hms_allow_insecure_bind: bool = False

    # Health store
    health_store: Literal["apple_health", "mock"] = "mock"
    apple_health_export_path: str = ""

    # Metrics screen
    record_limit: int = 100
    error_policy: Literal["silent", "surface"] = "silent"


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
