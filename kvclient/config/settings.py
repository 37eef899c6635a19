"""
KV-Cache Client Configuration Settings

This module contains all configuration constants for the client.
Values can be overridden through environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Client configuration settings."""

    # Network settings
    HOST: str = os.environ.get("KV_CLIENT_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("KV_CLIENT_PORT", "7171"))
    TIMEOUT: float = float(os.environ.get("KV_CLIENT_TIMEOUT", "5.0"))  # Seconds per round trip
    READ_BUFFER_SIZE: int = 1024 * 1024  # Largest single response line

    # Query settings
    DEFAULT_PAGE_SIZE: int = int(os.environ.get("KV_CLIENT_PAGE_SIZE", "1024"))
    DEFAULT_CACHE: str = os.environ.get("KV_CLIENT_CACHE", "default")

    # Logging settings
    DEBUG: bool = os.environ.get("KV_CLIENT_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("KV_CLIENT_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
