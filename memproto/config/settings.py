"""
memproto Configuration Settings

This module contains the configuration defaults for the command processor.
Values can be overridden through environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _optional_float(name: str) -> Optional[float]:
    value = os.environ.get(name, "").strip()
    return float(value) if value else None


@dataclass
class Settings:
    """Client configuration settings."""

    # Network settings
    HOST: str = os.environ.get("MEMPROTO_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("MEMPROTO_PORT", "11211"))

    # Socket settings (None = blocking, no timeout)
    SOCKET_TIMEOUT: Optional[float] = _optional_float("MEMPROTO_SOCKET_TIMEOUT")
    CONNECT_TIMEOUT: Optional[float] = _optional_float("MEMPROTO_CONNECT_TIMEOUT")
    READ_BUFFER_SIZE: int = 4096

    # Logging settings
    DEBUG: bool = os.environ.get("MEMPROTO_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("MEMPROTO_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
