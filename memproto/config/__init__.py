"""Configuration module for memproto."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
