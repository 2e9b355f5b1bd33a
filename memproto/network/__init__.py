"""Network module for memproto."""

from .command_socket import CommandSocket

__all__ = ["CommandSocket"]
