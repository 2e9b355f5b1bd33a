"""
memproto: memcached text-protocol command processor

Builds memcached-style commands, sends them over a single TCP
connection, and classifies the raw reply into a small set of statuses.
"""

from .protocol.commands import (
    CommandResponse,
    CommandResponseStatus,
    CommandType,
    CommunicationFailure,
)
from .protocol.processor import CommandProcessor

__version__ = "1.0.0"

__all__ = [
    "CommandProcessor",
    "CommandResponse",
    "CommandResponseStatus",
    "CommandType",
    "CommunicationFailure",
]
