"""Protocol module for memproto."""

from .commands import (
    CommandResponse,
    CommandResponseStatus,
    CommandType,
    CommunicationFailure,
)
from .mapper import CommandMapper
from .parser import ResponseParser, ends_with_marker, parse_value_reply, starts_with_marker
from .operations import (
    ArithmeticCommandProcessor,
    RetrievalCommandProcessor,
    StorageCommandProcessor,
)
from .processor import CommandProcessor

__all__ = [
    "ArithmeticCommandProcessor",
    "CommandMapper",
    "CommandProcessor",
    "CommandResponse",
    "CommandResponseStatus",
    "CommandType",
    "CommunicationFailure",
    "ResponseParser",
    "RetrievalCommandProcessor",
    "StorageCommandProcessor",
    "ends_with_marker",
    "parse_value_reply",
    "starts_with_marker",
]
