"""
Protocol Command and Response Definitions

This module defines the data structures shared by the command processor:
the supported command identifiers, the classified response, and the
communication failure event raised on transport faults.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional


class CommandType(Enum):
    """Enumeration of supported server operations."""
    GET = auto()
    GETS = auto()
    SET = auto()
    ADD = auto()
    REPLACE = auto()
    APPEND = auto()
    PREPEND = auto()
    CAS = auto()
    DELETE = auto()
    INCR = auto()
    DECR = auto()
    TOUCH = auto()
    FLUSH_ALL = auto()
    STATS = auto()
    VERSION = auto()


STORAGE_COMMANDS = frozenset({
    CommandType.SET,
    CommandType.ADD,
    CommandType.REPLACE,
    CommandType.APPEND,
    CommandType.PREPEND,
})

RETRIEVAL_COMMANDS = frozenset({CommandType.GET, CommandType.GETS})

ARITHMETIC_COMMANDS = frozenset({CommandType.INCR, CommandType.DECR})


class CommandResponseStatus(Enum):
    """Enumeration of classified reply statuses."""
    OK = "OK"
    ERROR = "ERROR"
    CLIENT_ERROR = "CLIENT_ERROR"
    SERVER_ERROR = "SERVER_ERROR"


@dataclass
class CommandResponse:
    """
    Represents the outcome of one executed command.

    Attributes:
        status: Classified reply status
        raw_data: The untouched reply bytes (None when nothing was received)
        response_text: The reply decoded as text, only populated for OK
    """
    status: CommandResponseStatus = CommandResponseStatus.ERROR
    raw_data: Optional[bytes] = None
    response_text: str = ""

    @property
    def is_ok(self) -> bool:
        """Check if the reply was classified as OK."""
        return self.status == CommandResponseStatus.OK

    @classmethod
    def error(cls, raw_data: Optional[bytes] = None) -> "CommandResponse":
        """Create an ERROR response."""
        return cls(status=CommandResponseStatus.ERROR, raw_data=raw_data)


@dataclass(frozen=True)
class CommunicationFailure:
    """
    Event payload delivered to failure handlers when the transport
    cannot complete a send/receive cycle.

    Attributes:
        host: Server address the socket was talking to
        port: Server port
        error: The underlying exception
        message: Human readable description
    """
    host: str
    port: int
    error: BaseException
    message: str = ""

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}"


# handler(sender, failure); sender is the object that detected the fault
FailureHandler = Callable[[object, CommunicationFailure], None]
