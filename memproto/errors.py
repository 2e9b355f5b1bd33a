"""Exception hierarchy for memproto."""


class MemprotoError(Exception):
    """Base class for all memproto errors."""


class UnknownCommandError(MemprotoError, LookupError):
    """Raised when a command has no protocol template (a programming error)."""

    def __init__(self, command):
        super().__init__(f"no command format registered for {command!r}")
        self.command = command


class ProtocolError(MemprotoError):
    """Raised when a reply cannot be parsed into the expected shape."""


class SerializationError(MemprotoError):
    """Raised when a payload cannot be serialized or deserialized."""
