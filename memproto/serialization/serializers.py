"""
Payload Serializers

Convert application values to and from the bytes stored by set-style
commands. Serializers are pluggable: anything with serialize() and
deserialize() can be handed to a CommandProcessor.
"""

import json
import pickle
from typing import Any, Protocol

from ..errors import SerializationError


class Serializer(Protocol):
    def serialize(self, value: Any) -> bytes: ...
    def deserialize(self, data: bytes) -> Any: ...


class PickleSerializer:
    """
    General-purpose object-graph serializer.

    Only deserialize data written by a trusted peer; unpickling can
    execute arbitrary code.
    """

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def serialize(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise SerializationError(f"cannot serialize {type(value).__name__}: {exc}") from exc

    def deserialize(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, ValueError, TypeError) as exc:
            raise SerializationError(f"cannot deserialize payload: {exc}") from exc


class JsonSerializer:
    """UTF-8 JSON serializer for JSON-shaped values."""

    def serialize(self, value: Any) -> bytes:
        try:
            return json.dumps(value, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"cannot serialize {type(value).__name__}: {exc}") from exc

    def deserialize(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise SerializationError(f"cannot deserialize payload: {exc}") from exc
