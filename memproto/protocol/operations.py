"""
Specialised Command Processors

Thin subclasses of CommandProcessor for the command families that carry
payloads or return values. Values are serialised with the processor's
serializer and base64-encoded so the data block stays ASCII.
"""

import base64
import binascii
from typing import Any, Dict, Optional

from ..errors import ProtocolError, SerializationError
from .commands import (
    ARITHMETIC_COMMANDS,
    RETRIEVAL_COMMANDS,
    STORAGE_COMMANDS,
    CommandResponse,
    CommandType,
)
from .constants import COMMAND_TERMINATOR, NOT_FOUND_RESPONSE, PROTOCOL_ENCODING
from .parser import parse_value_reply
from .processor import CommandProcessor


class _FamilyProcessor(CommandProcessor):
    family = frozenset()

    def __init__(self, logger, command: CommandType, host: str, port: int, **kwargs):
        if command not in self.family:
            raise ValueError(f"{type(self).__name__} does not support {command!r}")
        super().__init__(logger, command, host, port, **kwargs)


class StorageCommandProcessor(_FamilyProcessor):
    """Processor for set, add, replace, append and prepend."""

    family = STORAGE_COMMANDS

    def set_storage_parameters(self, key: str, value: Any, expiry: int = 0, flags: int = 0) -> bytes:
        """
        Serialise value and build the storage command.

        Args:
            key: Cache key (no whitespace or control characters)
            value: Any value the serializer supports
            expiry: Expiration time in seconds (0 = never)
            flags: Opaque client flags stored with the item
        """
        payload = base64.b64encode(self.serialise_data(value)).decode(PROTOCOL_ENCODING)
        return self.set_command_parameters(key, flags, expiry, len(payload), payload)


class RetrievalCommandProcessor(_FamilyProcessor):
    """Processor for get and gets."""

    family = RETRIEVAL_COMMANDS

    def set_keys(self, *keys: str) -> bytes:
        """Build a retrieval command for one or more keys."""
        if not keys:
            raise ValueError("at least one key is required")
        return self.set_command_parameters(" ".join(keys))

    def get_values(self, response: CommandResponse) -> Dict[str, Any]:
        """
        Decode the values carried by a successful retrieval reply.

        Returns:
            Mapping of key to deserialised value; missing keys are absent.

        Raises:
            ProtocolError: If the reply is not a well-formed VALUE listing
            SerializationError: If a payload cannot be decoded
        """
        if not response.is_ok:
            return {}
        values = {}
        for item in parse_value_reply(response.raw_data):
            try:
                payload = base64.b64decode(item.data, validate=True)
            except binascii.Error as exc:
                raise SerializationError(f"payload for {item.key!r} is not base64") from exc
            values[item.key] = self.deserialise_data(payload)
        return values


class ArithmeticCommandProcessor(_FamilyProcessor):
    """Processor for incr and decr."""

    family = ARITHMETIC_COMMANDS

    def set_arithmetic_parameters(self, key: str, delta: int = 1) -> bytes:
        if delta < 0:
            raise ValueError("delta must be non-negative")
        return self.set_command_parameters(key, delta)

    def current_value(self, response: CommandResponse) -> Optional[int]:
        """
        Return the counter value after the operation.

        Returns None for NOT_FOUND (and for non-OK replies).

        Raises:
            ProtocolError: If an OK reply is not a number
        """
        if not response.is_ok:
            return None
        text = response.response_text
        if text.endswith(COMMAND_TERMINATOR):
            text = text[:-len(COMMAND_TERMINATOR)]
        if text == NOT_FOUND_RESPONSE:
            return None
        try:
            return int(text)
        except ValueError as exc:
            raise ProtocolError(f"unexpected arithmetic reply: {text!r}") from exc
