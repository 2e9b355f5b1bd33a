"""
Reply Parser Module

This module classifies raw server replies into a CommandResponseStatus and
parses the VALUE blocks returned by retrieval commands.

Classification is an ordered decision procedure run once per reply:

    1. no reply at all                      -> ERROR
    2. ends with   STORED\\r\\n              -> OK
    3. ends with   ERROR\\r\\n               -> ERROR
    4. starts with CLIENT_ERROR             -> CLIENT_ERROR
    5. starts with SERVER_ERROR             -> SERVER_ERROR
    6. anything else                        -> OK

Rule 6 is deliberately permissive: data-bearing replies (and malformed or
truncated ones) are passed through as OK rather than reported as failures.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from ..errors import ProtocolError
from .commands import CommandResponse, CommandResponseStatus
from .constants import (
    CLIENT_ERROR_RESPONSE,
    COMMAND_TERMINATOR,
    END_RESPONSE,
    GENERIC_ERROR_RESPONSE,
    PROTOCOL_ENCODING,
    SERVER_ERROR_RESPONSE,
    SERVER_SUCCESS_END_RESPONSE,
    VALUE_RESPONSE,
)

logger = logging.getLogger(__name__)

Marker = Union[str, bytes]


def _marker_bytes(marker: Marker) -> bytes:
    if isinstance(marker, str):
        return marker.encode(PROTOCOL_ENCODING)
    return bytes(marker)


def ends_with_marker(data: Optional[bytes], marker: Marker) -> bool:
    """
    Check whether the last len(marker) bytes of data equal marker.

    Returns False for None or for data shorter than the marker.
    """
    if data is None:
        return False
    expected = _marker_bytes(marker)
    if len(data) < len(expected):
        return False
    window = data[len(data) - len(expected):]
    return window == expected


def starts_with_marker(data: Optional[bytes], marker: Marker) -> bool:
    """
    Check whether the first len(marker) bytes of data equal marker.

    Returns False for None or for data shorter than the marker.
    """
    if data is None:
        return False
    expected = _marker_bytes(marker)
    if len(data) < len(expected):
        return False
    window = data[:len(expected)]
    return window == expected


SUCCESS_END = SERVER_SUCCESS_END_RESPONSE + COMMAND_TERMINATOR
GENERIC_ERROR_END = GENERIC_ERROR_RESPONSE + COMMAND_TERMINATOR


class ResponseParser:
    """
    Classifier for raw memcached text-protocol replies.

    Usage:
        parser = ResponseParser()
        response = parser.process_response(b"STORED\\r\\n")
        response.status  # CommandResponseStatus.OK
    """

    def determine_status(self, raw: Optional[bytes]) -> CommandResponseStatus:
        """Classify a raw reply. Total: every input maps to exactly one status."""
        if raw is None:
            return CommandResponseStatus.ERROR

        if ends_with_marker(raw, SUCCESS_END):
            return CommandResponseStatus.OK

        if ends_with_marker(raw, GENERIC_ERROR_END):
            return CommandResponseStatus.ERROR

        if starts_with_marker(raw, CLIENT_ERROR_RESPONSE):
            return CommandResponseStatus.CLIENT_ERROR

        if starts_with_marker(raw, SERVER_ERROR_RESPONSE):
            return CommandResponseStatus.SERVER_ERROR

        return CommandResponseStatus.OK

    def process_response(self, raw: Optional[bytes]) -> CommandResponse:
        """
        Build a CommandResponse from a raw reply.

        raw_data always carries the untouched reply; response_text is only
        decoded when the status is OK.
        """
        response = CommandResponse(status=self.determine_status(raw), raw_data=raw)
        if response.status == CommandResponseStatus.OK:
            response.response_text = raw.decode(PROTOCOL_ENCODING, errors="replace")
        return response


@dataclass
class ValueItem:
    """One VALUE block from a retrieval reply."""
    key: str
    flags: int
    data: bytes
    cas: Optional[int] = None


def parse_value_reply(raw: Optional[bytes]) -> List[ValueItem]:
    """
    Parse a get/gets reply into its VALUE blocks.

    Format:
        VALUE <key> <flags> <bytes> [<cas unique>]\\r\\n
        <data block>\\r\\n
        ...
        END\\r\\n

    Raises:
        ProtocolError: If the reply is missing, truncated or malformed
    """
    if raw is None:
        raise ProtocolError("no reply to parse")

    terminator = _marker_bytes(COMMAND_TERMINATOR)
    end_line = _marker_bytes(END_RESPONSE)
    value_keyword = _marker_bytes(VALUE_RESPONSE)

    items: List[ValueItem] = []
    pos = 0
    while True:
        line_end = raw.find(terminator, pos)
        if line_end == -1:
            raise ProtocolError("reply truncated before END")
        line = raw[pos:line_end]
        pos = line_end + len(terminator)

        if line == end_line:
            if pos != len(raw):
                raise ProtocolError("unexpected data after END")
            return items

        parts = line.split(b" ")
        if parts[0] != value_keyword or len(parts) not in (4, 5):
            raise ProtocolError(f"unexpected reply line: {line!r}")

        try:
            key = parts[1].decode(PROTOCOL_ENCODING)
            flags = int(parts[2])
            length = int(parts[3])
            cas = int(parts[4]) if len(parts) == 5 else None
        except (UnicodeDecodeError, ValueError) as exc:
            raise ProtocolError(f"malformed VALUE header: {line!r}") from exc
        if length < 0:
            raise ProtocolError(f"negative data length in VALUE header: {line!r}")

        data = raw[pos:pos + length]
        if len(data) != length or raw[pos + length:pos + length + len(terminator)] != terminator:
            raise ProtocolError(f"data block for {key!r} is truncated")
        pos += length + len(terminator)

        items.append(ValueItem(key=key, flags=flags, data=data, cas=cas))
