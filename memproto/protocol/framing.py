"""
Reply framing

Decides when the bytes read so far form one complete server reply, so the
socket knows when to stop reading.
"""

from .constants import (
    COMMAND_TERMINATOR,
    END_RESPONSE,
    PROTOCOL_ENCODING,
    STAT_RESPONSE,
    VALUE_RESPONSE,
)
from .parser import ends_with_marker, starts_with_marker

_TERMINATOR = COMMAND_TERMINATOR.encode(PROTOCOL_ENCODING)
_END_LINE = (END_RESPONSE + COMMAND_TERMINATOR).encode(PROTOCOL_ENCODING)


def _value_blocks_complete(buffer: bytes) -> bool:
    # Walk VALUE headers, skipping data blocks by their declared length
    pos = 0
    while pos < len(buffer):
        line_end = buffer.find(_TERMINATOR, pos)
        if line_end == -1:
            return False
        line = buffer[pos:line_end]
        pos = line_end + len(_TERMINATOR)

        if line + _TERMINATOR == _END_LINE:
            return pos == len(buffer)

        parts = line.split(b" ")
        if not starts_with_marker(line, VALUE_RESPONSE) or len(parts) < 4:
            # Not a VALUE block; an error line ends the reply
            return pos == len(buffer)
        try:
            length = int(parts[3])
        except ValueError:
            return pos == len(buffer)
        if length < 0:
            return pos == len(buffer)
        pos += length + len(_TERMINATOR)
    return False


def reply_complete(buffer: bytes) -> bool:
    """
    Check if buffer holds a complete reply.

    Single-line replies are complete at the first terminator. VALUE and
    STAT replies are complete once their closing END line has arrived.
    """
    if not ends_with_marker(buffer, _TERMINATOR):
        return False

    if starts_with_marker(buffer, VALUE_RESPONSE + " "):
        return _value_blocks_complete(buffer)

    if starts_with_marker(buffer, STAT_RESPONSE + " "):
        return ends_with_marker(buffer, _TERMINATOR + _END_LINE)

    return True
