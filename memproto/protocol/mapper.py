"""
Command Mapper

Maps each CommandType to its memcached text-protocol template. Templates
use str.format positional placeholders; storage commands carry their data
block after an embedded line terminator.
"""

from typing import Dict

from ..errors import UnknownCommandError
from .commands import CommandType


COMMAND_FORMATS: Dict[CommandType, str] = {
    # <key>*
    CommandType.GET: "get {0}",
    CommandType.GETS: "gets {0}",
    # <key> <flags> <exptime> <bytes>\r\n<data>
    CommandType.SET: "set {0} {1} {2} {3}\r\n{4}",
    CommandType.ADD: "add {0} {1} {2} {3}\r\n{4}",
    CommandType.REPLACE: "replace {0} {1} {2} {3}\r\n{4}",
    CommandType.APPEND: "append {0} {1} {2} {3}\r\n{4}",
    CommandType.PREPEND: "prepend {0} {1} {2} {3}\r\n{4}",
    # <key> <flags> <exptime> <bytes> <cas unique>\r\n<data>
    CommandType.CAS: "cas {0} {1} {2} {3} {4}\r\n{5}",
    CommandType.DELETE: "delete {0}",
    CommandType.INCR: "incr {0} {1}",
    CommandType.DECR: "decr {0} {1}",
    CommandType.TOUCH: "touch {0} {1}",
    CommandType.FLUSH_ALL: "flush_all",
    CommandType.STATS: "stats",
    CommandType.VERSION: "version",
}


class CommandMapper:
    """Lookup of protocol templates by command identifier."""

    def get_command_format(self, command: CommandType) -> str:
        """
        Return the template for a command.

        Raises:
            UnknownCommandError: If the command has no registered template
        """
        try:
            return COMMAND_FORMATS[command]
        except (KeyError, TypeError):
            raise UnknownCommandError(command) from None
