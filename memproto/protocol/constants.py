"""
Protocol Constants

Fixed text sequences of the memcached text protocol. Every outgoing
command ends with COMMAND_TERMINATOR, and status-bearing replies end with
one of the markers below followed by the terminator.
"""

PROTOCOL_ENCODING = "ascii"

COMMAND_TERMINATOR = "\r\n"

# Reply markers used for status classification
SERVER_SUCCESS_END_RESPONSE = "STORED"
GENERIC_ERROR_RESPONSE = "ERROR"
CLIENT_ERROR_RESPONSE = "CLIENT_ERROR"
SERVER_ERROR_RESPONSE = "SERVER_ERROR"

# Multi-line reply keywords
VALUE_RESPONSE = "VALUE"
STAT_RESPONSE = "STAT"
END_RESPONSE = "END"
NOT_FOUND_RESPONSE = "NOT_FOUND"
