"""
Command Processor Module

Composes the command mapper, protocol constants and command socket into
a one-shot command executor:

    processor = CommandProcessor(logger, CommandType.DELETE, "127.0.0.1", 11211)
    processor.subscribe(on_failure)
    processor.set_command_parameters("mykey")
    response = processor.execute_command()

Transport faults are reported twice: execute_command() returns an ERROR
response, and subscribed failure handlers receive the CommunicationFailure
raised by the owned socket.
"""

import logging
from typing import Any, List, Optional

from ..config.settings import settings
from ..network.command_socket import CommandSocket
from ..serialization.serializers import PickleSerializer, Serializer
from .commands import (
    CommandResponse,
    CommandType,
    CommunicationFailure,
    FailureHandler,
)
from .constants import COMMAND_TERMINATOR, PROTOCOL_ENCODING
from .mapper import CommandMapper
from .parser import ResponseParser

module_logger = logging.getLogger(__name__)


class CommandProcessor:
    """
    Executes one memcached text-protocol command against one server.

    A processor owns exactly one CommandSocket for its lifetime. It is not
    safe to call execute_command() concurrently on the same instance; use
    one processor per in-flight command.

    Attributes:
        command: The CommandType this processor executes
        host: Server address
        port: Server port
        logger: Logger receiving progress messages and swallowed exceptions
    """

    def __init__(
            self,
            logger: Optional[logging.Logger],
            command: CommandType,
            host: str,
            port: int,
            serializer: Optional[Serializer] = None,
            timeout: Optional[float] = settings.SOCKET_TIMEOUT,
            connect_timeout: Optional[float] = settings.CONNECT_TIMEOUT,
    ):
        self.logger = logger if logger is not None else module_logger
        self.command = command
        self.host = host
        self.port = port
        self.serializer = serializer if serializer is not None else PickleSerializer()

        self._mapper = CommandMapper()
        self._parser = ResponseParser()
        self._command_to_execute: Optional[bytes] = None
        self._close_after_send = False
        self._handlers: List[FailureHandler] = []

        self._cmd_socket = CommandSocket(
            host,
            port,
            timeout=timeout,
            connect_timeout=connect_timeout,
        )
        self._cmd_socket.subscribe(self._on_socket_failure)

    @property
    def protocol_socket(self) -> CommandSocket:
        return self._cmd_socket

    @property
    def command_to_execute(self) -> Optional[bytes]:
        """The cached formatted command, or None if not built yet."""
        return self._command_to_execute

    def subscribe(self, handler: FailureHandler) -> None:
        """Register a handler called as handler(sender, failure) on transport faults."""
        self._handlers.append(handler)

    def unsubscribe(self, handler: FailureHandler) -> None:
        """Remove a previously registered failure handler."""
        self._handlers.remove(handler)

    def serialise_data(self, value: Any) -> bytes:
        """Convert an application value into payload bytes."""
        self.logger.info("Serialising data")
        return self.serializer.serialize(value)

    def deserialise_data(self, data: bytes) -> Any:
        """Convert payload bytes back into an application value."""
        self.logger.info("Deserialising data")
        return self.serializer.deserialize(data)

    def set_command_parameters(self, *args: Any) -> bytes:
        """
        Build and cache the formatted command.

        Args are substituted positionally into the command template; with
        no args the template is used as-is. The line terminator is always
        appended.

        Returns:
            The encoded command bytes

        Raises:
            UnknownCommandError: If the command has no template
        """
        self.logger.info("Setting command parameters")
        template = self._mapper.get_command_format(self.command)
        if args:
            command_text = template.format(*args)
        else:
            command_text = template
        command_text += COMMAND_TERMINATOR
        # An unsubstituted multi-line template gets one reply per line;
        # the extra replies must not leak into the next command
        self._close_after_send = not args and COMMAND_TERMINATOR in template

        self.logger.info(f"Cmd To Execute: [{command_text}]")

        self._command_to_execute = command_text.encode(PROTOCOL_ENCODING)
        return self._command_to_execute

    def execute_command(self) -> CommandResponse:
        """
        Send the formatted command and classify the reply.

        Builds a parameterless command first if set_command_parameters()
        was never called. Never raises on transport trouble: any exception
        during transmission is logged and reported as an ERROR response.
        """
        if not self._command_to_execute:
            self.set_command_parameters()

        try:
            raw = self._cmd_socket.send(self._command_to_execute)
            response = self.process_response(raw)
        except Exception as exc:
            self.logger.exception(f"Error executing {self.command.name}: {exc}")
            response = CommandResponse.error()
        finally:
            if self._close_after_send:
                self._cmd_socket.close()
        return response

    def process_response(self, raw: Optional[bytes]) -> CommandResponse:
        """Classify a raw reply. Subclasses may extend this."""
        self.logger.info("Processing Response")

        response = self._parser.process_response(raw)

        self.logger.info(
            f"Response Text :[{response.response_text}], "
            f"Response Status: [{response.status.name}]"
        )
        return response

    def close(self) -> None:
        """Close the owned connection."""
        self._cmd_socket.close()

    def _on_socket_failure(self, sender: object, failure: CommunicationFailure) -> None:
        # Re-deliver with the original sender
        for handler in list(self._handlers):
            handler(sender, failure)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
