"""
Command Socket Module

Owns one blocking TCP connection to one memcached endpoint and performs
one send/receive cycle per call.

Transport faults are not raised to the caller. Instead every subscribed
failure handler is called synchronously with a CommunicationFailure, and
send() returns None so the caller can still classify the (absent) reply.
"""

import logging
import socket
from typing import Callable, List, Optional

from ..config.settings import settings
from ..protocol.commands import CommunicationFailure, FailureHandler
from ..protocol.framing import reply_complete

logger = logging.getLogger(__name__)


class CommandSocket:
    """
    Synchronous socket wrapper for a single server endpoint.

    The connection is opened on the first send() and reused afterwards.
    After a fault the connection is dropped; there is no reconnect loop.

    Usage:
        with CommandSocket("127.0.0.1", 11211) as cmd_socket:
            cmd_socket.subscribe(on_failure)
            raw = cmd_socket.send(b"version\\r\\n")

    Attributes:
        host: Server address
        port: Server port
        timeout: Read/write timeout in seconds (None blocks indefinitely)
        connect_timeout: Connect timeout in seconds (None blocks indefinitely)
    """

    def __init__(
            self,
            host: str,
            port: int,
            timeout: Optional[float] = None,
            connect_timeout: Optional[float] = None,
            buffer_size: Optional[int] = None,
            is_complete: Callable[[bytearray], bool] = reply_complete,
    ):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.buffer_size = buffer_size if buffer_size is not None else settings.READ_BUFFER_SIZE
        self._is_complete = is_complete
        self._socket: Optional[socket.socket] = None
        self._handlers: List[FailureHandler] = []

    def subscribe(self, handler: FailureHandler) -> None:
        """Register a handler called as handler(sender, failure) on transport faults."""
        self._handlers.append(handler)

    def unsubscribe(self, handler: FailureHandler) -> None:
        """Remove a previously registered failure handler."""
        self._handlers.remove(handler)

    @property
    def connected(self) -> bool:
        return self._socket is not None

    def connect(self) -> None:
        """Open the connection if it is not already open."""
        if self._socket is not None:
            return
        sock = socket.create_connection(
            (self.host, self.port),
            timeout=self.connect_timeout,
        )
        sock.settimeout(self.timeout)
        self._socket = sock
        logger.debug(f"Connected to {self.host}:{self.port}")

    def close(self) -> None:
        """Close the connection."""
        if self._socket is None:
            return
        try:
            self._socket.close()
        except OSError as exc:
            logger.debug(f"Error closing socket to {self.host}:{self.port}: {exc}")
        finally:
            self._socket = None

    def send(self, data: bytes) -> Optional[bytes]:
        """
        Send one request and read one complete reply.

        Args:
            data: The framed request bytes

        Returns:
            The raw reply bytes, or None if a transport fault occurred.
        """
        try:
            self.connect()
            self._socket.sendall(data)
            return self._receive()
        except OSError as exc:
            self.close()
            self._fire_failure(exc)
            return None

    def _receive(self) -> bytes:
        reply = bytearray()
        while not self._is_complete(reply):
            chunk = self._socket.recv(self.buffer_size)
            if not chunk:
                raise ConnectionError("connection closed by server")
            reply += chunk
        return bytes(reply)

    def _fire_failure(self, exc: OSError) -> None:
        failure = CommunicationFailure(
            host=self.host,
            port=self.port,
            error=exc,
            message=f"Communication with {self.host}:{self.port} failed: {exc}",
        )
        logger.warning(failure.message)
        for handler in list(self._handlers):
            handler(self, failure)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
