"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import logging
import socket
import socketserver
import threading
import time
from contextlib import closing
from typing import Dict, Generator, List, Optional, Tuple

import pytest

from memproto.protocol.processor import CommandProcessor


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Fake memcached server
# ============================================================================

# Canned reply sentinels
DROP = object()   # close the connection without replying
HANG = object()   # never reply, keep the connection open

_STORAGE_NAMES = {"set", "add", "replace", "append", "prepend", "cas"}


class _FakeMemcachedHandler(socketserver.StreamRequestHandler):

    def handle(self):
        fake = self.server.fake
        with fake.lock:
            fake.connections += 1

        while True:
            line = self.rfile.readline()
            if not line:
                return

            request = line
            parts = line.rstrip(b"\r\n").split(b" ")
            name = parts[0].decode("ascii", "replace").lower()
            block = None
            if name in _STORAGE_NAMES and len(parts) >= 5 and parts[4].isdigit():
                block = self.rfile.read(int(parts[4]) + 2)
                request += block

            with fake.lock:
                fake.received.append(request)
                if fake.replies:
                    reply = fake.replies.pop(0)
                else:
                    reply = fake.handle_command(name, [p.decode("ascii", "replace") for p in parts[1:]], block)

            if reply is DROP:
                return
            if reply is HANG:
                continue
            self._write(reply, fake.chunk_size)

    def _write(self, reply: bytes, chunk_size: int) -> None:
        if not chunk_size:
            self.wfile.write(reply)
            return
        for start in range(0, len(reply), chunk_size):
            self.wfile.write(reply[start:start + chunk_size])
            time.sleep(0.005)


class _ThreadingServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True


class FakeMemcachedServer:
    """
    Minimal memcached text-protocol server for tests.

    Queued canned replies (bytes, DROP or HANG) are served first, one per
    request; once the queue is empty requests are answered from an
    in-memory dict.

    Usage:
        memcached_server.replies.append(b"STORED\\r\\n")
        memcached_server.data["counter"] = [0, b"10", 1]
    """

    DROP = DROP
    HANG = HANG

    def __init__(self):
        self.lock = threading.Lock()
        self.replies: List[object] = []
        self.received: List[bytes] = []
        self.data: Dict[str, list] = {}   # key -> [flags, data, cas unique]
        self.connections = 0
        self.chunk_size = 0
        self._next_cas = 1
        self._server: Optional[_ThreadingServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        return self._server.server_address

    @property
    def host(self) -> str:
        return self.address[0]

    @property
    def port(self) -> int:
        return self.address[1]

    def start(self) -> None:
        self._server = _ThreadingServer(('127.0.0.1', 0), _FakeMemcachedHandler)
        self._server.fake = self
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        self._thread.join(timeout=1)
        self._server = None

    def _cas(self) -> int:
        value = self._next_cas
        self._next_cas += 1
        return value

    def handle_command(self, name: str, args: List[str], block: Optional[bytes]) -> bytes:
        if name in _STORAGE_NAMES:
            return self._storage(name, args, block)
        if name in ("get", "gets"):
            out = b""
            for key in args:
                if key in self.data:
                    flags, value, cas = self.data[key]
                    header = f"VALUE {key} {flags} {len(value)}"
                    if name == "gets":
                        header += f" {cas}"
                    out += header.encode() + b"\r\n" + value + b"\r\n"
            return out + b"END\r\n"
        if name == "delete" and len(args) == 1:
            return b"DELETED\r\n" if self.data.pop(args[0], None) else b"NOT_FOUND\r\n"
        if name in ("incr", "decr") and len(args) == 2:
            return self._arithmetic(name, args[0], args[1])
        if name == "touch" and len(args) == 2:
            return b"TOUCHED\r\n" if args[0] in self.data else b"NOT_FOUND\r\n"
        if name == "flush_all":
            self.data.clear()
            return b"OK\r\n"
        if name == "version":
            return b"VERSION 1.6.21\r\n"
        if name == "stats":
            return f"STAT pid 4242\r\nSTAT curr_items {len(self.data)}\r\nEND\r\n".encode()
        return b"ERROR\r\n"

    def _storage(self, name: str, args: List[str], block: Optional[bytes]) -> bytes:
        if block is None or len(args) < 4 or not block.endswith(b"\r\n"):
            return b"CLIENT_ERROR bad command line format\r\n"
        key, flags = args[0], int(args[1])
        value = block[:-2]
        existing = self.data.get(key)

        if name == "add" and existing:
            return b"NOT_STORED\r\n"
        if name in ("replace", "append", "prepend") and not existing:
            return b"NOT_STORED\r\n"
        if name == "cas":
            if not existing:
                return b"NOT_FOUND\r\n"
            if int(args[4]) != existing[2]:
                return b"EXISTS\r\n"
        if name == "append":
            flags, value = existing[0], existing[1] + value
        elif name == "prepend":
            flags, value = existing[0], value + existing[1]

        self.data[key] = [flags, value, self._cas()]
        return b"STORED\r\n"

    def _arithmetic(self, name: str, key: str, delta: str) -> bytes:
        if key not in self.data:
            return b"NOT_FOUND\r\n"
        item = self.data[key]
        try:
            current = int(item[1])
        except ValueError:
            return b"CLIENT_ERROR cannot increment or decrement non-numeric value\r\n"
        current = current + int(delta) if name == "incr" else max(0, current - int(delta))
        item[1] = str(current).encode()
        return item[1] + b"\r\n"


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def memcached_server() -> Generator[FakeMemcachedServer, None, None]:
    """Start a fake memcached server on a random free port."""
    fake = FakeMemcachedServer()
    fake.start()
    yield fake
    fake.stop()


@pytest.fixture
def closed_port() -> int:
    """A local port with nothing listening on it."""
    return find_free_port()


# ============================================================================
# Processor Fixtures
# ============================================================================

@pytest.fixture
def test_logger() -> logging.Logger:
    return logging.getLogger("memproto.tests")


@pytest.fixture
def processor_factory(memcached_server, test_logger):
    """
    Factory fixture creating processors bound to the fake server.

    Usage:
        def test_something(processor_factory):
            processor = processor_factory(CommandType.VERSION)
    """
    created = []

    def factory(command, processor_class=CommandProcessor, **kwargs) -> CommandProcessor:
        kwargs.setdefault("timeout", 2.0)
        processor = processor_class(
            test_logger,
            command,
            memcached_server.host,
            memcached_server.port,
            **kwargs,
        )
        created.append(processor)
        return processor

    yield factory

    for processor in created:
        processor.close()


@pytest.fixture
def failures():
    """Collects (sender, failure) pairs delivered to a failure handler."""
    class Recorder(list):
        def __call__(self, sender, failure):
            self.append((sender, failure))

    return Recorder()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
