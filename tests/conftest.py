"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests:

- ScriptedTransport: an in-memory Transport that replays canned response
  bytes and records everything written to it
- FakeMemcachedServer: a small asyncio server speaking the memcached text
  protocol (set/get/delete with TTL) for end-to-end tests
"""

import asyncio
import logging
import socket
import time
from contextlib import asynccontextmanager, closing
from typing import AsyncGenerator, Dict, Optional, Set, Tuple

import pytest
import pytest_asyncio

from memclient.client import MemcacheClient
from memclient.errors import MemcacheConnectionError, ReadError, WriteError
from memclient.protocol.parser import ProtocolParser

logger = logging.getLogger(__name__)


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


# ============================================================================
# Scripted Transport
# ============================================================================

class ScriptedTransport:
    """
    Transport double that serves reads from a fixed byte script.

    Usage:
        transport = ScriptedTransport(b"STORED\\r\\n")
        client = MemcacheClient(transport=transport)
        client.store("key", "value")
        assert transport.sent == b"set key 0 0 5\\r\\nvalue\\r\\n"
    """

    def __init__(self, script: bytes = b"", fail_connect: bool = False, fail_write: bool = False):
        self.buffer = bytearray(script)
        self.fail_connect = fail_connect
        self.fail_write = fail_write
        self.connected = False
        self.connects = 0
        self.closes = 0
        self.writes = []

    @property
    def sent(self) -> bytes:
        return b"".join(self.writes)

    def feed(self, data: bytes) -> None:
        """Append more response bytes to the script."""
        self.buffer.extend(data)

    def connect(self) -> None:
        if self.connected:
            return
        if self.fail_connect:
            raise MemcacheConnectionError("cannot connect: connection refused")
        self.connected = True
        self.connects += 1

    def close(self) -> None:
        if self.connected:
            self.closes += 1
        self.connected = False

    def write(self, data: bytes) -> None:
        if self.fail_write:
            raise WriteError("write error: broken pipe")
        self.writes.append(bytes(data))

    def read_line(self) -> bytes:
        end = self.buffer.find(b"\n")
        if end < 0:
            raise ReadError(f"connection closed mid-line: {bytes(self.buffer)!r}")
        line = bytes(self.buffer[:end + 1])
        del self.buffer[:end + 1]
        return line

    def read_exact(self, size: int) -> bytes:
        if len(self.buffer) < size:
            raise ReadError(f"connection closed after {len(self.buffer)} of {size} bytes")
        data = bytes(self.buffer[:size])
        del self.buffer[:size]
        return data


# ============================================================================
# Fake memcached server
# ============================================================================

# exptime values above this are absolute unix timestamps
RELATIVE_EXPTIME_LIMIT = 60 * 60 * 24 * 30


class FakeMemcachedServer:
    """
    Asynchronous memcached text-protocol server for tests.

    Supports `set`, `get` (one or more keys) and `delete`, with memcached
    exptime semantics: 0 never expires, negative expires immediately,
    values over 30 days are absolute unix timestamps.

    Attributes:
        host/port: TCP bind address (ignored when path is set)
        path: Unix socket path to listen on instead of TCP
        items: key -> (flags, data, expires_at); expires_at 0 = never
        max_item_size: Larger payloads get SERVER_ERROR
    """

    def __init__(
            self,
            host: str = '127.0.0.1',
            port: int = 0,
            path: Optional[str] = None,
            max_item_size: int = 1024 * 1024,
    ):
        self.host = host
        self.port = port
        self.path = path
        self.max_item_size = max_item_size
        self.items: Dict[bytes, Tuple[int, bytes, float]] = {}
        self.commands = []
        self._writers: Set[asyncio.StreamWriter] = set()
        self._server: Optional[asyncio.AbstractServer] = None

    async def start(self) -> None:
        if self.path:
            self._server = await asyncio.start_unix_server(self.handle_client, self.path)
        else:
            self._server = await asyncio.start_server(self.handle_client, self.host, self.port)
        logger.debug(f"Fake memcached serving on {self.path or (self.host, self.port)}")

    async def stop(self) -> None:
        if self._server is None:
            return
        await self.drop_connections()
        self._server.close()
        await self._server.wait_closed()
        self._server = None

    async def drop_connections(self) -> None:
        """Close every open client connection from the server side."""
        for writer in list(self._writers):
            writer.close()
        await asyncio.sleep(0.05)

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writers.add(writer)
        try:
            while True:
                line = await reader.readline()
                if not line:
                    break
                response = await self._dispatch(line, reader)
                writer.write(response)
                await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionResetError):
            pass
        finally:
            self._writers.discard(writer)
            writer.close()

    async def _dispatch(self, line: bytes, reader: asyncio.StreamReader) -> bytes:
        parts = line.rstrip(b"\r\n").split()
        self.commands.append(line)
        if not parts:
            return b"ERROR\r\n"

        name, args = parts[0], parts[1:]
        if name == b"set":
            if len(args) != 4 or not all(a.lstrip(b"-").isdigit() for a in args[1:]):
                return b"CLIENT_ERROR bad command line format\r\n"
            key, flags, exptime, length = args[0], int(args[1]), int(args[2]), int(args[3])
            chunk = await reader.readexactly(length + 2)
            if chunk[-2:] != b"\r\n":
                return b"CLIENT_ERROR bad data chunk\r\n"
            if length > self.max_item_size:
                return b"SERVER_ERROR object too large for cache\r\n"
            self.items[key] = (flags, chunk[:-2], self._expires_at(exptime))
            return b"STORED\r\n"

        if name == b"get" and args:
            out = []
            for key in args:
                item = self._lookup(key)
                if item is not None:
                    flags, data, _ = item
                    out.append(b"VALUE %s %d %d\r\n%s\r\n" % (key, flags, len(data), data))
            out.append(b"END\r\n")
            return b"".join(out)

        if name == b"delete" and len(args) == 1:
            if self._lookup(args[0]) is None:
                return b"NOT_FOUND\r\n"
            del self.items[args[0]]
            return b"DELETED\r\n"

        return b"ERROR\r\n"

    def _expires_at(self, exptime: int) -> float:
        if exptime == 0:
            return 0
        if exptime < 0:
            return -1
        if exptime > RELATIVE_EXPTIME_LIMIT:
            return float(exptime)
        return time.time() + exptime

    def _lookup(self, key: bytes):
        item = self.items.get(key)
        if item is None:
            return None
        expires_at = item[2]
        if expires_at and expires_at <= time.time():
            del self.items[key]
            return None
        return item


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def scripted():
    """
    Factory fixture for a client wired to a ScriptedTransport.

    Usage:
        def test_something(scripted):
            client, transport = scripted(b"STORED\\r\\n")
    """
    def factory(script: bytes = b"", **kwargs) -> Tuple[MemcacheClient, ScriptedTransport]:
        transport = ScriptedTransport(script, **kwargs)
        return MemcacheClient(transport=transport), transport
    return factory


# ============================================================================
# Server Fixtures
# ============================================================================

@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest.fixture
def server_address(server_port: int) -> str:
    return f"127.0.0.1:{server_port}"


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[FakeMemcachedServer, None]:
    """
    Start a FakeMemcachedServer on a free port for the duration of a test.

    The client under test is blocking, so tests drive it from a worker
    thread (asyncio.to_thread) while the server runs on the event loop.
    """
    srv = FakeMemcachedServer(host='127.0.0.1', port=server_port)
    await srv.start()

    yield srv

    await srv.stop()


@pytest_asyncio.fixture
async def unix_server(tmp_path) -> AsyncGenerator[FakeMemcachedServer, None]:
    """FakeMemcachedServer listening on a unix socket in tmp_path."""
    srv = FakeMemcachedServer(path=str(tmp_path / "mc.sock"))
    await srv.start()

    yield srv

    await srv.stop()


@asynccontextmanager
async def serve_once(port: int, data: bytes, hold: float = 0.0):
    """
    Accept connections on port, send data to each, wait hold seconds and close.

    Used to simulate servers that hang up or stall mid-response.
    """
    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        writer.write(data)
        await writer.drain()
        if hold:
            await asyncio.sleep(hold)
        writer.close()

    srv = await asyncio.start_server(handle, '127.0.0.1', port)
    try:
        yield srv
    finally:
        srv.close()
        await srv.wait_closed()


@pytest.fixture
def one_shot_server():
    """
    Factory fixture for serve_once.

    Usage:
        async with one_shot_server(server_port, b"STOR"):
            ...
    """
    return serve_once


@pytest.fixture
def client(server_address: str):
    """A socket-backed client pointed at the server fixture's address."""
    mc = MemcacheClient("tcp", server_address, timeout=5.0)
    yield mc
    mc.close()


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )

