"""
Memcached Text-Protocol Client

MemcacheClient validates arguments, serializes commands, sends them over a
single lazily-connected Transport and interprets the responses.

Connection lifecycle:
    - the transport starts unconnected and is dialed by the first command
    - it is reused by every following command
    - any write/read fault or framing error closes it; the next command
      dials again (there is no retry inside a call)
    - close() releases it explicitly

A client instance is not thread-safe; callers sharing one across threads
must serialize access themselves.

Usage:
    with MemcacheClient("tcp", "localhost:11211") as mc:
        mc.store("foo", "bar", ttl=10)
        mc.fetch("foo")        # b'bar'
        mc.remove("foo")
        mc.fetch("foo")        # None
"""

import logging
from typing import Optional, Union

from .errors import (
    ClientError,
    DeleteFailedError,
    FramingError,
    HeaderParseError,
    NotStoredError,
    ServerError,
    TransportError,
    UnknownCommandError,
)
from .network.transport import SocketTransport, Transport
from .protocol.commands import Command, StatusKind, StatusLine
from .protocol.parser import ProtocolParser, encode_value
from .protocol.validation import validate_key, validate_ttl

logger = logging.getLogger(__name__)

Value = Union[bytes, bytearray, str]


class MemcacheClient:
    """
    Blocking client for the memcached text protocol.

    Args:
        network: "tcp", "tcp4", "tcp6" or "unix"
        address: "host:port", or a socket path for "unix"
        timeout: Socket timeout in seconds (None blocks forever)
        transport: Use this Transport instead of dialing network/address

    All failures are raised as subclasses of memclient.errors.MemcacheError.
    """

    def __init__(
            self,
            network: str = "tcp",
            address: str = "localhost:11211",
            timeout: Optional[float] = None,
            transport: Optional[Transport] = None,
    ):
        self.transport = (
            transport if transport is not None
            else SocketTransport(network, address, timeout=timeout)
        )
        self.parser = ProtocolParser()

    def __enter__(self) -> "MemcacheClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def store(self, key: str, value: Value, ttl: int = 0) -> None:
        """
        Store value under key with `set`.

        Args:
            key: Cache key
            value: Payload; str is UTF-8 encoded, bytes are sent as-is
            ttl: Seconds until expiry, 0 for no expiry

        Raises:
            ValidationError: key is invalid (nothing is sent)
            NotStoredError: the server answered anything but STORED
        """
        key = validate_key(key)
        ttl = validate_ttl(ttl)
        command = self.parser.format_set(key, encode_value(value), ttl)

        status = self._command(command)
        if status.kind is not StatusKind.STORED:
            raise NotStoredError(f"value is not stored: {status.raw!r}", status.raw)

    def fetch(self, key: str) -> Optional[bytes]:
        """
        Fetch the value stored under key with `get`.

        Returns:
            The payload bytes, or None if the key has no value.

        Raises:
            ValidationError: key is invalid (nothing is sent)
            HeaderParseError: the VALUE line is malformed
            UnexpectedEndError: the payload is not followed by CRLF END CRLF
        """
        key = validate_key(key)
        command = self.parser.format_get(key)

        status = self._command(command)
        if status.kind is StatusKind.END:
            return None

        try:
            return self._read_value(command, status)
        except FramingError:
            logger.warning(f"Framing error on {command.type.name} {command.key}, closing connection")
            self.transport.close()
            raise

    def remove(self, key: str) -> None:
        """
        Delete key with `delete`.

        Raises:
            ValidationError: key is invalid (nothing is sent)
            DeleteFailedError: the server answered anything but DELETED,
                including NOT_FOUND
        """
        key = validate_key(key)
        command = self.parser.format_delete(key)

        status = self._command(command)
        if status.kind is not StatusKind.DELETED:
            raise DeleteFailedError(f"delete failed: {status.raw!r}", status.raw)

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        self.transport.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _command(self, command: Command) -> StatusLine:
        """
        Send a command and read the first response line.

        Server error lines are raised here; every other line is returned
        classified for the operation to interpret.
        """
        self.transport.connect()

        logger.debug(f"-> {command.type.name} {command.key}")
        try:
            self.transport.write(command.wire)
            line = self.transport.read_line()
        except TransportError:
            self.transport.close()
            raise

        status = self.parser.classify(line)
        logger.debug(f"<- {status.text}")

        if status.kind is StatusKind.ERROR:
            raise UnknownCommandError(
                f"nonexistent command: {command.type.name.lower()} {command.key}", line
            )
        if status.kind is StatusKind.CLIENT_ERROR:
            raise ClientError(f"error: {status.text}", line)
        if status.kind is StatusKind.SERVER_ERROR:
            raise ServerError(f"error: {status.text}", line)
        return status

    def _read_value(self, command: Command, status: StatusLine) -> bytes:
        header = self.parser.parse_value_header(status.raw)
        if header.key != command.key:
            raise HeaderParseError(
                status.raw, f"expected key {command.key!r}, got {header.key!r}"
            )

        try:
            data = self.transport.read_exact(header.length)
            trailer = self.transport.read_exact(self.parser.trailer_length)
        except TransportError:
            self.transport.close()
            raise

        self.parser.check_trailer(trailer)
        return data
