"""
Protocol Parser Module

This module builds request bytes for the memcached text protocol and
interprets the lines the server sends back.

The parser is pure: it never touches a transport. MemcacheClient decides
what to read next; the parser only turns bytes into Commands, StatusLines
and ValueHeaders.
"""

from typing import Union

from ..errors import HeaderParseError, UnexpectedEndError
from .commands import (
    CLIENT_ERROR_PREFIX,
    DELETED,
    END,
    ERROR,
    SERVER_ERROR_PREFIX,
    STORED,
    TRAILER,
    VALUE_PREFIX,
    Command,
    CommandType,
    StatusKind,
    StatusLine,
    ValueHeader,
)
from .validation import Key, TTL

_EXACT_STATUSES = {
    STORED: StatusKind.STORED,
    DELETED: StatusKind.DELETED,
    END: StatusKind.END,
    ERROR: StatusKind.ERROR,
}


def encode_value(value: Union[bytes, bytearray, str]) -> bytes:
    """Return the raw payload bytes for a value; str is UTF-8 encoded."""
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"value must be bytes or str, not {type(value).__name__}")


class ProtocolParser:
    """
    Serializer and parser for the memcached text protocol.

    Protocol Format:
        set <key> <flags> <ttl> <bytes>\\r\\n<data>\\r\\n -> STORED\\r\\n
        get <key>\\r\\n                               -> VALUE <key> <flags> <bytes>\\r\\n
                                                       <data>\\r\\nEND\\r\\n
                                                     | END\\r\\n
        delete <key>\\r\\n                            -> DELETED\\r\\n

        Any command may also be answered with ERROR\\r\\n,
        CLIENT_ERROR <text>\\r\\n or SERVER_ERROR <text>\\r\\n.

    Flags are always sent as 0. Payloads are framed by their declared
    length, never by scanning for a terminator.
    """

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def format_set(self, key: Key, value: bytes, ttl: TTL) -> Command:
        """
        Build a set command.

        Examples:
            >>> ProtocolParser().format_set(Key("foo"), b"bar", TTL(10)).wire
            b'set foo 0 10 3\\r\\nbar\\r\\n'
        """
        header = f"set {key} 0 {int(ttl)} {len(value)}\r\n".encode("utf-8")
        return Command(type=CommandType.SET, key=str(key), payload=header + value)

    def format_get(self, key: Key) -> Command:
        return Command(
            type=CommandType.GET,
            key=str(key),
            payload=f"get {key}".encode("utf-8"),
        )

    def format_delete(self, key: Key) -> Command:
        return Command(
            type=CommandType.DELETE,
            key=str(key),
            payload=f"delete {key}".encode("utf-8"),
        )

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def classify(self, line: bytes) -> StatusLine:
        """
        Classify the first line of a response.

        Exact statuses must match including the trailing CRLF; the error
        prefixes and VALUE are matched on the start of the line.
        """
        kind = _EXACT_STATUSES.get(line)
        if kind is None:
            if line.startswith(CLIENT_ERROR_PREFIX):
                kind = StatusKind.CLIENT_ERROR
            elif line.startswith(SERVER_ERROR_PREFIX):
                kind = StatusKind.SERVER_ERROR
            elif line.startswith(VALUE_PREFIX):
                kind = StatusKind.VALUE
            else:
                kind = StatusKind.OTHER
        return StatusLine(kind=kind, raw=line)

    def parse_value_header(self, line: bytes) -> ValueHeader:
        """
        Parse a `VALUE <key> <flags> <bytes>\\r\\n` header.

        Raises:
            HeaderParseError: wrong token count, missing delimiter,
                non-numeric or negative flags/length
        """
        if not line.endswith(b"\r\n"):
            raise HeaderParseError(line, "missing CRLF")

        parts = line[:-2].split(b" ")
        if len(parts) != 4 or parts[0] != b"VALUE":
            raise HeaderParseError(line, f"expected 4 tokens, got {len(parts)}")

        _, key, flags, length = parts
        if not key:
            raise HeaderParseError(line, "empty key")
        if not (flags.isdigit() and length.isdigit()):
            raise HeaderParseError(line, "flags and length must be unsigned integers")

        return ValueHeader(
            key=key.decode("utf-8", errors="replace"),
            flags=int(flags),
            length=int(length),
        )

    def check_trailer(self, trailer: bytes) -> None:
        """
        Verify the bytes read after a payload are exactly CRLF + END line.

        Raises:
            UnexpectedEndError: anything else was received
        """
        if trailer != TRAILER:
            raise UnexpectedEndError(trailer)

    @property
    def trailer_length(self) -> int:
        """Number of bytes to read after a payload."""
        return len(TRAILER)
