"""
Protocol Command and Response Definitions

This module defines the data structures and wire constants for the
memcached text protocol commands the client speaks.
"""

from dataclasses import dataclass
from enum import Enum, auto


CRLF = b"\r\n"

# Status lines, compared byte-exact including the delimiter
STORED = b"STORED\r\n"
DELETED = b"DELETED\r\n"
END = b"END\r\n"
ERROR = b"ERROR\r\n"

CLIENT_ERROR_PREFIX = b"CLIENT_ERROR "
SERVER_ERROR_PREFIX = b"SERVER_ERROR "
VALUE_PREFIX = b"VALUE "

# What must follow a payload when a single key was requested
TRAILER = CRLF + END


class CommandType(Enum):
    """Enumeration of supported command types."""
    SET = auto()
    GET = auto()
    DELETE = auto()


class StatusKind(Enum):
    """Classification of the first line of a response."""
    STORED = auto()
    DELETED = auto()
    END = auto()
    VALUE = auto()
    ERROR = auto()
    CLIENT_ERROR = auto()
    SERVER_ERROR = auto()
    OTHER = auto()


@dataclass
class Command:
    """
    A serialized request, ready to be sent.

    Attributes:
        type: The type of command (SET, GET, DELETE)
        key: The key the command addresses
        payload: Command line bytes without the final CRLF; for SET this
            already contains the header line, a CRLF and the raw value
    """
    type: CommandType
    key: str
    payload: bytes

    @property
    def wire(self) -> bytes:
        """The exact bytes written to the transport."""
        return self.payload + CRLF


@dataclass
class StatusLine:
    """
    A classified response line.

    Attributes:
        kind: What the line means
        raw: The line as read, delimiter included
    """
    kind: StatusKind
    raw: bytes

    @property
    def text(self) -> str:
        """Human-readable form of the line, without the delimiter."""
        return self.raw.rstrip(b"\r\n").decode("utf-8", errors="replace")


@dataclass
class ValueHeader:
    """Parsed `VALUE <key> <flags> <bytes>` line."""
    key: str
    flags: int
    length: int
