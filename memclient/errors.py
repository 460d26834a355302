"""
Client Error Hierarchy

Every failure raised by memclient derives from MemcacheError, so callers
can catch the whole family at once or pick out a specific kind:

    MemcacheError
    +-- ValidationError           bad key/ttl, raised before any I/O
    +-- MemcacheConnectionError   dial failure
    +-- TransportError            write/read fault on an open connection
    +-- ProtocolError             ERROR / CLIENT_ERROR / SERVER_ERROR lines
    +-- ResponseError             well-formed but unsuccessful status line
    +-- FramingError              malformed VALUE header or trailer
"""

from typing import Optional


class MemcacheError(Exception):
    """Base class for all memclient errors."""


# ============================================================================
# Validation
# ============================================================================

class ValidationError(MemcacheError, ValueError):
    """An argument was rejected before reaching the transport."""


class EmptyKeyError(ValidationError):
    def __init__(self):
        super().__init__("empty key")


class KeyTooLongError(ValidationError):
    def __init__(self, length: int, limit: int):
        super().__init__(f"key too long: {length} > {limit}")
        self.length = length
        self.limit = limit


class InvalidKeyCharactersError(ValidationError):
    def __init__(self, key: str):
        super().__init__(f"invalid key: {key!r}")
        self.key = key


# ============================================================================
# Connection / transport
# ============================================================================

class MemcacheConnectionError(MemcacheError):
    """The transport could not be connected."""


class TransportError(MemcacheError):
    """An I/O fault on an established connection."""


class WriteError(TransportError):
    pass


class ReadError(TransportError):
    pass


# ============================================================================
# Server responses
# ============================================================================

class ProtocolError(MemcacheError):
    """
    The server answered with an error status line.

    Attributes:
        line: The raw status line as received (including the delimiter)
    """

    def __init__(self, message: str, line: bytes = b""):
        super().__init__(message)
        self.line = line


class UnknownCommandError(ProtocolError):
    """Server replied ERROR: it did not recognise the command."""


class ClientError(ProtocolError):
    """Server replied CLIENT_ERROR <text>."""


class ServerError(ProtocolError):
    """Server replied SERVER_ERROR <text>."""


class ResponseError(MemcacheError):
    """
    The status line was not the one the operation expects.

    Attributes:
        line: The raw status line as received
    """

    def __init__(self, message: str, line: bytes = b""):
        super().__init__(message)
        self.line = line


class NotStoredError(ResponseError):
    pass


class DeleteFailedError(ResponseError):
    pass


class FramingError(MemcacheError):
    """The response did not match the expected framing; the stream is out of sync."""


class HeaderParseError(FramingError):
    def __init__(self, header: bytes, reason: Optional[str] = None):
        message = f"cannot parse header: {header!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.header = header


class UnexpectedEndError(FramingError):
    def __init__(self, trailer: bytes):
        super().__init__(f"unexpected end: {trailer!r}")
        self.trailer = trailer
