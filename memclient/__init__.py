"""
memclient: Memcached Text-Protocol Client

A small, blocking client for the memcached text protocol, speaking
set/get/delete over a single TCP or unix stream connection.
"""

from .client import MemcacheClient
from .errors import (
    ClientError,
    DeleteFailedError,
    EmptyKeyError,
    FramingError,
    HeaderParseError,
    InvalidKeyCharactersError,
    KeyTooLongError,
    MemcacheConnectionError,
    MemcacheError,
    NotStoredError,
    ProtocolError,
    ReadError,
    ResponseError,
    ServerError,
    TransportError,
    UnexpectedEndError,
    UnknownCommandError,
    ValidationError,
    WriteError,
)

__version__ = "1.0.0"

__all__ = [
    "MemcacheClient",
    "MemcacheError",
    "ValidationError",
    "EmptyKeyError",
    "KeyTooLongError",
    "InvalidKeyCharactersError",
    "MemcacheConnectionError",
    "TransportError",
    "WriteError",
    "ReadError",
    "ProtocolError",
    "UnknownCommandError",
    "ClientError",
    "ServerError",
    "ResponseError",
    "NotStoredError",
    "DeleteFailedError",
    "FramingError",
    "HeaderParseError",
    "UnexpectedEndError",
]
