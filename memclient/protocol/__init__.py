"""Protocol module for memclient."""

from .commands import Command, CommandType, StatusKind, StatusLine, ValueHeader
from .parser import ProtocolParser, encode_value
from .validation import TTL, Key, validate_key, validate_ttl

__all__ = [
    "Command",
    "CommandType",
    "StatusKind",
    "StatusLine",
    "ValueHeader",
    "ProtocolParser",
    "encode_value",
    "Key",
    "TTL",
    "validate_key",
    "validate_ttl",
]
