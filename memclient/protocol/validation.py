"""
Key and TTL Validation

Keys and TTLs are checked before any command is built, so invalid input
never reaches the transport.

Key rules (first failing rule wins):
    1. empty                                   -> EmptyKeyError
    2. over settings.MAX_KEY_LENGTH bytes      -> KeyTooLongError
    3. control character (0x00-0x1F, 0x7F)
       or any whitespace character             -> InvalidKeyCharactersError

TTL: seconds until expiry, 0 = never expires. Any integer is accepted.
"""

import re

from ..config.settings import settings
from ..errors import EmptyKeyError, InvalidKeyCharactersError, KeyTooLongError

_INVALID_KEY_CHARS = re.compile(r"[\x00-\x1f\x7f\s]")


class Key(str):
    """A cache key. Construction does not validate; call validate()."""

    def validate(self) -> "Key":
        if not self:
            raise EmptyKeyError()
        # The limit applies to the encoded key as it appears on the wire
        try:
            size = len(self.encode("utf-8"))
        except UnicodeEncodeError:
            raise InvalidKeyCharactersError(str(self)) from None
        if size > settings.MAX_KEY_LENGTH:
            raise KeyTooLongError(size, settings.MAX_KEY_LENGTH)
        if _INVALID_KEY_CHARS.search(self):
            raise InvalidKeyCharactersError(str(self))
        return self


class TTL(int):
    """Time-to-live in seconds."""

    def __new__(cls, value):
        # bool is an int subclass but never a meaningful expiry
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"ttl must be an int, not {type(value).__name__}")
        return super().__new__(cls, value)

    def validate(self) -> "TTL":
        # Negative and very large values are passed through to the server as-is
        return self


def validate_key(key) -> Key:
    """
    Validate a key and return it as a Key.

    Raises:
        TypeError: key is not a str
        ValidationError: one of the key rules failed
    """
    if not isinstance(key, str):
        raise TypeError(f"key must be a str, not {type(key).__name__}")
    return Key(key).validate()


def validate_ttl(ttl) -> TTL:
    """Coerce ttl to a TTL and validate it."""
    return TTL(ttl).validate()
