"""
Value Codecs

A codec converts values to and from the bytes stored on the remote
key/value server. Codecs hold no state, so any two instances of the same
codec class are interchangeable and compare equal.
"""

import json
from abc import ABC, abstractmethod
from typing import Any

from ..config.settings import settings


class Codec(ABC):
    """Contract for value codecs: encode(value) -> bytes, decode(bytes) -> value."""

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """Convert a value to its wire representation."""

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """Convert a wire representation back to a value."""

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class JsonCodec(Codec):
    """
    JSON codec, used when a config does not name one.

    Values must be JSON-serializable (dicts, lists, strings, numbers,
    booleans and None).

    Examples:
        >>> codec = JsonCodec()
        >>> codec.encode({"a": 1})
        b'{"a":1}'
        >>> codec.decode(b'[1, 2]')
        [1, 2]
    """

    def encode(self, value: Any) -> bytes:
        return json.dumps(value, separators=(",", ":")).encode(settings.ENCODING)

    def decode(self, data: bytes) -> Any:
        return json.loads(data.decode(settings.ENCODING))


class StringCodec(Codec):
    """Plain text codec."""

    def encode(self, value: Any) -> bytes:
        if not isinstance(value, str):
            raise TypeError(f"StringCodec expects str, got {type(value).__name__}")
        return value.encode(settings.ENCODING)

    def decode(self, data: bytes) -> str:
        return data.decode(settings.ENCODING)


class BytesCodec(Codec):
    """Pass-through codec for values that are already bytes."""

    def encode(self, value: Any) -> bytes:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(f"BytesCodec expects bytes, got {type(value).__name__}")
        return bytes(value)

    def decode(self, data: bytes) -> bytes:
        return bytes(data)
