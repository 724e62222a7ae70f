"""Codec module for kv-config."""

from .codecs import BytesCodec, Codec, JsonCodec, StringCodec
from .provider import CodecProvider, DefaultCodecProvider

__all__ = [
    "BytesCodec",
    "Codec",
    "CodecProvider",
    "DefaultCodecProvider",
    "JsonCodec",
    "StringCodec",
]
