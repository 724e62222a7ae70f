"""
Codec Provider

Registry used by the client runtime to look up codecs by name.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List

from .codecs import BytesCodec, Codec, JsonCodec, StringCodec

logger = logging.getLogger(__name__)


class CodecProvider(ABC):
    """Lookup-by-name registry of codecs."""

    @abstractmethod
    def get_codec(self, name: str) -> Codec:
        """
        Return the codec registered under a name.

        Raises:
            KeyError: If no codec is registered under the name
        """

    @abstractmethod
    def register_codec(self, name: str, codec: Codec) -> None:
        """Register a codec under a name, replacing any previous one."""

    @abstractmethod
    def names(self) -> List[str]:
        """Return the registered codec names."""

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DefaultCodecProvider(CodecProvider):
    """
    In-memory codec registry.

    Pre-populated with the built-in codecs under the names
    ``json``, ``string`` and ``bytes``.
    """

    def __init__(self):
        self._codecs: Dict[str, Codec] = {
            "json": JsonCodec(),
            "string": StringCodec(),
            "bytes": BytesCodec(),
        }

    def get_codec(self, name: str) -> Codec:
        if name not in self._codecs:
            raise KeyError(f"No codec registered under {name!r}")
        return self._codecs[name]

    def register_codec(self, name: str, codec: Codec) -> None:
        if not isinstance(codec, Codec):
            raise TypeError(f"Expected a Codec, got {type(codec).__name__}")
        logger.debug(f"Registering codec {name!r}: {codec!r}")
        self._codecs[name] = codec

    def names(self) -> List[str]:
        return list(self._codecs)
