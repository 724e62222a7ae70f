"""
Resolver Provider

Resolvers generate ids for object references stored by the client when
the reference feature is enabled. The provider looks them up by name.
"""

import itertools
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Dict, List

logger = logging.getLogger(__name__)


class Resolver(ABC):
    """Produces a fresh id for an object reference."""

    @abstractmethod
    def resolve(self) -> str:
        """Return a new id."""


class UUIDResolver(Resolver):
    """Random 32-character hex ids."""

    def resolve(self) -> str:
        return uuid.uuid4().hex


class SequenceResolver(Resolver):
    """Monotonically increasing integer ids, starting at 1."""

    def __init__(self):
        self._counter = itertools.count(1)

    def resolve(self) -> str:
        return str(next(self._counter))


class ResolverProvider(ABC):
    """Lookup-by-name registry of resolvers."""

    @abstractmethod
    def get_resolver(self, name: str) -> Resolver:
        """
        Return the resolver registered under a name.

        Raises:
            KeyError: If no resolver is registered under the name
        """

    @abstractmethod
    def register_resolver(self, name: str, resolver: Resolver) -> None:
        """Register a resolver under a name, replacing any previous one."""

    @abstractmethod
    def names(self) -> List[str]:
        """Return the registered resolver names."""

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DefaultResolverProvider(ResolverProvider):
    """In-memory resolver registry pre-populated with ``uuid`` and ``sequence``."""

    def __init__(self):
        self._resolvers: Dict[str, Resolver] = {
            "uuid": UUIDResolver(),
            "sequence": SequenceResolver(),
        }

    def get_resolver(self, name: str) -> Resolver:
        if name not in self._resolvers:
            raise KeyError(f"No resolver registered under {name!r}")
        return self._resolvers[name]

    def register_resolver(self, name: str, resolver: Resolver) -> None:
        if not isinstance(resolver, Resolver):
            raise TypeError(f"Expected a Resolver, got {type(resolver).__name__}")
        logger.debug(f"Registering resolver {name!r}: {type(resolver).__name__}")
        self._resolvers[name] = resolver

    def names(self) -> List[str]:
        return list(self._resolvers)
