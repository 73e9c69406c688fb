"""Configuration source abstractions.

A configuration source answers ``lookup(key)`` with a value or ``None``
when the key is absent. Sources scoped by a (prefix, id) pair resolve a key
against the most specific name first, and a ``CompositeSource`` stacks
sources in precedence order.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ConfigurationSource(Protocol):
    """Anything that can answer a configuration lookup."""

    def lookup(self, key: str) -> Any | None:
        """Return the value for key, or None when absent."""
        ...


class AbstractSource(ABC):
    """Base class with convenience accessors built on ``lookup``."""

    @abstractmethod
    def lookup(self, key: str) -> Any | None:
        """Return the value for key, or None when absent."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for key, or default when absent."""
        value = self.lookup(key)
        return default if value is None else value

    def contains(self, key: str) -> bool:
        """Check whether key resolves to a value."""
        return self.lookup(key) is not None


class PrefixedSource(AbstractSource):
    """Source scoped to a (prefix, id) pair.

    With prefix ``"rpcenv.protocol."`` and id ``"grpc"``, ``lookup("port")``
    tries ``rpcenv.protocol.grpc.port`` then ``rpcenv.protocol.port``.
    Without a prefix the key is read as-is.

    Subclasses implement ``_get`` against the raw backing store.
    """

    def __init__(self, prefix: str | None = None, id: str | None = None) -> None:
        self.prefix = prefix or None
        self.id = id or None

    @abstractmethod
    def _get(self, key: str) -> Any | None:
        """Read a fully qualified key from the backing store."""

    def lookup(self, key: str) -> Any | None:
        if self.prefix is None:
            return self._get(key)

        value = None
        if self.id is not None:
            value = self._get(f"{self.prefix}{self.id}.{key}")
        if value is None:
            value = self._get(f"{self.prefix}{key}")
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}(prefix={self.prefix!r}, id={self.id!r})"


class CompositeSource(AbstractSource):
    """Ordered stack of sources; the first source holding a key wins.

    Members are held by reference, so in-place changes to a member are
    visible through the composite without rebuilding it.
    """

    def __init__(self, sources: Iterable[ConfigurationSource] = ()) -> None:
        self._sources: list[ConfigurationSource] = list(sources)

    def add_source(self, source: ConfigurationSource) -> None:
        """Append a source below all existing members."""
        self._sources.append(source)

    @property
    def sources(self) -> tuple[ConfigurationSource, ...]:
        """Members in precedence order, highest first."""
        return tuple(self._sources)

    def lookup(self, key: str) -> Any | None:
        for source in self._sources:
            value = source.lookup(key)
            if value is not None:
                return value
        return None

    def __iter__(self) -> Iterator[ConfigurationSource]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __repr__(self) -> str:
        return f"CompositeSource({self._sources!r})"
