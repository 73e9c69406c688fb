"""Lazily populated, per-key memoizing cache for configuration sources."""

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from rpcenv.keys import to_key
from rpcenv.observability.logging import get_logger
from rpcenv.observability.metrics import ORIGIN_SOURCES_CREATED

logger = get_logger(__name__)

T = TypeVar("T")


class KeyedCache(Generic[T]):
    """Builds at most one value per normalized (prefix, id) key.

    Reads of an already published key take no lock. A miss takes the lock,
    re-checks, and runs the factory inside it, so concurrent first lookups
    for a key all observe the single instance that was built.
    """

    def __init__(self, kind: str, factory: Callable[[str | None, str | None], T]) -> None:
        self.kind = kind
        self._factory = factory
        self._values: dict[str, T] = {}
        self._lock = threading.Lock()

    def get_or_create(self, prefix: str | None, id: str | None) -> T:
        key = to_key(prefix, id)
        value = self._values.get(key)
        if value is not None:
            return value

        with self._lock:
            value = self._values.get(key)
            if value is None:
                value = self._factory(prefix, id)
                self._values[key] = value
                ORIGIN_SOURCES_CREATED.labels(kind=self.kind).inc()
                logger.debug("origin_source_created", kind=self.kind, key=key)
        return value

    def get(self, prefix: str | None, id: str | None) -> T | None:
        """Return the cached value without creating one."""
        return self._values.get(to_key(prefix, id))

    def keys(self) -> list[str]:
        return list(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
