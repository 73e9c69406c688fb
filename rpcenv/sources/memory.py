"""In-memory origin for externally injected configuration."""

from collections.abc import Mapping
from typing import Any

from rpcenv.sources.base import PrefixedSource


class InMemorySource(PrefixedSource):
    """Origin over a mapping owned by someone else.

    The mapping is held by reference: in-place updates by its owner are
    visible here, while the owner swapping in a new mapping is not.
    """

    def __init__(
        self,
        prefix: str | None = None,
        id: str | None = None,
        store: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(prefix, id)
        self._store: Mapping[str, Any] = store if store is not None else {}

    def _get(self, key: str) -> Any | None:
        return self._store.get(key)
