"""Process-wide system properties and the origin that reads them."""

import threading
from collections.abc import Iterable
from typing import Any

from rpcenv.sources.base import PrefixedSource


class SystemProperties:
    """Thread-safe, mutable process-wide property store.

    Plays the part of launch-time ``-Dkey=value`` properties: set once at
    startup, readable from anywhere, and overridable at runtime.
    """

    def __init__(self) -> None:
        self._properties: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_property(self, key: str) -> str | None:
        with self._lock:
            return self._properties.get(key)

    def set_property(self, key: str, value: str) -> None:
        with self._lock:
            self._properties[key] = value

    def clear_property(self, key: str) -> str | None:
        """Remove a property, returning its previous value."""
        with self._lock:
            return self._properties.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        with self._lock:
            return dict(self._properties)

    def clear(self) -> None:
        with self._lock:
            self._properties.clear()

    def load_from_args(self, args: Iterable[str]) -> list[str]:
        """Consume ``-Dkey=value`` arguments.

        ``-Dflag`` without a value sets an empty string.

        Args:
            args: Command line arguments

        Returns:
            The arguments that were not property definitions
        """
        remaining: list[str] = []
        for arg in args:
            if not arg.startswith("-D") or len(arg) == 2:
                remaining.append(arg)
                continue
            key, _, value = arg[2:].partition("=")
            self.set_property(key, value)
        return remaining


system_properties = SystemProperties()


class SystemPropertySource(PrefixedSource):
    """Origin reading a ``SystemProperties`` store live."""

    def __init__(
        self,
        prefix: str | None,
        id: str | None,
        properties: SystemProperties | None = None,
    ) -> None:
        super().__init__(prefix, id)
        self._store = properties if properties is not None else system_properties

    def _get(self, key: str) -> Any | None:
        return self._store.get_property(key)
