"""Dynamic (remote or runtime-published) configuration.

Implementations are provided through the extension registry under the
``dynamic_configuration`` capability. ``NopDynamicConfiguration`` is the
registered default and never answers.
"""

import threading
from abc import abstractmethod
from typing import Any

from rpcenv.sources.base import AbstractSource

DEFAULT_GROUP = "rpcenv"


class DynamicConfiguration(AbstractSource):
    """Configuration published by an external system, partitioned by group."""

    @abstractmethod
    def get_config(self, key: str, group: str | None = None) -> str | None:
        """Read a value (or whole document) by key within a group.

        Args:
            key: Entry key
            group: Group name; None means the implementation's default group

        Returns:
            The stored value, or None when absent
        """

    def lookup(self, key: str) -> Any | None:
        return self.get_config(key)


class NopDynamicConfiguration(DynamicConfiguration):
    """Dynamic configuration that never holds anything."""

    def __init__(self, **_: Any) -> None:
        pass

    def get_config(self, key: str, group: str | None = None) -> str | None:
        return None


class InMemoryDynamicConfiguration(DynamicConfiguration):
    """Thread-safe in-process dynamic configuration.

    Values are published at runtime, e.g. by an admin endpoint or a test.
    """

    def __init__(self, default_group: str = DEFAULT_GROUP, **_: Any) -> None:
        self.default_group = default_group
        self._groups: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    def publish(self, key: str, value: str, group: str | None = None) -> None:
        with self._lock:
            self._groups.setdefault(group or self.default_group, {})[key] = value

    def remove(self, key: str, group: str | None = None) -> str | None:
        """Delete an entry, returning its previous value."""
        with self._lock:
            return self._groups.get(group or self.default_group, {}).pop(key, None)

    def get_config(self, key: str, group: str | None = None) -> str | None:
        with self._lock:
            return self._groups.get(group or self.default_group, {}).get(key)


class ScopedDynamicSource(AbstractSource):
    """View of a dynamic configuration narrowed to one call.

    ``lookup("timeout")`` for service ``demo.Greeter`` and method ``hello``
    tries ``demo.Greeter.hello.timeout``, then ``demo.Greeter.timeout``, then
    ``<application>.timeout``.
    """

    def __init__(
        self,
        application: str | None,
        service: str,
        method: str | None,
        delegate: DynamicConfiguration,
    ) -> None:
        self.application = application or None
        self.service = service
        self.method = method or None
        self.delegate = delegate

    def lookup(self, key: str) -> Any | None:
        value = None
        if self.method is not None:
            value = self.delegate.lookup(f"{self.service}.{self.method}.{key}")
        if value is None:
            value = self.delegate.lookup(f"{self.service}.{key}")
        if value is None and self.application is not None:
            value = self.delegate.lookup(f"{self.application}.{key}")
        return value

    def __repr__(self) -> str:
        return (
            f"ScopedDynamicSource(application={self.application!r}, "
            f"service={self.service!r}, method={self.method!r})"
        )
