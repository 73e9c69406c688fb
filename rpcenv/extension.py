"""Registry of pluggable extension implementations.

Implementations are registered per capability under a name. Activating a
name creates its instance once and marks it active; the registry can then
report the active instances of a capability, or the capability's default.

Thread-safety: all methods take an internal lock; factories run under it,
so each (capability, name) is constructed at most once.
"""

import threading
from collections.abc import Callable
from typing import Any

from rpcenv.errors import ExtensionNotFoundError
from rpcenv.observability.logging import get_logger
from rpcenv.sources.dynamic import InMemoryDynamicConfiguration, NopDynamicConfiguration

logger = get_logger(__name__)

DYNAMIC_CONFIGURATION = "dynamic_configuration"


class ExtensionRegistry:
    """Named factories per capability, with active and default instances."""

    def __init__(self) -> None:
        self._factories: dict[str, dict[str, Callable[..., Any]]] = {}
        self._defaults: dict[str, str] = {}
        self._active: dict[str, dict[str, Any]] = {}
        self._default_instances: dict[str, Any] = {}
        self._lock = threading.Lock()

    def register(
        self,
        capability: str,
        name: str,
        factory: Callable[..., Any],
        default: bool = False,
    ) -> None:
        """Register an implementation factory.

        Args:
            capability: Capability the implementation provides
            name: Identifier for this implementation
            factory: Callable returning a new instance
            default: Make this the capability's default implementation
        """
        with self._lock:
            self._factories.setdefault(capability, {})[name] = factory
            if default:
                self._set_default(capability, name)
        logger.debug("extension_registered", capability=capability, name=name, default=default)

    def set_default(self, capability: str, name: str) -> None:
        with self._lock:
            self._require(capability, name)
            self._set_default(capability, name)

    def _set_default(self, capability: str, name: str) -> None:
        self._defaults[capability] = name
        self._default_instances.pop(capability, None)

    def _require(self, capability: str, name: str) -> Callable[..., Any]:
        factory = self._factories.get(capability, {}).get(name)
        if factory is None:
            raise ExtensionNotFoundError(capability, name)
        return factory

    def names(self, capability: str) -> list[str]:
        """Registered implementation names, in registration order."""
        with self._lock:
            return list(self._factories.get(capability, {}))

    def activate(self, capability: str, name: str, **kwargs: Any) -> Any:
        """Create (once) and mark an implementation active.

        Keyword arguments are passed to the factory on first activation and
        ignored afterwards.

        Returns:
            The active instance

        Raises:
            ExtensionNotFoundError: If the name is not registered
        """
        with self._lock:
            active = self._active.setdefault(capability, {})
            instance = active.get(name)
            if instance is None:
                instance = self._require(capability, name)(**kwargs)
                active[name] = instance
                logger.info("extension_activated", capability=capability, name=name)
            return instance

    def deactivate(self, capability: str, name: str) -> None:
        with self._lock:
            if self._active.get(capability, {}).pop(name, None) is not None:
                logger.info("extension_deactivated", capability=capability, name=name)

    def active_instances(self, capability: str) -> list[Any]:
        """Active instances of a capability, in activation order."""
        with self._lock:
            return list(self._active.get(capability, {}).values())

    def active_names(self, capability: str) -> list[str]:
        with self._lock:
            return list(self._active.get(capability, {}))

    def default_instance(self, capability: str) -> Any:
        """The capability's default implementation, created once.

        The default instance is not counted as active.

        Raises:
            ExtensionNotFoundError: If the capability has no default
        """
        with self._lock:
            instance = self._default_instances.get(capability)
            if instance is None:
                name = self._defaults.get(capability)
                if name is None:
                    raise ExtensionNotFoundError(capability)
                instance = self._require(capability, name)()
                self._default_instances[capability] = instance
            return instance


def create_default_registry() -> ExtensionRegistry:
    """Registry with the bundled dynamic configuration implementations."""
    registry = ExtensionRegistry()
    registry.register(DYNAMIC_CONFIGURATION, "nop", NopDynamicConfiguration, default=True)
    registry.register(DYNAMIC_CONFIGURATION, "memory", InMemoryDynamicConfiguration)
    return registry
