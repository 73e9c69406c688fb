"""Process-wide configuration environment.

The ``Environment`` answers "which value does this key have here" without
callers knowing which origin holds it. It owns:

- one lazily filled cache per origin kind (properties, system, environment,
  external, app-external), keyed by normalized (prefix, id);
- the two external configuration maps pushed in by the embedding process;
- the startup composite cache, one fixed-precedence stack per scope;
- the per-call runtime composite, rebuilt on every request so dynamic
  configuration and call parameters are never served stale;
- the config center and its precedence flag.

One instance is meant to live for the whole process; ``get_environment()``
returns that shared instance, while tests construct their own.

Usage:
    env = get_environment()
    timeout = env.get_startup_composite("rpcenv.provider.", None).get("timeout")

    call = CallMetadata.from_url("grpc://10.0.0.5:50051/demo.Greeter?application=shop")
    retries = env.get_runtime_composite(call, "hello").get("retries")
"""

import threading
from collections.abc import Callable, Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog

from rpcenv.cache import KeyedCache
from rpcenv.call import CallContext, CallMetadataSource
from rpcenv.config import Settings, get_settings
from rpcenv.config.loader import get_config_dir
from rpcenv.config_center import ConfigCenter, ConfigCenterClient
from rpcenv.errors import ExtensionNotFoundError
from rpcenv.extension import DYNAMIC_CONFIGURATION, ExtensionRegistry, create_default_registry
from rpcenv.observability.logging import get_logger, setup_logging
from rpcenv.observability.metrics import EXTERNAL_UPDATES, RUNTIME_COMPOSITES_BUILT
from rpcenv.sources import (
    CompositeSource,
    ConfigurationSource,
    DynamicConfiguration,
    EnvironmentSource,
    InMemorySource,
    NopDynamicConfiguration,
    OriginKind,
    PropertiesSource,
    ScopedDynamicSource,
    SystemProperties,
    SystemPropertySource,
    load_properties,
)

logger = get_logger(__name__)

PROPERTIES_FILE_NAME = "rpcenv.toml"

OriginFactory = Callable[..., ConfigurationSource]


class Environment:
    """Composes configuration origins into precedence-ordered views.

    Args:
        properties: Local properties mapping; loaded lazily from
            ``properties_file`` when not given
        properties_file: TOML file backing the properties origin; defaults to
            ``<config dir>/rpcenv.toml``
        system: System property store; defaults to the process-wide one
        registry: Extension registry used to resolve dynamic configuration
        config_center_factory: Builds the config center on first external
            map assignment
        config_center_first: Initial precedence flag
        origin_factories: Per-kind overrides. Factories receive
            ``(prefix, id)``; external kinds also receive the current map.
    """

    def __init__(
        self,
        properties: Mapping[str, Any] | None = None,
        properties_file: Path | None = None,
        system: SystemProperties | None = None,
        registry: ExtensionRegistry | None = None,
        config_center_factory: Callable[["Environment"], ConfigCenterClient] | None = None,
        config_center_first: bool = True,
        origin_factories: Mapping[OriginKind, OriginFactory] | None = None,
    ) -> None:
        self.registry = registry if registry is not None else create_default_registry()
        self.system = system

        self._properties = properties
        self._properties_file = properties_file
        self._properties_lock = threading.Lock()

        self._external: dict[str, Any] = {}
        self._app_external: dict[str, Any] = {}

        self._config_center: ConfigCenterClient | None = None
        self._config_center_factory = config_center_factory or (
            lambda env: ConfigCenter(env, env.registry)
        )
        self._config_center_first = config_center_first
        self._lock = threading.RLock()

        factories: dict[OriginKind, OriginFactory] = {
            OriginKind.PROPERTIES: lambda prefix, id: PropertiesSource(
                prefix, id, self._load_properties()
            ),
            OriginKind.SYSTEM: lambda prefix, id: SystemPropertySource(prefix, id, self.system),
            OriginKind.ENVIRONMENT: EnvironmentSource,
            OriginKind.EXTERNAL: InMemorySource,
            OriginKind.APP_EXTERNAL: InMemorySource,
        }
        factories.update(origin_factories or {})

        external_factory = factories[OriginKind.EXTERNAL]
        app_external_factory = factories[OriginKind.APP_EXTERNAL]
        self._caches: dict[OriginKind, KeyedCache[ConfigurationSource]] = {
            OriginKind.PROPERTIES: KeyedCache("properties", factories[OriginKind.PROPERTIES]),
            OriginKind.SYSTEM: KeyedCache("system", factories[OriginKind.SYSTEM]),
            OriginKind.ENVIRONMENT: KeyedCache("environment", factories[OriginKind.ENVIRONMENT]),
            # External origins are seeded with whichever map is current when
            # they are first built.
            OriginKind.EXTERNAL: KeyedCache(
                "external",
                lambda prefix, id: external_factory(prefix, id, self._external),
            ),
            OriginKind.APP_EXTERNAL: KeyedCache(
                "app_external",
                lambda prefix, id: app_external_factory(prefix, id, self._app_external),
            ),
        }
        self._startup_composites: KeyedCache[CompositeSource] = KeyedCache(
            "startup_composite", self._build_startup_composite
        )
        self._nop_dynamic = NopDynamicConfiguration()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        registry: ExtensionRegistry | None = None,
    ) -> "Environment":
        """Build an environment wired to the project settings."""
        return cls(
            properties_file=settings.properties_file,
            registry=registry,
            config_center_factory=lambda env: ConfigCenter(
                env, env.registry, settings.config_center
            ),
            config_center_first=settings.config_center_first,
        )

    # =========================================================================
    # ORIGIN CACHES
    # =========================================================================

    def _load_properties(self) -> Mapping[str, Any]:
        if self._properties is None:
            with self._properties_lock:
                if self._properties is None:
                    path = self._properties_file or get_config_dir() / PROPERTIES_FILE_NAME
                    self._properties = load_properties(path)
        return self._properties

    def get_source(
        self, kind: OriginKind, prefix: str | None = None, id: str | None = None
    ) -> ConfigurationSource:
        """Return the cached origin of a kind for a scope, creating it on miss."""
        return self._caches[kind].get_or_create(prefix, id)

    def get_properties_source(
        self, prefix: str | None = None, id: str | None = None
    ) -> ConfigurationSource:
        return self.get_source(OriginKind.PROPERTIES, prefix, id)

    def get_system_source(
        self, prefix: str | None = None, id: str | None = None
    ) -> ConfigurationSource:
        return self.get_source(OriginKind.SYSTEM, prefix, id)

    def get_environment_source(
        self, prefix: str | None = None, id: str | None = None
    ) -> ConfigurationSource:
        return self.get_source(OriginKind.ENVIRONMENT, prefix, id)

    def get_external_source(
        self, prefix: str | None = None, id: str | None = None
    ) -> ConfigurationSource:
        return self.get_source(OriginKind.EXTERNAL, prefix, id)

    def get_app_external_source(
        self, prefix: str | None = None, id: str | None = None
    ) -> ConfigurationSource:
        return self.get_source(OriginKind.APP_EXTERNAL, prefix, id)

    # =========================================================================
    # EXTERNAL CONFIGURATION
    # =========================================================================

    def set_external(self, configuration: Mapping[str, Any]) -> None:
        """Replace the global external map and (re)initialize the config center.

        Sources created before the call keep reading the previous map.

        Raises:
            Whatever the config center raises while initializing.
        """
        with self._lock:
            self._external = dict(configuration)
            EXTERNAL_UPDATES.labels(scope="external", mode="replace").inc()
            logger.info("external_configuration_replaced", scope="external", keys=len(self._external))
            self._initialize_config_center()

    def set_app_external(self, configuration: Mapping[str, Any]) -> None:
        """Replace the app-scoped external map and (re)initialize the config center."""
        with self._lock:
            self._app_external = dict(configuration)
            EXTERNAL_UPDATES.labels(scope="app_external", mode="replace").inc()
            logger.info(
                "external_configuration_replaced", scope="app_external", keys=len(self._app_external)
            )
            self._initialize_config_center()

    def update_external(self, configuration: Mapping[str, Any]) -> None:
        """Merge entries into the global external map in place.

        Visible to every source seeded with the current map.
        """
        self._external.update(configuration)
        EXTERNAL_UPDATES.labels(scope="external", mode="merge").inc()
        logger.debug("external_configuration_merged", scope="external", keys=len(configuration))

    def update_app_external(self, configuration: Mapping[str, Any]) -> None:
        """Merge entries into the app-scoped external map in place."""
        self._app_external.update(configuration)
        EXTERNAL_UPDATES.labels(scope="app_external", mode="merge").inc()
        logger.debug("external_configuration_merged", scope="app_external", keys=len(configuration))

    @property
    def external_configuration(self) -> dict[str, Any]:
        """Copy of the global external map."""
        return dict(self._external)

    @property
    def app_external_configuration(self) -> dict[str, Any]:
        """Copy of the app-scoped external map."""
        return dict(self._app_external)

    # =========================================================================
    # CONFIG CENTER
    # =========================================================================

    def _initialize_config_center(self) -> None:
        if self._config_center is None:
            self._config_center = self._config_center_factory(self)
            logger.info("config_center_created", config_center=type(self._config_center).__name__)
        self._config_center.initialize()

    @property
    def config_center(self) -> ConfigCenterClient | None:
        return self._config_center

    def set_config_center(self, config_center: ConfigCenterClient) -> None:
        with self._lock:
            self._config_center = config_center

    @property
    def config_center_first(self) -> bool:
        """Whether config center values should outrank local external values.

        The composites do not consult this flag; callers layering config
        center content decide with it.
        """
        return self._config_center_first

    @config_center_first.setter
    def config_center_first(self, value: bool) -> None:
        self._config_center_first = value

    # =========================================================================
    # DYNAMIC CONFIGURATION
    # =========================================================================

    def get_dynamic_configuration(self) -> DynamicConfiguration:
        """Resolve the dynamic configuration to use.

        The first activated implementation wins; more than one active is
        logged as a warning. With none active, the registry default is used,
        and a missing or unusable default falls back to a no-op.
        """
        active = self.registry.active_instances(DYNAMIC_CONFIGURATION)
        if active:
            if len(active) > 1:
                logger.warning(
                    "multiple_dynamic_configurations_active",
                    active=self.registry.active_names(DYNAMIC_CONFIGURATION),
                    selected=type(active[0]).__name__,
                )
            return active[0]

        try:
            default = self.registry.default_instance(DYNAMIC_CONFIGURATION)
        except ExtensionNotFoundError:
            logger.warning("dynamic_configuration_default_missing")
            return self._nop_dynamic

        if not isinstance(default, DynamicConfiguration):
            logger.warning(
                "dynamic_configuration_default_invalid", type=type(default).__name__
            )
            return self._nop_dynamic
        return default

    # =========================================================================
    # COMPOSITES
    # =========================================================================

    def _build_startup_composite(self, prefix: str | None, id: str | None) -> CompositeSource:
        return CompositeSource([
            self.get_system_source(prefix, id),
            self.get_app_external_source(prefix, id),
            self.get_external_source(prefix, id),
            self.get_properties_source(prefix, id),
        ])

    def get_startup_composite(
        self, prefix: str | None = None, id: str | None = None
    ) -> CompositeSource:
        """Cached view for startup-time configuration of one scope.

        Precedence, highest first: system properties, app-scoped external,
        external, local properties file.
        """
        return self._startup_composites.get_or_create(prefix, id)

    def get_runtime_composite(
        self, context: CallContext, method: str | None = None
    ) -> CompositeSource:
        """Fresh view for one call; never cached.

        Precedence, highest first: dynamic configuration scoped to the
        call's application, service and method; the call's own parameters;
        global system properties; global local properties.
        """
        # TODO: measure assembly cost per call under load before considering
        # a per-(service, method) cache invalidated by dynamic updates.
        composite = CompositeSource([
            ScopedDynamicSource(
                context.application_name,
                context.service_identity,
                method,
                self.get_dynamic_configuration(),
            ),
            CallMetadataSource(context, method),
            self.get_system_source(None, None),
            self.get_properties_source(None, None),
        ])
        RUNTIME_COMPOSITES_BUILT.inc()
        return composite


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Get the process-wide environment, built from settings on first use.

    First use also configures logging from the settings and binds the
    application name into the log context.
    """
    settings = get_settings()
    setup_logging(**settings.observability.logging.model_dump())
    structlog.contextvars.bind_contextvars(app_name=settings.app_name)
    return Environment.from_settings(settings)


def reset_environment() -> None:
    """Discard the process-wide environment; the next call builds a new one."""
    get_environment.cache_clear()
