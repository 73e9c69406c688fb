"""Config center client.

The config center decides whether remotely managed values outrank local
ones and, when an address is configured, pulls the remote configuration
documents into the environment's external maps.
"""

import tomllib
from typing import TYPE_CHECKING, Any, Protocol

from rpcenv.config.loader import parse_flat
from rpcenv.config.models.config_center import ConfigCenterConfig
from rpcenv.errors import ConfigCenterError, ExtensionNotFoundError
from rpcenv.extension import DYNAMIC_CONFIGURATION, ExtensionRegistry
from rpcenv.observability.logging import get_logger
from rpcenv.observability.metrics import CONFIG_CENTER_INITIALIZATIONS
from rpcenv.sources.dynamic import DynamicConfiguration

if TYPE_CHECKING:
    from rpcenv.environment import Environment

logger = get_logger(__name__)


class ConfigCenterClient(Protocol):
    """What the environment needs from a config center."""

    def initialize(self) -> None:
        """(Re)initialize; safe to call repeatedly."""
        ...


class ConfigCenter:
    """Config center reading documents from a dynamic configuration extension.

    ``initialize`` may run many times, once per external map assignment.
    Each run re-reads the documents and merges them into the external maps,
    so repeated runs converge on the same state.
    """

    def __init__(
        self,
        environment: "Environment",
        registry: ExtensionRegistry,
        config: ConfigCenterConfig | None = None,
    ) -> None:
        self.environment = environment
        self.registry = registry
        self.config = config or ConfigCenterConfig()

    def initialize(self) -> None:
        """Pull remote configuration into the environment.

        Raises:
            ConfigCenterError: If the protocol is unknown or a document
                cannot be parsed
        """
        config = self.config
        if not config.address:
            logger.debug("config_center_skipped", reason="no_address")
            CONFIG_CENTER_INITIALIZATIONS.labels(outcome="skipped").inc()
            return

        try:
            dynamic = self._start_dynamic_configuration()
            external = self._read_document(dynamic, config.group)
            app_external = (
                self._read_document(dynamic, config.app_name) if config.app_name else {}
            )
        except ConfigCenterError:
            CONFIG_CENTER_INITIALIZATIONS.labels(outcome="error").inc()
            raise

        self.environment.config_center_first = config.priority
        self.environment.update_external(external)
        self.environment.update_app_external(app_external)

        CONFIG_CENTER_INITIALIZATIONS.labels(outcome="success").inc()
        logger.info(
            "config_center_initialized",
            address=config.address,
            protocol=config.protocol,
            external_keys=len(external),
            app_external_keys=len(app_external),
            config_center_first=config.priority,
        )

    def _start_dynamic_configuration(self) -> DynamicConfiguration:
        try:
            return self.registry.activate(
                DYNAMIC_CONFIGURATION,
                self.config.protocol,
                default_group=self.config.group,
            )
        except ExtensionNotFoundError as e:
            raise ConfigCenterError(
                f"Unknown config center protocol: {self.config.protocol}. "
                f"Available: {self.registry.names(DYNAMIC_CONFIGURATION)}"
            ) from e

    def _read_document(self, dynamic: DynamicConfiguration, group: str) -> dict[str, Any]:
        content = dynamic.get_config(self.config.config_file, group)
        if not content:
            return {}
        try:
            return parse_flat(content)
        except tomllib.TOMLDecodeError as e:
            raise ConfigCenterError(
                f"Invalid configuration document {self.config.config_file!r} "
                f"in group {group!r}: {e}"
            ) from e
