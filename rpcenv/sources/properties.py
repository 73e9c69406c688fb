"""Local properties file origin."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from rpcenv.config.loader import flatten, load_toml
from rpcenv.observability.logging import get_logger
from rpcenv.sources.base import PrefixedSource

logger = get_logger(__name__)


def load_properties(path: Path) -> dict[str, Any]:
    """Load a local properties file as a flat dotted-key mapping.

    The file is TOML; nested tables become dotted keys. A missing file is
    not an error and yields an empty mapping.

    Raises:
        tomllib.TOMLDecodeError: If the file exists but is not valid TOML
    """
    if not path.exists():
        logger.warning("properties_file_not_found", path=str(path))
        return {}

    properties = flatten(load_toml(path))
    logger.info("properties_file_loaded", path=str(path), keys=len(properties))
    return properties


class PropertiesSource(PrefixedSource):
    """Origin backed by the process-wide local properties mapping."""

    def __init__(
        self,
        prefix: str | None,
        id: str | None,
        properties: Mapping[str, Any],
    ) -> None:
        super().__init__(prefix, id)
        self._properties = properties

    def _get(self, key: str) -> Any | None:
        return self._properties.get(key)
