"""Operating system environment origin."""

import os
from typing import Any

from rpcenv.sources.base import PrefixedSource


def to_os_style_key(key: str) -> str:
    """``rpcenv.registry.address`` -> ``RPCENV_REGISTRY_ADDRESS``."""
    return key.upper().replace(".", "_").replace("-", "_")


class EnvironmentSource(PrefixedSource):
    """Origin reading ``os.environ`` live.

    The key is tried verbatim first, then in OS style.
    """

    def _get(self, key: str) -> Any | None:
        value = os.environ.get(key)
        if not value:
            value = os.environ.get(to_os_style_key(key))
        return value or None
