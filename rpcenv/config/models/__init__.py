"""Configuration model exports.

    from rpcenv.config.models import ConfigCenterConfig, LoggingConfig
"""

from rpcenv.config.models.config_center import ConfigCenterConfig
from rpcenv.config.models.observability import (
    LoggingConfig,
    ObservabilityConfig,
)

__all__ = [
    "ConfigCenterConfig",
    "LoggingConfig",
    "ObservabilityConfig",
]
