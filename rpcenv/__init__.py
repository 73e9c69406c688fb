"""rpcenv: precedence-ordered configuration resolution for RPC nodes.

Composes property files, system properties, environment variables,
externally pushed maps and a pluggable dynamic configuration source into
views that answer ``lookup(key)`` without callers knowing the origin.
"""

from rpcenv.call import CallContext, CallMetadata, CallMetadataSource
from rpcenv.config_center import ConfigCenter, ConfigCenterClient
from rpcenv.environment import Environment, get_environment, reset_environment
from rpcenv.errors import ConfigCenterError, ExtensionNotFoundError, RpcEnvError
from rpcenv.extension import DYNAMIC_CONFIGURATION, ExtensionRegistry, create_default_registry
from rpcenv.keys import DEFAULT_KEY, to_key
from rpcenv.sources import (
    CompositeSource,
    ConfigurationSource,
    DynamicConfiguration,
    InMemoryDynamicConfiguration,
    NopDynamicConfiguration,
    OriginKind,
    system_properties,
)

__all__ = [
    # Environment
    "Environment",
    "get_environment",
    "reset_environment",
    # Keys
    "DEFAULT_KEY",
    "to_key",
    # Sources
    "CompositeSource",
    "ConfigurationSource",
    "DynamicConfiguration",
    "InMemoryDynamicConfiguration",
    "NopDynamicConfiguration",
    "OriginKind",
    "system_properties",
    # Calls
    "CallContext",
    "CallMetadata",
    "CallMetadataSource",
    # Extensions
    "DYNAMIC_CONFIGURATION",
    "ExtensionRegistry",
    "create_default_registry",
    # Config center
    "ConfigCenter",
    "ConfigCenterClient",
    # Errors
    "ConfigCenterError",
    "ExtensionNotFoundError",
    "RpcEnvError",
]
