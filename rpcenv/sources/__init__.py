"""Configuration origins and composition.

Each origin answers ``lookup(key)`` for one kind of backing store; a
``CompositeSource`` stacks origins in precedence order.
"""

from enum import Enum

from rpcenv.sources.base import (
    AbstractSource,
    CompositeSource,
    ConfigurationSource,
    PrefixedSource,
)
from rpcenv.sources.dynamic import (
    DynamicConfiguration,
    InMemoryDynamicConfiguration,
    NopDynamicConfiguration,
    ScopedDynamicSource,
)
from rpcenv.sources.environment import EnvironmentSource
from rpcenv.sources.memory import InMemorySource
from rpcenv.sources.properties import PropertiesSource, load_properties
from rpcenv.sources.system import SystemProperties, SystemPropertySource, system_properties


class OriginKind(str, Enum):
    """Kinds of origin the environment caches per (prefix, id)."""

    PROPERTIES = "properties"
    SYSTEM = "system"
    ENVIRONMENT = "environment"
    EXTERNAL = "external"
    APP_EXTERNAL = "app_external"


__all__ = [
    "AbstractSource",
    "CompositeSource",
    "ConfigurationSource",
    "DynamicConfiguration",
    "EnvironmentSource",
    "InMemoryDynamicConfiguration",
    "InMemorySource",
    "NopDynamicConfiguration",
    "OriginKind",
    "PrefixedSource",
    "PropertiesSource",
    "ScopedDynamicSource",
    "SystemProperties",
    "SystemPropertySource",
    "load_properties",
    "system_properties",
]
