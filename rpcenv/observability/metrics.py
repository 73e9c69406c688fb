"""Prometheus metrics for rpcenv.

Tracks origin cache growth, runtime composite assembly and external
configuration traffic.
"""

from prometheus_client import Counter

# Origin cache metrics
ORIGIN_SOURCES_CREATED = Counter(
    "rpcenv_origin_sources_created_total",
    "Total number of origin sources constructed on cache miss",
    labelnames=["kind"],
)

# Composite metrics
RUNTIME_COMPOSITES_BUILT = Counter(
    "rpcenv_runtime_composites_built_total",
    "Total number of per-call runtime composites assembled",
)

# External configuration metrics
EXTERNAL_UPDATES = Counter(
    "rpcenv_external_updates_total",
    "Total number of external configuration map changes",
    labelnames=["scope", "mode"],
)

# Config center metrics
CONFIG_CENTER_INITIALIZATIONS = Counter(
    "rpcenv_config_center_initializations_total",
    "Total number of config center initialization runs",
    labelnames=["outcome"],
)
