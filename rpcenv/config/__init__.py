"""Settings for rpcenv itself.

These settings configure the service (where the local properties file
lives, the config center, logging); they are not the configuration values
the service resolves for callers.

Usage:
    from rpcenv.config import get_settings

    settings = get_settings()
    settings.config_center.address
"""

from functools import lru_cache

from rpcenv.config.loader import load_config
from rpcenv.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{RPCENV_ENV}.toml (environment overrides)
    4. RPCENV_* environment variables (runtime overrides)

    Call `get_settings.cache_clear()` to reload configuration.
    """
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
