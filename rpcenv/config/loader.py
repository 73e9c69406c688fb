"""TOML configuration loading with deep merge and key flattening."""

import os
import tomllib
from pathlib import Path
from typing import Any


def get_config_dir() -> Path:
    """Get the configuration directory path.

    The config directory can be overridden with RPCENV_CONFIG_DIR env var.
    Defaults to the nearest 'config/' in the current or a parent directory.
    """
    config_dir_env = os.environ.get("RPCENV_CONFIG_DIR")
    if config_dir_env:
        path = Path(config_dir_env)
        if not path.exists():
            raise FileNotFoundError(f"Config directory not found: {config_dir_env}")
        return path

    current = Path.cwd()
    for _ in range(5):  # Look up to 5 levels
        config_path = current / "config"
        if config_path.exists():
            return config_path
        current = current.parent

    return Path("config")


def get_environment() -> str:
    """Get the current deployment environment from RPCENV_ENV.

    Defaults to 'development' if not set.
    """
    return os.environ.get("RPCENV_ENV", "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    Args:
        base: Base dictionary
        override: Override dictionary (takes precedence)

    Returns:
        Merged dictionary; neither input is modified
    """
    result = base.copy()

    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def flatten(data: dict[str, Any], parent: str = "") -> dict[str, Any]:
    """Flatten nested tables into dotted keys.

    ``{"service": {"timeout": 3}}`` becomes ``{"service.timeout": 3}``.
    Lists and scalars are kept as leaf values.
    """
    result: dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{parent}.{key}" if parent else str(key)
        if isinstance(value, dict):
            result.update(flatten(value, full_key))
        else:
            result[full_key] = value
    return result


def parse_flat(content: str) -> dict[str, Any]:
    """Parse TOML text into a flat dotted-key mapping.

    Raises:
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    return flatten(tomllib.loads(content))


def load_config() -> dict[str, Any]:
    """Load project settings from TOML files.

    Loading order:
    1. config/default.toml (optional; defaults apply when missing)
    2. config/{RPCENV_ENV}.toml (optional)

    Returns:
        Merged configuration dictionary
    """
    config_dir = get_config_dir()
    env = get_environment()

    config: dict[str, Any] = {}
    default_path = config_dir / "default.toml"
    if default_path.exists():
        config = load_toml(default_path)

    env_path = config_dir / f"{env}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))

    return config
