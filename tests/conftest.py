"""Shared test fixtures for the rpcenv test suite."""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog

from rpcenv.environment import Environment, reset_environment
from rpcenv.extension import ExtensionRegistry, create_default_registry
from rpcenv.sources.system import SystemProperties


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "rpcenv.toml": "timeout = 3",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture
def system() -> SystemProperties:
    """Isolated system property store."""
    return SystemProperties()


@pytest.fixture
def registry() -> ExtensionRegistry:
    """Registry with the bundled dynamic configuration implementations."""
    return create_default_registry()


@pytest.fixture
def properties() -> dict[str, Any]:
    """Local properties mapping backing the properties origin."""
    return {}


@pytest.fixture
def env(
    properties: dict[str, Any],
    system: SystemProperties,
    registry: ExtensionRegistry,
) -> Environment:
    """Fresh environment isolated from process-wide state."""
    return Environment(properties=properties, system=system, registry=registry)


@pytest.fixture(autouse=True)
def clear_process_state() -> Generator[None, None, None]:
    """Clear cached settings and the shared environment around each test."""
    from rpcenv.config import get_settings
    from rpcenv.config.settings import set_toml_config

    get_settings.cache_clear()
    set_toml_config({})
    reset_environment()
    yield
    get_settings.cache_clear()
    set_toml_config({})
    reset_environment()
    structlog.contextvars.clear_contextvars()
