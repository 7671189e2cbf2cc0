"""Shared test fixtures for the canvaspartner test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

# Tests run against config/test.toml: mock model, no web search, in-memory stores
os.environ.setdefault("CANVASPARTNER_ENV", "test")
os.environ.setdefault(
    "CANVASPARTNER_CONFIG_DIR", str(Path(__file__).resolve().parent.parent / "config")
)
os.environ.setdefault("CANVASPARTNER_JWT_SECRET", "test-secret")

from canvaspartner.canvas.models import GeoPoint  # noqa: E402
from canvaspartner.canvas.stores import InMemoryCanvasStore  # noqa: E402
from canvaspartner.conversation.stores import (  # noqa: E402
    InMemoryMessageStore,
    InMemorySessionStore,
)
from canvaspartner.providers.search.base import DisabledSearchProvider  # noqa: E402
from canvaspartner.tools import ToolRegistry, build_default_registry  # noqa: E402

DEFAULT_LOCATION = GeoPoint(lat=-6.212249928667231, lon=106.79734681365301)


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
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


class EnvOverrideContext:
    """Context manager for temporarily setting environment variables."""

    def __init__(self, overrides: dict[str, str]) -> None:
        self.overrides = overrides
        self.original_env: dict[str, str | None] = {}

    def __enter__(self) -> None:
        for key, value in self.overrides.items():
            self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

    def __exit__(self, *args: Any) -> None:
        for key in self.overrides:
            original = self.original_env[key]
            if original is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = original


@pytest.fixture
def env_override() -> Generator[Callable[[dict[str, str]], EnvOverrideContext], None, None]:
    """Context manager for temporarily setting environment variables.

    Usage:
        def test_something(env_override):
            with env_override({"CANVASPARTNER_DEBUG": "true"}):
                # test code here
    """

    def _env_override(overrides: dict[str, str]) -> EnvOverrideContext:
        return EnvOverrideContext(overrides)

    yield _env_override


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from canvaspartner.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def default_location() -> GeoPoint:
    return DEFAULT_LOCATION


@pytest.fixture
def canvas_store() -> InMemoryCanvasStore:
    return InMemoryCanvasStore()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def message_store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def registry(canvas_store: InMemoryCanvasStore) -> ToolRegistry:
    """Registry with every tool, search disabled."""
    return build_default_registry(
        canvas_store,
        DisabledSearchProvider(),
        default_location=DEFAULT_LOCATION,
        timeout_seconds=5.0,
    )


@pytest.fixture(autouse=True)
def reset_sse_app_status() -> None:
    """sse-starlette keeps a module-level exit event bound to the first event loop."""
    from sse_starlette import sse

    app_status = getattr(sse, "AppStatus", None)
    if app_status is not None and hasattr(app_status, "should_exit_event"):
        app_status.should_exit_event = None
