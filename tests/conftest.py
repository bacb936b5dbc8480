"""Shared test configuration with lightweight, file-isolated fixtures."""

import json
import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from infopoint.config.settings import (
    BrowserSettings,
    InfoPointSettings,
    LoggingSettings,
    NavigationSettings,
    NetworkSettings,
    RotationTimingSettings,
)


@pytest.fixture
def rotation_file(tmp_path: Path) -> Path:
    """Primary rotation file path inside an isolated config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir / "urls.json"


@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    """Write a JSON document (or raw text) to a path."""

    def _write(path: Path, data: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def browser_settings(tmp_path: Path) -> BrowserSettings:
    """Browser settings with no real delays and a temporary PID file."""
    return BrowserSettings(
        executable_path="chromium-browser",
        pid_file=tmp_path / "chromium.pid",
        kill_settle_delay=0,
        launch_check_delay=0,
        shutdown_timeout=0.2,
        launch_retry_delay=0,
    )


@pytest.fixture
def engine_settings(
    tmp_path: Path, rotation_file: Path, browser_settings: BrowserSettings
) -> InfoPointSettings:
    """Engine settings pointing every file at the temporary directory."""
    return InfoPointSettings(
        rotation_file=rotation_file,
        lock_file=tmp_path / "switcher.lock",
        browser=browser_settings,
        navigation=NavigationSettings(backend="none", focus_delay=0, step_delay=0),
        network=NetworkSettings(wait_enabled=False),
        rotation=RotationTimingSettings(),
        logging=LoggingSettings(console_enabled=False, file_enabled=False),
    )


@pytest.fixture
def restore_infopoint_logger():
    """Undo handler and propagation changes made by setup_logging."""
    logger = logging.getLogger("infopoint")
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    saved_propagate = logger.propagate
    yield logger
    for handler in logger.handlers:
        if handler not in saved_handlers:
            handler.close()
    logger.handlers = saved_handlers
    logger.setLevel(saved_level)
    logger.propagate = saved_propagate
