"""Kiosk mode handler for InfoPoint CLI.

This module runs the rotation engine and provides the maintenance operations
around it: validating the rotation file and reporting engine status.
"""

import logging
from typing import Any

from pydantic import ValidationError

from ...config.settings import InfoPointSettings, load_settings
from ...kiosk.manager import EXIT_ERROR, EXIT_OK, KioskManager
from ...settings.persistence import LoadResult, RotationConfigStore
from ...utils.daemon import is_lock_held, read_lock_holder
from ...utils.logging import apply_command_line_overrides, setup_logging
from ...utils.process import is_pid_alive, read_pid_file

logger = logging.getLogger(__name__)


class KioskCLIError(Exception):
    """Exception raised for kiosk CLI-related errors."""


def _configure_settings(args: Any) -> InfoPointSettings:
    """Build engine settings from the settings sources and command line.

    Args:
        args: Parsed command line arguments

    Returns:
        Engine settings with command-line overrides applied

    Raises:
        KioskCLIError: If the settings are invalid
    """
    overrides = {}
    if getattr(args, "config", None):
        overrides["rotation_file"] = args.config

    try:
        settings = load_settings(getattr(args, "settings", None), **overrides)
    except ValidationError as e:
        raise KioskCLIError(f"Invalid engine settings: {e}") from e

    if getattr(args, "no_network_wait", False):
        settings.network.wait_enabled = False

    apply_command_line_overrides(settings.logging, args)
    return settings


def _format_rotation(result: LoadResult) -> str:
    config = result.config
    lines = [
        f"Source: {result.source.value}" + (" (migrated)" if result.migrated else ""),
        f"Global timeout: {config.global_timeout_ms}ms",
        f"Transition delay: {config.transition_delay_ms}ms",
        f"Items: {len(config.items)}",
    ]
    for position, item in enumerate(config.items, start=1):
        dwell = config.resolve_dwell_ms(item)
        lines.append(f"  {position}. {item.name} - {item.url} ({dwell}ms)")
    if result.error:
        lines.append(f"Error: {result.error}")
    return "\n".join(lines)


async def run_kiosk_mode(args: Any) -> int:
    """Run the rotation engine until it is told to stop.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    try:
        settings = _configure_settings(args)
    except KioskCLIError as e:
        print(f"Configuration error: {e}")
        return EXIT_ERROR

    setup_logging(settings.logging)
    logger.info(f"InfoPoint rotation engine (lock {settings.lock_file})")

    manager = KioskManager(settings)
    return await manager.run()


def run_validate_config(args: Any) -> int:
    """Load, validate and migrate the rotation file and print the result.

    Returns:
        0 if a configuration was read, 1 if the load failed
    """
    try:
        settings = _configure_settings(args)
    except KioskCLIError as e:
        print(f"Configuration error: {e}")
        return EXIT_ERROR

    settings.logging.file_enabled = False
    setup_logging(settings.logging)

    store = RotationConfigStore(settings.rotation_file, settings.effective_backup_file)
    result = store.load()

    print(f"Rotation file: {settings.rotation_file}")
    print(_format_rotation(result))
    return EXIT_ERROR if result.failed else EXIT_OK


def check_status(args: Any) -> int:
    """Report whether an engine holds the run lock and its browser is alive.

    Returns:
        0 if an engine is running, 1 otherwise
    """
    try:
        settings = _configure_settings(args)
    except KioskCLIError as e:
        print(f"Configuration error: {e}")
        return EXIT_ERROR

    running = is_lock_held(settings.lock_file)
    holder = read_lock_holder(settings.lock_file) if running else None
    browser_pid = read_pid_file(settings.browser.pid_file)
    browser_alive = is_pid_alive(browser_pid)

    engine_line = "running" if running else "not running"
    if holder:
        engine_line += f" (PID {holder})"
    browser_line = f"PID {browser_pid} " if browser_pid else ""
    browser_line += "alive" if browser_alive else "not running"

    print(f"InfoPoint engine: {engine_line}")
    print(f"Browser: {browser_line}")
    print(f"Rotation file: {settings.rotation_file}")
    return EXIT_OK if running else EXIT_ERROR
