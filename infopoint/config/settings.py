"""Settings management using Pydantic for type validation and configuration."""

import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_LOCATIONS = (
    Path("/etc/infopoint/infopoint.yaml"),
    Path.home() / ".config" / "infopoint" / "infopoint.yaml",
)


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    # Console Logging
    console_enabled: bool = Field(default=True, description="Enable console logging")
    console_level: str = Field(
        default="INFO",
        description="Console log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    console_colors: bool = Field(
        default=True, description="Enable colored console output (auto-detected)"
    )

    # File Logging
    file_enabled: bool = Field(default=True, description="Enable file logging")
    file_level: str = Field(
        default="VERBOSE",
        description="File log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    file_path: Path = Field(
        default=Path("/opt/infopoint/logs/switcher.log"), description="Log file location"
    )
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, description="Rotate log after")
    backup_count: int = Field(default=5, ge=0, description="Rotated log files to keep")

    # Third-party Libraries
    third_party_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )


class BrowserSettings(BaseModel):
    """Browser process supervision settings."""

    executable_path: str = Field(
        default="chromium-browser", description="Browser executable name or path"
    )
    pid_file: Path = Field(
        default=Path("/tmp/infopoint_chromium.pid"),  # nosec B108
        description="Recorded browser PID side-channel file",
    )
    extra_flags: list[str] = Field(
        default_factory=list, description="Additional browser command line flags"
    )
    display: Optional[str] = Field(default=":0", description="X display for the browser")
    xauthority: Optional[str] = Field(default=None, description="XAUTHORITY for the browser")

    kill_settle_delay: float = Field(
        default=2.0, ge=0, description="Seconds to wait after killing stray browsers"
    )
    launch_check_delay: float = Field(
        default=1.0, ge=0, description="Seconds to wait before checking the launched process"
    )
    shutdown_timeout: float = Field(
        default=5.0, gt=0, description="Seconds to wait for graceful termination"
    )
    launch_retry_delay: float = Field(
        default=5.0, ge=0, description="Seconds to wait before retrying a failed launch"
    )


class NavigationSettings(BaseModel):
    """In-place navigation through desktop input automation."""

    backend: Literal["xdotool", "wtype", "none"] = Field(
        default="xdotool",
        description="Automation backend: xdotool (X11), wtype (Wayland) or none",
    )
    window_name: str = Field(
        default="Chromium", description="Window title/class used to focus the browser"
    )
    focus_delay: float = Field(default=1.0, ge=0, description="Pause after focusing window")
    step_delay: float = Field(default=0.5, ge=0, description="Pause between input steps")
    command_timeout: float = Field(
        default=5.0, gt=0, description="Timeout for each automation command"
    )


class NetworkSettings(BaseModel):
    """Startup network readiness gate."""

    wait_enabled: bool = Field(default=True, description="Wait for network before rotating")
    probe_url: str = Field(
        default="https://www.google.com", description="URL probed for reachability"
    )
    poll_interval: float = Field(default=5.0, gt=0, description="Seconds between probes")
    request_timeout: float = Field(default=3.0, gt=0, description="Timeout for each probe")


class RotationTimingSettings(BaseModel):
    """Scheduler intervals that are not part of the rotation file."""

    idle_interval: float = Field(
        default=30.0, gt=0, description="Seconds to wait when no URLs are configured"
    )
    progress_threshold: float = Field(
        default=10.0, gt=0, description="Dwell seconds above which progress is logged"
    )
    progress_interval: float = Field(
        default=10.0, gt=0, description="Seconds between dwell progress log lines"
    )
    config_retry_initial: float = Field(
        default=10.0, gt=0, description="First backoff after a failed configuration read"
    )
    config_retry_max: float = Field(
        default=60.0, gt=0, description="Backoff cap after repeated failed reads"
    )


class InfoPointSettings(BaseSettings):
    """Engine settings with environment variable support."""

    # File Paths
    rotation_file: Path = Field(
        default=Path("/opt/infopoint/config/urls.json"), description="Rotation JSON file"
    )
    backup_file: Optional[Path] = Field(
        default=None, description="Rotation backup file (defaults to <rotation_file>.backup)"
    )
    lock_file: Path = Field(
        default=Path("/tmp/infopoint_switcher.lock"),  # nosec B108
        description="Single-instance run lock",
    )

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    navigation: NavigationSettings = Field(default_factory=NavigationSettings)
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    rotation: RotationTimingSettings = Field(default_factory=RotationTimingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix="INFOPOINT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def effective_backup_file(self) -> Path:
        if self.backup_file:
            return self.backup_file
        return self.rotation_file.with_name(self.rotation_file.name + ".backup")


def find_settings_file(explicit: Optional[Path] = None) -> Optional[Path]:
    """Find the engine settings YAML file.

    Checks the explicit path, then ``INFOPOINT_SETTINGS_FILE``, then the system
    and user locations.
    """
    if explicit:
        return Path(explicit)

    from_env = os.environ.get("INFOPOINT_SETTINGS_FILE")
    if from_env:
        return Path(from_env)

    for candidate in DEFAULT_SETTINGS_LOCATIONS:
        if candidate.exists():
            return candidate

    return None


def _read_yaml(config_file: Path) -> dict[str, Any]:
    try:
        with config_file.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning(f"Settings file not found: {config_file}")
        return {}
    except (OSError, yaml.YAMLError):
        logger.exception(f"Failed to read settings file {config_file}")
        return {}

    if not data:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring settings file {config_file}: top level is not a mapping")
        return {}
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(config_file: Optional[Path] = None, **overrides: Any) -> InfoPointSettings:
    """Build engine settings.

    Priority: explicit overrides > environment > YAML > defaults.

    Args:
        config_file: Optional settings YAML path
        **overrides: Field values that take precedence over every other source

    Returns:
        Validated InfoPointSettings
    """
    env_settings = InfoPointSettings(**overrides)

    settings_file = find_settings_file(config_file)
    if settings_file is None:
        return env_settings

    yaml_data = _read_yaml(settings_file)
    if not yaml_data:
        return env_settings

    explicit = env_settings.model_dump(exclude_unset=True)
    merged = _deep_merge(yaml_data, explicit)
    logger.debug(f"Loaded settings from {settings_file}")
    return InfoPointSettings(**merged)
