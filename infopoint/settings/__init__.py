"""
InfoPoint Rotation Settings Module.

This module provides the rotation configuration models and the JSON file store
consumed by the display rotation engine.

Public API:
    RotationConfigStore: Loads, validates, migrates and saves the rotation file
    RotationConfig: Complete rotation configuration
    RotationItem: One page in the display cycle
    LoadResult: Outcome of a configuration load
    ConfigSource: Origin of a loaded configuration
    SettingsError: Base exception for settings-related errors
    SettingsValidationError: Settings validation error
    SettingsPersistenceError: Settings persistence error
    SettingsSchemaError: Unrecognised rotation file layout
"""

from .exceptions import (
    SettingsError,
    SettingsPersistenceError,
    SettingsSchemaError,
    SettingsValidationError,
)
from .persistence import ConfigSource, LoadResult, RotationConfigStore
from .rotation_models import RotationConfig, RotationItem

__all__ = [
    "ConfigSource",
    "LoadResult",
    "RotationConfig",
    "RotationConfigStore",
    "RotationItem",
    "SettingsError",
    "SettingsPersistenceError",
    "SettingsSchemaError",
    "SettingsValidationError",
]
