"""
Rotation configuration persistence layer for JSON file-based storage.

This module loads the display rotation written by the editing surface, keeps a
backup copy alongside it, upgrades legacy layouts in place and validates every
item on every load. Loading never raises: the engine must keep cycling whatever
state the files are in, so every failure degrades to the backup or to the
built-in defaults and is reported through ``LoadResult.source``.
"""

import contextlib
import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from .exceptions import SettingsPersistenceError, SettingsSchemaError, SettingsValidationError
from .rotation_models import (
    DEFAULT_GLOBAL_TIMEOUT_MS,
    DEFAULT_TRANSITION_DELAY_MS,
    RotationConfig,
    RotationItem,
)

logger = logging.getLogger(__name__)


class ConfigSource(Enum):
    """Where the configuration returned by a load came from.

    Attributes:
        PRIMARY: Primary file parsed and validated
        BACKUP: Backup file used because the primary was missing or unreadable
        DEFAULTS: Built-in defaults; no file exists or no valid item remained
        FAILED: Built-in defaults; files exist but none could be read or parsed
    """

    PRIMARY = "primary"
    BACKUP = "backup"
    DEFAULTS = "defaults"
    FAILED = "failed"


@dataclass
class LoadResult:
    """Outcome of a configuration load.

    Attributes:
        config: Validated rotation configuration
        source: Where the configuration came from
        migrated: Whether a legacy layout was upgraded and written back
        error: Description of the read failure, if any
        document: File contents in the current layout, invalid items included
    """

    config: RotationConfig
    source: ConfigSource
    migrated: bool = False
    error: Optional[str] = None
    document: Optional[dict[str, Any]] = field(default=None, repr=False, compare=False)

    @property
    def failed(self) -> bool:
        return self.source is ConfigSource.FAILED


class RotationConfigStore:
    """Loads and saves the rotation configuration with backup and migration support.

    Attributes:
        config_file: Primary rotation file
        backup_file: Backup copy written after every successful save

    Example:
        >>> store = RotationConfigStore(Path("/opt/infopoint/config/urls.json"))
        >>> result = store.load()
        >>> print(result.source, len(result.config.items))
    """

    def __init__(self, config_file: Path, backup_file: Optional[Path] = None) -> None:
        self.config_file = Path(config_file)
        self.backup_file = (
            Path(backup_file)
            if backup_file
            else self.config_file.with_name(self.config_file.name + ".backup")
        )
        logger.debug(f"Rotation store initialized: {self.config_file} (backup {self.backup_file})")

    def load(self) -> LoadResult:
        """Load the rotation configuration, never raising.

        Returns:
            LoadResult describing the configuration and where it came from
        """
        primary_error: Optional[str] = None

        if self.config_file.exists():
            try:
                result = self._load_from_file(self.config_file, ConfigSource.PRIMARY)
            except SettingsPersistenceError as e:
                primary_error = str(e)
                logger.warning(f"Failed to load rotation from primary file: {e}")
            else:
                if result.migrated and result.document is not None:
                    self._write_back(result.document, "migration")
                return result

        if self.backup_file.exists():
            try:
                result = self._load_from_file(self.backup_file, ConfigSource.BACKUP)
            except SettingsPersistenceError as e:
                logger.warning(f"Failed to load rotation from backup file: {e}")
                return LoadResult(
                    config=RotationConfig.defaults(),
                    source=ConfigSource.FAILED,
                    error=primary_error or str(e),
                )

            if result.source is not ConfigSource.BACKUP:
                return result

            if primary_error is None:
                logger.info("Restored configuration from backup")
                if result.document is not None:
                    self._write_back(result.document, "restore")
            else:
                # A concurrent writer may still be mid-write; leave the primary alone.
                logger.warning("Using backup configuration for this load")
                result.error = primary_error
            return result

        if primary_error is not None:
            logger.error("No usable rotation configuration, using built-in defaults")
            return LoadResult(
                config=RotationConfig.defaults(),
                source=ConfigSource.FAILED,
                error=primary_error,
            )

        logger.info("No rotation configuration found, using built-in defaults")
        return LoadResult(config=RotationConfig.defaults(), source=ConfigSource.DEFAULTS)

    def save(self, config: RotationConfig) -> bool:
        """Write the primary file, then mirror it into the backup file.

        Args:
            config: Rotation configuration to persist

        Returns:
            True if both writes succeeded

        Raises:
            SettingsPersistenceError: If either write fails
        """
        self._write_document(config.to_document())

        logger.info(f"Configuration saved successfully ({len(config.items)} items)")
        return True

    def _load_from_file(self, file_path: Path, source: ConfigSource) -> LoadResult:
        """Read, migrate and validate one rotation file.

        Raises:
            SettingsPersistenceError: If the file cannot be read or parsed
        """
        try:
            with file_path.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SettingsPersistenceError(
                "Unreadable rotation file",
                operation="load",
                file_path=str(file_path),
                original_error=e,
            ) from e

        try:
            document, migrated = self._migrate_schema(data)
        except SettingsSchemaError as e:
            raise SettingsPersistenceError(
                "Unrecognised rotation file layout",
                operation="load",
                file_path=str(file_path),
                original_error=e,
            ) from e

        config, upgraded = self._validate_document(document, file_path)
        if config is None:
            logger.warning(f"No valid rotation items in {file_path}, using built-in defaults")
            return LoadResult(config=RotationConfig.defaults(), source=ConfigSource.DEFAULTS)

        if migrated:
            logger.info(f"Migrated legacy rotation layout in {file_path}")

        return LoadResult(config=config, source=source, migrated=migrated, document=upgraded)

    def _migrate_schema(self, data: Any) -> tuple[dict[str, Any], bool]:
        """Upgrade legacy layouts to the current document layout.

        Legacy layouts are a bare JSON array of URL strings or ``{url, timeout}``
        objects, or a ``urls`` list holding strings or objects without ``name``.

        Returns:
            Tuple of (current-layout document, whether a migration happened)

        Raises:
            SettingsSchemaError: If the document root is neither a list nor an object
        """
        if isinstance(data, list):
            return {"urls": [self._upgrade_item(entry) for entry in data]}, True

        if not isinstance(data, dict):
            raise SettingsSchemaError(
                "Rotation document must be a JSON object or array",
                found_type=type(data).__name__,
            )

        entries = data.get("urls")
        if not isinstance(entries, list):
            return data, False

        needs_upgrade = any(
            isinstance(entry, str) or (isinstance(entry, dict) and "name" not in entry)
            for entry in entries
        )
        if not needs_upgrade:
            return data, False

        upgraded = dict(data)
        upgraded["urls"] = [self._upgrade_item(entry) for entry in entries]
        return upgraded, True

    @staticmethod
    def _upgrade_item(entry: Any) -> Any:
        if isinstance(entry, str):
            return {"url": entry, "name": ""}
        if isinstance(entry, dict):
            upgraded = dict(entry)
            upgraded.setdefault("name", "")
            return upgraded
        # Left as-is so validation rejects it with a clear message.
        return entry

    def _validate_document(
        self, document: dict[str, Any], file_path: Path
    ) -> tuple[Optional[RotationConfig], dict[str, Any]]:
        """Validate timing values and each item independently.

        Invalid items are dropped from the configuration and logged. The
        returned document keeps them verbatim, with valid items in their
        normalised form and missing timing keys filled in.

        Returns:
            Tuple of (configuration, document to persist). The configuration is
            None when there is no usable `urls` list, or listed items but none
            of them were valid.
        """
        upgraded = dict(document)
        upgraded.setdefault("globalTimeout", DEFAULT_GLOBAL_TIMEOUT_MS)
        upgraded.setdefault("transitionDelay", DEFAULT_TRANSITION_DELAY_MS)

        global_timeout = document.get("globalTimeout", DEFAULT_GLOBAL_TIMEOUT_MS)
        transition_delay = document.get("transitionDelay", DEFAULT_TRANSITION_DELAY_MS)

        try:
            RotationConfig(globalTimeout=global_timeout)
        except ValidationError:
            logger.warning(
                f"Invalid globalTimeout {global_timeout!r} in {file_path}, "
                f"using {DEFAULT_GLOBAL_TIMEOUT_MS}ms"
            )
            global_timeout = DEFAULT_GLOBAL_TIMEOUT_MS

        try:
            RotationConfig(transitionDelay=transition_delay)
        except ValidationError:
            logger.warning(
                f"Invalid transitionDelay {transition_delay!r} in {file_path}, "
                f"using {DEFAULT_TRANSITION_DELAY_MS}ms"
            )
            transition_delay = DEFAULT_TRANSITION_DELAY_MS

        entries = document.get("urls")
        if entries is None:
            logger.warning(f"No 'urls' list in {file_path}")
            return None, upgraded
        if not isinstance(entries, list):
            logger.warning(f"'urls' in {file_path} is not a list ({type(entries).__name__})")
            return None, upgraded

        items: list[RotationItem] = []
        kept: list[Any] = []
        for position, entry in enumerate(entries):
            if not isinstance(entry, dict):
                logger.warning(f"Dropping rotation item #{position}: not an object ({entry!r})")
                kept.append(entry)
                continue
            try:
                item = RotationItem.model_validate(entry)
            except (ValidationError, SettingsValidationError) as e:
                logger.warning(f"Dropping invalid rotation item #{position}: {e}")
                kept.append(entry)
                continue
            items.append(item)
            kept.append({**entry, **item.model_dump(by_alias=True, exclude_none=True)})
        upgraded["urls"] = kept

        if entries and not items:
            return None, upgraded

        config = RotationConfig(
            items=items,
            global_timeout_ms=global_timeout,
            transition_delay_ms=transition_delay,
        )
        return config, upgraded

    def _write_document(self, document: dict[str, Any]) -> None:
        for target in (self.config_file, self.backup_file):
            try:
                self._atomic_write(target, document)
            except OSError as e:
                raise SettingsPersistenceError(
                    "Failed to save rotation configuration",
                    operation="save",
                    file_path=str(target),
                    original_error=e,
                ) from e

    def _write_back(self, document: dict[str, Any], operation: str) -> None:
        """Persist a restored or migrated document without failing the load."""
        try:
            self._write_document(document)
        except SettingsPersistenceError as e:
            logger.warning(f"Could not persist configuration after {operation}: {e}")

    @staticmethod
    def _atomic_write(file_path: Path, document: dict[str, Any]) -> None:
        """Write JSON through a temporary file and an atomic replace."""
        file_path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = file_path.with_name(file_path.name + ".tmp")

        try:
            with temp_file.open("w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())

            temp_file.replace(file_path)

        except Exception:
            if temp_file.exists():
                with contextlib.suppress(OSError):
                    temp_file.unlink()
            raise
