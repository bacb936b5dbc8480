"""Exceptions raised while loading, validating and saving the rotation file."""

from typing import Any, Optional


class SettingsError(Exception):
    """Base class for rotation configuration errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class SettingsValidationError(SettingsError):
    """A rotation item or timing value failed validation.

    Attributes:
        field_name: Field that was rejected
        field_value: The rejected value
        validation_errors: Hints on how to fix the value
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        validation_errors: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.field_value = field_value
        self.validation_errors = validation_errors or []

    def __str__(self) -> str:
        if self.validation_errors:
            return f"{self.message} ({'; '.join(self.validation_errors)})"
        return self.message


class SettingsPersistenceError(SettingsError):
    """Reading or writing a rotation file failed.

    Attributes:
        operation: ``load`` or ``save``
        file_path: File being read or written
        original_error: Underlying I/O, decode or layout error
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        file_path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.file_path = file_path
        self.original_error = original_error

    def __str__(self) -> str:
        text = self.message
        if self.file_path:
            text = f"{text} ({self.file_path})"
        if self.original_error is not None:
            text = f"{text}: {self.original_error}"
        return text


class SettingsSchemaError(SettingsError):
    """The rotation document root is neither a JSON object nor an array."""

    def __init__(self, message: str, found_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.found_type = found_type

    def __str__(self) -> str:
        if self.found_type:
            return f"{self.message}, found {self.found_type}"
        return self.message
