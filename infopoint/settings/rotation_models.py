"""
Rotation configuration models using Pydantic for validation and type safety.

These models describe the persisted display rotation: the ordered list of pages
shown on the kiosk, how long each one stays on screen, and the pause inserted
between pages. Field aliases match the JSON document written by the editing
surface (``urls``, ``timeout``, ``globalTimeout``, ``transitionDelay``).
"""

import logging
from typing import Any, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator, model_validator

from .exceptions import SettingsValidationError

logger = logging.getLogger(__name__)

MIN_TIMEOUT_MS = 1000
DEFAULT_GLOBAL_TIMEOUT_MS = 30000
DEFAULT_TRANSITION_DELAY_MS = 2000
FALLBACK_DWELL_MS = 30000


class RotationItem(BaseModel):
    """One page in the display cycle.

    Attributes:
        url: Absolute URL to display
        name: Display label, defaults to the URL host when blank
        timeout_ms: Optional per-item dwell time in milliseconds

    Example:
        >>> item = RotationItem(url="https://www.raspberrypi.org", timeout=30000)
        >>> item.name
        'www.raspberrypi.org'
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str = Field(description="Absolute URL with a scheme")

    name: str = Field(default="", description="Display label shown in logs")

    timeout_ms: Optional[StrictInt] = Field(
        default=None,
        ge=MIN_TIMEOUT_MS,
        alias="timeout",
        description="Per-item dwell time in milliseconds",
    )

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, v: Any) -> str:
        """Validate that the URL is absolute.

        Args:
            v: Raw URL value

        Returns:
            The stripped URL string

        Raises:
            SettingsValidationError: If the URL is missing a scheme or host
        """
        if not isinstance(v, str) or not v.strip():
            raise SettingsValidationError(
                "Rotation URL must be a non-empty string", field_name="url", field_value=v
            )

        url = v.strip()
        try:
            parts = urlsplit(url)
        except ValueError as e:
            raise SettingsValidationError(
                f"Rotation URL could not be parsed: {url}",
                field_name="url",
                field_value=url,
                validation_errors=[str(e)],
            ) from e

        if not parts.scheme:
            raise SettingsValidationError(
                f"Rotation URL has no scheme: {url}",
                field_name="url",
                field_value=url,
                validation_errors=["URL must include a scheme such as https://"],
            )
        if parts.scheme != "file" and not parts.netloc:
            raise SettingsValidationError(
                f"Rotation URL has no host: {url}",
                field_name="url",
                field_value=url,
            )

        return url

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: Any) -> str:
        """Treat a missing or non-string name as blank."""
        if v is None or not isinstance(v, str):
            return ""
        return v.strip()

    @model_validator(mode="after")
    def default_name_from_host(self) -> "RotationItem":
        """Fill in the display label from the URL host when blank."""
        if not self.name:
            self.name = urlsplit(self.url).hostname or self.url
        return self


class RotationConfig(BaseModel):
    """The persisted display rotation.

    Attributes:
        items: Ordered rotation items; order defines the cycle
        global_timeout_ms: Fallback dwell time for items without their own timeout
        transition_delay_ms: Pause inserted after each dwell period
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    items: list[RotationItem] = Field(default_factory=list, alias="urls")

    global_timeout_ms: StrictInt = Field(
        default=DEFAULT_GLOBAL_TIMEOUT_MS,
        ge=MIN_TIMEOUT_MS,
        alias="globalTimeout",
        description="Fallback dwell time in milliseconds",
    )

    transition_delay_ms: StrictInt = Field(
        default=DEFAULT_TRANSITION_DELAY_MS,
        ge=0,
        alias="transitionDelay",
        description="Pause between pages in milliseconds",
    )

    @classmethod
    def defaults(cls) -> "RotationConfig":
        """Built-in rotation used when no usable configuration exists."""
        return cls(
            items=[
                RotationItem(
                    url="https://www.raspberrypi.org",
                    name="Raspberry Pi Foundation",
                    timeout_ms=30000,
                ),
                RotationItem(
                    url="https://github.com/KeithCarl/InfoPoint",
                    name="InfoPoint Repository",
                    timeout_ms=45000,
                ),
                RotationItem(url="https://www.google.com", name="Google", timeout_ms=20000),
            ],
            global_timeout_ms=DEFAULT_GLOBAL_TIMEOUT_MS,
            transition_delay_ms=DEFAULT_TRANSITION_DELAY_MS,
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    def resolve_dwell_ms(self, item: RotationItem) -> int:
        """Effective dwell time for an item.

        Args:
            item: Rotation item about to be displayed

        Returns:
            Item timeout if set, else the global timeout, else the built-in fallback
        """
        if item.timeout_ms is not None:
            return item.timeout_ms
        if self.global_timeout_ms:
            return self.global_timeout_ms
        return FALLBACK_DWELL_MS

    def to_document(self) -> dict[str, Any]:
        """Serialize to the on-disk JSON layout."""
        return self.model_dump(by_alias=True, exclude_none=True)
