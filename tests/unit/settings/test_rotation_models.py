"""
Unit tests for the rotation configuration models.

Tests URL validation, timeout rules, display-name defaults, dwell resolution
and serialization to the on-disk document layout.
"""

import pytest
from pydantic import ValidationError

from infopoint.settings.exceptions import SettingsValidationError
from infopoint.settings.rotation_models import (
    DEFAULT_GLOBAL_TIMEOUT_MS,
    DEFAULT_TRANSITION_DELAY_MS,
    FALLBACK_DWELL_MS,
    RotationConfig,
    RotationItem,
)


class TestRotationItem:
    """Test RotationItem validation."""

    def test_rotation_item_when_valid_url_then_fields_set(self) -> None:
        item = RotationItem(url="https://example.com/page", name="Example", timeout=5000)

        assert item.url == "https://example.com/page"
        assert item.name == "Example"
        assert item.timeout_ms == 5000

    def test_rotation_item_when_name_blank_then_host_used(self) -> None:
        item = RotationItem(url="https://news.example.org/today", name="  ")

        assert item.name == "news.example.org"

    def test_rotation_item_when_file_url_then_accepted(self) -> None:
        item = RotationItem(url="file:///opt/infopoint/local/index.html")

        assert item.url.startswith("file://")
        assert item.name == "file:///opt/infopoint/local/index.html"

    @pytest.mark.parametrize("url", ["example.com", "", "   ", "https://"])
    def test_rotation_item_when_url_not_absolute_then_rejected(self, url: str) -> None:
        with pytest.raises(SettingsValidationError) as exc_info:
            RotationItem(url=url)

        assert exc_info.value.field_name == "url"

    def test_rotation_item_when_url_not_string_then_rejected(self) -> None:
        with pytest.raises(SettingsValidationError):
            RotationItem(url=42)

    @pytest.mark.parametrize("timeout", ["30000", -5, 500, True, 12.5])
    def test_rotation_item_when_timeout_invalid_then_rejected(self, timeout: object) -> None:
        with pytest.raises(ValidationError):
            RotationItem(url="https://example.com", timeout=timeout)

    def test_rotation_item_when_timeout_absent_then_none(self) -> None:
        item = RotationItem(url="https://example.com")

        assert item.timeout_ms is None

    def test_rotation_item_when_unknown_keys_then_ignored(self) -> None:
        item = RotationItem.model_validate(
            {"url": "https://example.com", "name": "x", "color": "red"}
        )

        assert not hasattr(item, "color")


class TestRotationConfig:
    """Test RotationConfig defaults and dwell resolution."""

    def test_rotation_config_when_default_then_install_timings(self) -> None:
        config = RotationConfig()

        assert config.items == []
        assert config.is_empty
        assert config.global_timeout_ms == DEFAULT_GLOBAL_TIMEOUT_MS
        assert config.transition_delay_ms == DEFAULT_TRANSITION_DELAY_MS

    def test_defaults_when_built_then_three_items(self) -> None:
        config = RotationConfig.defaults()

        assert [item.name for item in config.items] == [
            "Raspberry Pi Foundation",
            "InfoPoint Repository",
            "Google",
        ]
        assert [item.timeout_ms for item in config.items] == [30000, 45000, 20000]

    def test_resolve_dwell_when_item_timeout_set_then_item_timeout(self) -> None:
        config = RotationConfig(globalTimeout=20000)
        item = RotationItem(url="https://example.com", timeout=5000)

        assert config.resolve_dwell_ms(item) == 5000

    def test_resolve_dwell_when_item_timeout_absent_then_global(self) -> None:
        config = RotationConfig(globalTimeout=20000)
        item = RotationItem(url="https://example.com")

        assert config.resolve_dwell_ms(item) == 20000

    def test_resolve_dwell_when_no_timeouts_then_fallback(self) -> None:
        config = RotationConfig.model_construct(
            items=[], global_timeout_ms=0, transition_delay_ms=0
        )
        item = RotationItem(url="https://example.com")

        assert config.resolve_dwell_ms(item) == FALLBACK_DWELL_MS

    def test_rotation_config_when_transition_negative_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RotationConfig(transitionDelay=-1)

    def test_to_document_when_serialized_then_aliases_and_no_null_timeout(self) -> None:
        config = RotationConfig(
            items=[
                RotationItem(url="https://a.example", name="A", timeout=5000),
                RotationItem(url="https://b.example", name="B"),
            ],
            global_timeout_ms=15000,
            transition_delay_ms=0,
        )

        assert config.to_document() == {
            "urls": [
                {"url": "https://a.example", "name": "A", "timeout": 5000},
                {"url": "https://b.example", "name": "B"},
            ],
            "globalTimeout": 15000,
            "transitionDelay": 0,
        }
