"""Unit tests for engine settings loading from defaults, YAML and environment."""

from pathlib import Path

import pytest

from infopoint.config.settings import InfoPointSettings, find_settings_file, load_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path: Path):
    """Keep host environment and .env files out of settings tests."""
    for name in [
        "INFOPOINT_SETTINGS_FILE",
        "INFOPOINT_ROTATION_FILE",
        "INFOPOINT_LOCK_FILE",
        "INFOPOINT_BROWSER__EXECUTABLE_PATH",
        "INFOPOINT_NAVIGATION__BACKEND",
    ]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("infopoint.config.settings.DEFAULT_SETTINGS_LOCATIONS", ())


class TestInfoPointSettingsDefaults:
    """Test default settings values."""

    def test_settings_when_default_then_install_paths(self) -> None:
        settings = InfoPointSettings()

        assert settings.rotation_file == Path("/opt/infopoint/config/urls.json")
        assert settings.effective_backup_file == Path("/opt/infopoint/config/urls.json.backup")
        assert settings.lock_file == Path("/tmp/infopoint_switcher.lock")
        assert settings.browser.pid_file == Path("/tmp/infopoint_chromium.pid")
        assert settings.logging.file_path == Path("/opt/infopoint/logs/switcher.log")

    def test_settings_when_default_then_install_timings(self) -> None:
        settings = InfoPointSettings()

        assert settings.browser.kill_settle_delay == 2.0
        assert settings.browser.launch_retry_delay == 5.0
        assert settings.network.poll_interval == 5.0
        assert settings.rotation.idle_interval == 30.0
        assert settings.rotation.config_retry_initial == 10.0
        assert settings.rotation.config_retry_max == 60.0

    def test_effective_backup_when_explicit_then_used(self, tmp_path: Path) -> None:
        settings = InfoPointSettings(backup_file=tmp_path / "b.json")

        assert settings.effective_backup_file == tmp_path / "b.json"


class TestLoadSettings:
    """Test settings source priority."""

    def test_load_settings_when_env_set_then_nested_override(self, monkeypatch) -> None:
        monkeypatch.setenv("INFOPOINT_BROWSER__EXECUTABLE_PATH", "/usr/bin/chromium")
        monkeypatch.setenv("INFOPOINT_NAVIGATION__BACKEND", "wtype")

        settings = load_settings()

        assert settings.browser.executable_path == "/usr/bin/chromium"
        assert settings.navigation.backend == "wtype"

    def test_load_settings_when_yaml_given_then_values_applied(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "infopoint.yaml"
        yaml_file.write_text(
            "rotation_file: /srv/urls.json\n"
            "browser:\n"
            "  executable_path: chromium\n"
            "  extra_flags: ['--incognito']\n"
            "network:\n"
            "  wait_enabled: false\n",
            encoding="utf-8",
        )

        settings = load_settings(yaml_file)

        assert settings.rotation_file == Path("/srv/urls.json")
        assert settings.browser.executable_path == "chromium"
        assert settings.browser.extra_flags == ["--incognito"]
        assert settings.network.wait_enabled is False

    def test_load_settings_when_env_and_yaml_then_env_wins_per_field(
        self, tmp_path: Path, monkeypatch
    ) -> None:
        yaml_file = tmp_path / "infopoint.yaml"
        yaml_file.write_text(
            "browser:\n  executable_path: chromium\n  launch_retry_delay: 9\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("INFOPOINT_BROWSER__EXECUTABLE_PATH", "/opt/chrome")

        settings = load_settings(yaml_file)

        assert settings.browser.executable_path == "/opt/chrome"
        assert settings.browser.launch_retry_delay == 9

    def test_load_settings_when_override_given_then_beats_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "infopoint.yaml"
        yaml_file.write_text("rotation_file: /srv/urls.json\n", encoding="utf-8")

        settings = load_settings(yaml_file, rotation_file=tmp_path / "cli.json")

        assert settings.rotation_file == tmp_path / "cli.json"

    def test_load_settings_when_yaml_invalid_then_ignored(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "infopoint.yaml"
        yaml_file.write_text("- just\n- a list\n", encoding="utf-8")

        settings = load_settings(yaml_file)

        assert settings.rotation_file == Path("/opt/infopoint/config/urls.json")

    def test_find_settings_file_when_env_points_to_file_then_used(
        self, tmp_path: Path, monkeypatch
    ) -> None:
        monkeypatch.setenv("INFOPOINT_SETTINGS_FILE", str(tmp_path / "env.yaml"))

        assert find_settings_file() == tmp_path / "env.yaml"

    def test_find_settings_file_when_nothing_configured_then_none(self) -> None:
        assert find_settings_file() is None
