"""Unit tests for command-line argument parsing."""

from pathlib import Path

import pytest

from infopoint import __version__
from infopoint.cli.parser import create_parser


class TestCreateParser:
    """Test the argument parser."""

    def test_parse_when_no_arguments_then_run_mode_defaults(self) -> None:
        args = create_parser().parse_args([])

        assert args.config is None
        assert args.settings is None
        assert args.validate_config is False
        assert args.status is False
        assert args.no_network_wait is False
        assert args.log_level is None

    def test_parse_when_paths_given_then_path_objects(self) -> None:
        args = create_parser().parse_args(
            ["--config", "/srv/urls.json", "--settings", "/etc/infopoint/settings.yaml"]
        )

        assert args.config == Path("/srv/urls.json")
        assert args.settings == Path("/etc/infopoint/settings.yaml")

    def test_parse_when_log_level_lowercase_then_normalized(self) -> None:
        args = create_parser().parse_args(["--log-level", "verbose", "-q"])

        assert args.log_level == "VERBOSE"
        assert args.quiet is True

    def test_parse_when_validate_and_status_then_rejected(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--validate-config", "--status"])

        assert exc_info.value.code == 2
        assert "not allowed with argument" in capsys.readouterr().err

    def test_parse_when_version_then_prints_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
