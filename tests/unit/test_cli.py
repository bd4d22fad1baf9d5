"""
Unit tests for the command-line interface.
"""

from pathlib import Path

import pytest

from minihttpd import __version__
from minihttpd.__main__ import build_parser, config_from_args, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_DIRECTORY",
                 "HTTP_WORKERS", "HTTP_TIMEOUT", "HTTP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestCLI:

    def test_defaults(self):
        config = config_from_args(build_parser().parse_args([]))

        assert config.port == 4221
        assert config.directory == "."
        assert config.workers == 5

    def test_directory_flag(self, tmp_path: Path):
        args = build_parser().parse_args(["--directory", str(tmp_path)])
        assert config_from_args(args).directory == str(tmp_path)

    def test_flags_override_env(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "9000")
        monkeypatch.setenv("HTTP_WORKERS", "3")

        config = config_from_args(build_parser().parse_args(["--port", "9100"]))

        assert config.port == 9100
        assert config.workers == 3

    def test_log_level_case_insensitive(self):
        args = build_parser().parse_args(["--log-level", "debug"])
        assert config_from_args(args).log_level == "DEBUG"

    def test_missing_directory_exits(self, tmp_path: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--directory", str(tmp_path / "missing")])

        assert exc_info.value.code == 2
        assert "Directory does not exist" in capsys.readouterr().err

    def test_invalid_port_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--port", "70000"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
