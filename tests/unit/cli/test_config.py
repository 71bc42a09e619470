"""Unit tests for the config command and global options."""

import logging
import tomllib
from pathlib import Path

import pytest
from blockclean import __version__
from blockclean.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestGlobalOptions:
    """Tests for options on the main application."""

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"blockclean version {__version__}" in result.stdout

    def test_no_args_shows_help(self) -> None:
        """Running without a command prints usage."""
        result = runner.invoke(app, [])
        assert "Usage" in result.output

    @pytest.mark.parametrize(
        ("flags", "level"),
        [([], logging.INFO), (["--verbose"], logging.DEBUG), (["--quiet"], logging.WARNING)],
    )
    def test_log_level(self, flags: list[str], level: int) -> None:
        """--verbose and --quiet set the root log level."""
        result = runner.invoke(app, [*flags, "config"], env={"CACHE_DIRS": "/data"})

        assert result.exit_code == 0
        assert logging.getLogger().level == level


class TestConfigCommand:
    """Tests for blockclean config."""

    def test_table(self) -> None:
        """The resolved configuration is shown as a table."""
        result = runner.invoke(app, ["config"], env={"CACHE_DIRS": "/data1,/data2"})

        assert result.exit_code == 0
        assert "FILE_EXPIRED_TIME" in result.stdout
        assert "604800000" in result.stdout
        assert "7d" in result.stdout

    def test_toml(self) -> None:
        """--format toml prints loadable TOML on stdout."""
        result = runner.invoke(
            app,
            ["--quiet", "config", "--format", "toml"],
            env={"CACHE_DIRS": "/data1,/data2", "SLEEP_TIME": "60000"},
        )

        assert result.exit_code == 0
        data = tomllib.loads(result.stdout)
        assert data["CACHE_DIRS"] == "/data1,/data2"
        assert data["SLEEP_TIME"] == 60000
        assert data["FREE_SPACE_THRESHOLD"] == 60

    def test_config_file(self, tmp_path: Path) -> None:
        """Values can come from a TOML file."""
        config_file = tmp_path / "cleaner.toml"
        config_file.write_text('CACHE_DIRS = "/from/file"\nFREE_SPACE_THRESHOLD = 20\n')

        result = runner.invoke(
            app,
            ["--quiet", "config", "--config-file", str(config_file), "--format", "toml"],
            env={"CACHE_DIRS": None},
        )

        assert result.exit_code == 0
        assert tomllib.loads(result.stdout)["FREE_SPACE_THRESHOLD"] == 20

    def test_invalid(self) -> None:
        """Invalid configuration exits with an error."""
        result = runner.invoke(
            app, ["config"], env={"CACHE_DIRS": "/data", "SLEEP_TIME": "-1"}
        )

        assert result.exit_code == 1
        assert "SLEEP_TIME" in result.output
