"""
Tests for the command-line interface.
"""

import logging

import pytest
from typer.testing import CliRunner

from sqldiagnostics.interface.cli import main
from sqldiagnostics.interface.cli.commands.run_command import (
    EXIT_FATAL,
    EXIT_INVALID_SETTINGS,
    EXIT_NOT_CONFIRMED,
)
from sqldiagnostics.interface.cli.orchestrator import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """setup_logging replaces the root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestRunCommand:
    """Test cases for `sqldiagnostics run`."""

    def test_negative_interval(self, catalog_file):
        result = runner.invoke(app, ["run", "--interval=-5", "--yes", "-q", str(catalog_file)])
        assert result.exit_code == EXIT_INVALID_SETTINGS

    def test_negative_duration(self, catalog_file):
        result = runner.invoke(app, ["run", "--duration=-1", "--yes", "-q", str(catalog_file)])
        assert result.exit_code == EXIT_INVALID_SETTINGS

    def test_confirmation_refused(self, tmp_path, catalog_file):
        result = runner.invoke(
            app,
            ["run", "-c", str(tmp_path / "config.properties"), "-q", str(catalog_file),
             "-o", str(tmp_path / "out")],
            input="no\n",
        )

        assert result.exit_code == EXIT_NOT_CONFIRMED
        assert "Cancelled" in result.output
        assert not (tmp_path / "out").exists()

    def test_missing_config_is_fatal(self, tmp_path, catalog_file):
        result = runner.invoke(
            app,
            ["run", "--yes", "-c", str(tmp_path / "missing.properties"),
             "-q", str(catalog_file), "-o", str(tmp_path / "out")],
        )

        assert result.exit_code == EXIT_FATAL
        assert not (tmp_path / "out").exists()

    def test_confirmed_by_typing_yes(self, tmp_path, catalog_file):
        result = runner.invoke(
            app,
            ["run", "-c", str(tmp_path / "missing.properties"), "-q", str(catalog_file)],
            input="YES\n",
        )

        # confirmation accepted, then the missing config stops the run
        assert result.exit_code == EXIT_FATAL

    def test_duration_help_describes_run_count(self):
        result = runner.invoke(
            app, ["run", "--help"], env={"COLUMNS": "200", "TERMINAL_WIDTH": "200"}
        )

        assert result.exit_code == 0
        assert "floor(duration*60/interval)" in result.output
        assert "shorter than one interval" in result.output


class TestCatalogCommand:
    """Test cases for `sqldiagnostics catalog`."""

    def test_lists_queries(self, tmp_path):
        catalog = tmp_path / "q.json"
        catalog.write_text(
            '{"querysource": {"name": "Demo"}, "queries": ['
            '{"name": "Alpha", "description": "first"},'
            '{"name": "Beta", "description": "second"}]}',
            encoding="utf-8",
        )

        result = runner.invoke(app, ["catalog", "-q", str(catalog)])

        assert result.exit_code == 0
        assert "1_Alpha" in result.output
        assert "2_Beta" in result.output
        assert "2 queries" in result.output

    def test_missing_catalog(self, tmp_path):
        result = runner.invoke(app, ["catalog", "-q", str(tmp_path / "missing.json")])
        assert result.exit_code == 1


class TestMain:
    """Test cases for the main() entry point."""

    def test_returns_exit_code(self):
        assert main(["run", "--interval=-1", "--yes"]) == EXIT_INVALID_SETTINGS

    def test_version(self, capsys):
        assert main(["--version"]) == 0
        assert "sqldiagnostics" in capsys.readouterr().out
