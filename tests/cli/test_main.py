"""Tests for the qis command line entry point."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from qis.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def in_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(project_root)
    return project_root


class TestCli:
    """End-to-end invocations through click."""

    def test_given_version_flag_when_invoked_then_title(self, runner: CliRunner) -> None:
        """--version prints the banner and exits cleanly."""
        # When
        result = runner.invoke(cli, ["--version"])

        # Then
        assert result.exit_code == 0
        assert "Quantal Integration System 1.2.3" in result.output

    @pytest.mark.usefixtures("in_project")
    def test_given_help_action_when_invoked_then_overview(self, runner: CliRunner) -> None:
        """help lists the subcommands."""
        # When
        result = runner.invoke(cli, ["help"])

        # Then
        assert result.exit_code == 0
        assert "Subcommands:" in result.output
        assert "Project: Sample" in result.output

    @pytest.mark.usefixtures("in_project")
    def test_given_help_flag_when_invoked_then_contextual_help(self, runner: CliRunner) -> None:
        """-h before an action explains the action."""
        # When
        result = runner.invoke(cli, ["-h", "history"])

        # Then
        assert result.exit_code == 0
        assert "Help for command 'history'" in result.output

    @pytest.mark.usefixtures("in_project")
    def test_given_unknown_action_when_invoked_then_exit_one(self, runner: CliRunner) -> None:
        """Unknown actions exit with status 1."""
        # When
        result = runner.invoke(cli, ["bogus"])

        # Then
        assert result.exit_code == 1
        assert "Unrecognized command 'bogus'" in result.output

    @pytest.mark.usefixtures("in_project")
    def test_given_unknown_help_topic_when_invoked_then_data_error(
        self, runner: CliRunner
    ) -> None:
        """Errors raised by commands become their exit status."""
        # When
        result = runner.invoke(cli, ["help", "bogus"])

        # Then
        assert result.exit_code == 64
        assert "No module or command by name 'bogus' found." in result.output

    @pytest.mark.usefixtures("in_project")
    def test_given_module_options_when_invoked_then_passed_through(
        self, runner: CliRunner
    ) -> None:
        """Options after the action reach the command untouched."""
        # When
        result = runner.invoke(cli, ["summary", "--short", "--no-color"])

        # Then
        assert result.exit_code == 0
        assert "-" * 32 in result.output

    def test_given_empty_directory_when_initialized_then_config_created(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """init works outside any project and writes the config."""
        # Given
        root = tmp_path / "newproject"
        root.mkdir()
        monkeypatch.chdir(root)

        # When
        result = runner.invoke(cli, ["init"])

        # Then
        assert result.exit_code == 0
        assert (root / ".qis" / "config.ini").read_text().startswith(
            "; QIS configuration file v1.2.3\nproject_name=newproject\n"
        )
        assert "No project config file found" not in result.output

    def test_given_no_project_when_summary_then_init_hint(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Outside a project the default action still answers, with a hint."""
        # Given
        monkeypatch.chdir(tmp_path)

        # When
        result = runner.invoke(cli, [])

        # Then
        assert result.exit_code == 0
        assert "Use 'qis init' to initialize." in result.output
