"""Tests for CLI interface."""

import json
from pathlib import Path

import pytest

from direct_coverage_detector.cli import run_cli


@pytest.fixture
def fixtures_path():
    return Path(__file__).parent / "fixtures" / "example_packages"


class TestCLI:
    def given_args(self, *args):
        self.args = [str(a) for a in args]

    def when_cli_is_run_capturing_output(self, capsys):
        self.exit_code = run_cli(self.args)
        self.captured = capsys.readouterr()

    def then_exit_code_is(self, code):
        assert self.exit_code == code

    def then_stdout_is_valid_json_with_score(self, score):
        output = json.loads(self.captured.out)
        assert output["score"] == score

    def test_outputs_text_report(self, fixtures_path, capsys):
        """analyze prints the missing functions and the grade."""
        self.given_args("analyze", "--package", fixtures_path / "simple")
        self.when_cli_is_run_capturing_output(capsys)
        self.then_exit_code_is(0)
        assert "Functions without direct unit tests:" in self.captured.out
        assert "b on line 7" in self.captured.out
        assert "Grade: 75% (3/4 functions)" in self.captured.out

    def test_outputs_json(self, fixtures_path, capsys):
        """--json prints the diff report as JSON."""
        self.given_args("analyze", "-p", fixtures_path / "simple", "--json")
        self.when_cli_is_run_capturing_output(capsys)
        self.then_exit_code_is(0)
        self.then_stdout_is_valid_json_with_score(75)

    def test_bare_directory_defaults_to_analyze(self, fixtures_path, capsys):
        """A directory without subcommand runs analyze."""
        self.given_args(fixtures_path / "simple", "--json")
        self.when_cli_is_run_capturing_output(capsys)
        self.then_exit_code_is(0)
        self.then_stdout_is_valid_json_with_score(75)

    def test_fail_on_found(self, fixtures_path, capsys):
        """--fail-on-found exits 1 when functions lack direct tests."""
        self.given_args("analyze", "-p", fixtures_path / "simple", "--fail-on-found")
        self.when_cli_is_run_capturing_output(capsys)
        self.then_exit_code_is(1)

    def test_missing_package_fails_without_output(self, tmp_path, capsys):
        """Input errors go to stderr with a non-zero exit and no report."""
        self.given_args("analyze", "-p", tmp_path / "nope")
        self.when_cli_is_run_capturing_output(capsys)
        self.then_exit_code_is(1)
        assert self.captured.out == ""
        assert "doesn't exist" in self.captured.err

    def test_package_without_functions_fails(self, tmp_path, capsys):
        """A package declaring no functions is reported as an error."""
        (tmp_path / "doc.go").write_text("package empty\n")
        self.given_args("analyze", "-p", tmp_path)
        self.when_cli_is_run_capturing_output(capsys)
        self.then_exit_code_is(1)
        assert "No declared functions" in self.captured.err

    def test_no_command_shows_help(self, capsys):
        """Running without arguments prints usage and fails."""
        self.given_args()
        self.when_cli_is_run_capturing_output(capsys)
        self.then_exit_code_is(1)
        assert "analyze" in self.captured.err
