"""Unit tests for the CLI — Typer command registration and behavior."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from jenkinsforge.cli.app import app, parse_parameters

runner = CliRunner()


class TestCliApp:
    """The CLI must register all expected commands and show help."""

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "run" in result.output
        assert "phases" in result.output

    def test_run_command_exists(self):
        result = runner.invoke(app, ["run", "--help"])
        assert result.exit_code == 0

    def test_run_requires_repo(self):
        result = runner.invoke(app, ["run"])
        assert result.exit_code != 0

    def test_run_without_server_url_fails(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("JENKINSFORGE_JENKINS_URL", raising=False)
        result = runner.invoke(app, ["run", "--repo", "acme/app"])
        assert result.exit_code == 1
        assert "server configuration incomplete" in result.output

    def test_run_missing_definition_file(self, tmp_path: Path):
        result = runner.invoke(
            app, ["run", "--repo", "acme/app", "--definition", str(tmp_path / "missing.xml")]
        )
        assert result.exit_code == 1
        assert "Definition not found" in result.output


class TestPhasesCommand:
    def test_detects_phases(self, tmp_path: Path):
        log_file = tmp_path / "build.log"
        log_file.write_text(
            "\n".join([
                "/--",
                "Starting Jenkins job 'app' with parameters '{}'",
                "\\--",
                "[Pipeline] { (Build)",
                "+ make",
            ]),
            encoding="utf-8",
        )
        result = runner.invoke(app, ["phases", str(log_file)])
        assert result.exit_code == 0
        assert "queued" in result.output
        assert "Build" in result.output

    def test_no_phases(self, tmp_path: Path):
        log_file = tmp_path / "plain.log"
        log_file.write_text("hello\n", encoding="utf-8")
        result = runner.invoke(app, ["phases", str(log_file)])
        assert result.exit_code == 0
        assert "No phases detected" in result.output

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["phases", str(tmp_path / "nope.log")])
        assert result.exit_code == 1


class TestParseParameters:
    def test_pairs(self):
        assert parse_parameters(["A=1", "B=x=y", "C="]) == {"A": "1", "B": "x=y", "C": ""}

    def test_rejects_missing_separator(self):
        import typer

        with pytest.raises(typer.BadParameter):
            parse_parameters(["oops"])
