"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work against a
fresh SQLite database.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def cli(tmp_path):
    """Runner bound to a throwaway database."""
    env = {
        **os.environ,
        "DATABASE_URL": f"sqlite:///{tmp_path / 'cli.db'}",
        "LOG_LEVEL": "WARNING",
        "COLUMNS": "200",
        "PYTHONIOENCODING": "utf-8",
    }

    def run(*args: str, timeout: int = 60) -> tuple[int, str, str]:
        result = subprocess.run(
            [sys.executable, "-m", "prep_engine.cli.main", *args],
            cwd=PROJECT_ROOT,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return result.returncode, result.stdout, result.stderr

    code, _, stderr = run("init-db")
    assert code == 0, f"init-db failed: {stderr}"
    return run


class TestCLIHelp:
    def test_main_help(self, cli):
        code, stdout, stderr = cli("--help")

        assert code == 0, f"Help failed: {stderr}"
        for command in ("answer", "revisions", "log-day", "plan"):
            assert command in stdout


class TestCLICommands:
    def test_answer_and_level(self, cli):
        code, stdout, stderr = cli("answer", "alice", "Physics", "Mechanics", "Friction", "--correct")
        assert code == 0, stderr
        assert "Foundation" in stdout

        code, stdout, stderr = cli("level", "alice", "Physics", "Mechanics", "Friction")
        assert code == 0, stderr
        assert "Foundation" in stdout

    @pytest.mark.parametrize("command", ["answer", "level"])
    def test_blank_topic_fails_cleanly(self, cli, command):
        code, stdout, stderr = cli(command, "alice", "Physics", "Mechanics", " ")
        assert code == 1
        assert "Error" in stdout
        assert "topic must be a non-empty string" in stdout
        assert "Traceback" not in stderr

    def test_level_for_unknown_topic(self, cli):
        code, stdout, _ = cli("level", "bob", "Physics", "Optics", "Lenses")
        assert code == 0
        assert "not practiced yet" in stdout

    def test_log_day_and_energy(self, cli):
        code, stdout, stderr = cli(
            "log-day", "alice", "--hours", "5", "--questions", "40",
            "--accuracy", "72", "--date", "2024-03-15",
        )
        assert code == 0, stderr
        assert "Energy" in stdout

        code, stdout, stderr = cli("energy", "alice")
        assert code == 0, stderr
        assert "Energy" in stdout

    def test_invalid_accuracy_fails_cleanly(self, cli):
        code, stdout, _ = cli(
            "log-day", "alice", "--hours", "5", "--questions", "40", "--accuracy", "140"
        )
        assert code == 1
        assert "Error" in stdout

    def test_plan(self, cli):
        cli("answer", "alice", "Physics", "Mechanics", "Friction", "--wrong")

        code, stdout, stderr = cli("plan", "alice", "--hours", "6", "--days", "45")
        assert code == 0, stderr
        assert "WEEKLY STUDY PLAN" in stdout
        assert "Friction" in stdout

    def test_plan_shows_rank_projection(self, cli):
        cli("answer", "alice", "Physics", "Mechanics", "Friction", "--correct")

        code, stdout, stderr = cli("plan", "alice", "--days", "120", "--exam", "NEET")
        assert code == 0, stderr
        assert "Projected rank" in stdout

    def test_plan_unknown_exam_fails_cleanly(self, cli):
        code, stdout, _ = cli("plan", "alice", "--days", "45", "--exam", "SAT")
        assert code == 1
        assert "Unknown exam" in stdout

    def test_plan_requires_exam_date(self, cli):
        code, stdout, _ = cli("plan", "alice")
        assert code == 1

    def test_revisions_empty(self, cli):
        code, stdout, stderr = cli("revisions", "alice")
        assert code == 0, stderr
        assert "No revisions due" in stdout
