"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from quizcore.config import get_settings
from quizcore.delivery.quiz_cli import app
from quizcore.delivery.state_store import StateStore

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent

runner = CliRunner()


def run_cli_command(command: str, timeout: int = 30) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        command: The command to run (after 'python -m quizcore.delivery')
        timeout: Maximum time to wait

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    full_command = f"{sys.executable} -m quizcore.delivery {command}"

    result = subprocess.run(
        full_command,
        shell=True,
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=os.environ.copy(),
    )

    return result.returncode, result.stdout, result.stderr


@pytest.fixture
def bank_file(tmp_path, sample_bank_dict):
    path = tmp_path / "banks" / "networking.json"
    path.parent.mkdir()
    path.write_text(json.dumps(sample_bank_dict), encoding="utf-8")
    return path


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should display without errors."""
        code, stdout, stderr = run_cli_command("--help")

        assert code == 0, f"Help failed: {stderr}"
        assert "quizcore" in stdout.lower()
        assert "Commands" in stdout

    @pytest.mark.parametrize("command", ["calibrate", "practice", "test", "stats", "reset"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0, result.output


class TestCLICalibrate:
    """Test calibrate command."""

    def test_calibrate_once(self, bank_file):
        result = runner.invoke(app, ["calibrate", "--tier", "beginner", "--bank", str(bank_file)])

        assert result.exit_code == 0, result.output
        assert "Calibrated 2 questions" in result.output

        again = runner.invoke(app, ["calibrate", "--tier", "advanced", "--bank", str(bank_file)])
        assert again.exit_code == 0
        assert "Already calibrated" in again.output

        store = StateStore(get_settings().resolved_db_path)
        assert store.get_starter_tier() == "beginner"

    def test_invalid_tier(self, bank_file):
        result = runner.invoke(app, ["calibrate", "--tier", "expert", "--bank", str(bank_file)])
        assert result.exit_code != 0


class TestCLIPractice:
    """Test practice command."""

    def test_practice_session(self, bank_file):
        runner.invoke(app, ["calibrate", "--tier", "intermediate", "--bank", str(bank_file)])

        result = runner.invoke(
            app,
            ["practice", "--bank", str(bank_file), "--count", "10"],
            input="A\n\nB\n",
        )

        assert result.exit_code == 0, result.output
        assert "Session Summary" in result.output
        assert len(StateStore(get_settings().resolved_db_path).get_history()) == 2

    def test_practice_prompts_for_tier(self, bank_file):
        result = runner.invoke(
            app,
            ["practice", "--bank", str(bank_file), "--count", "10"],
            input="advanced\nA\n\nA\n",
        )

        assert result.exit_code == 0, result.output
        assert StateStore(get_settings().resolved_db_path).get_starter_tier() == "advanced"

    def test_invalid_count(self, bank_file):
        runner.invoke(app, ["calibrate", "--tier", "beginner", "--bank", str(bank_file)])
        result = runner.invoke(app, ["practice", "--bank", str(bank_file), "--count", "7"])
        assert result.exit_code == 1


class TestCLITest:
    """Test full-test command."""

    def test_submit_immediately(self, bank_file):
        runner.invoke(app, ["calibrate", "--tier", "beginner", "--bank", str(bank_file)])

        result = runner.invoke(
            app,
            ["test", "--bank", str(bank_file), "--count", "10", "--minutes", "1"],
            input="y\nB\ns\ny\n",
        )

        assert result.exit_code == 0, result.output
        assert "Review" in result.output
        assert len(StateStore(get_settings().resolved_db_path).get_history()) == 1

    def test_decline_start(self, bank_file):
        runner.invoke(app, ["calibrate", "--tier", "beginner", "--bank", str(bank_file)])

        result = runner.invoke(
            app,
            ["test", "--bank", str(bank_file), "--count", "10"],
            input="n\n",
        )

        assert result.exit_code == 0
        assert StateStore(get_settings().resolved_db_path).get_history() == []


class TestCLIStats:
    """Test stats command."""

    def test_stats_runs(self, bank_file):
        result = runner.invoke(app, ["stats", "--bank", str(bank_file)])

        assert result.exit_code == 0, result.output
        assert "Questions" in result.output
        assert "By Level" in result.output

    def test_bank_dir_from_environment(self, bank_file, monkeypatch):
        monkeypatch.setenv("QUIZCORE_BANK_DIR", str(bank_file.parent))
        get_settings.cache_clear()

        result = runner.invoke(app, ["stats"])
        assert result.exit_code == 0, result.output
        assert "Networking" in result.output or "Questions" in result.output

    def test_unknown_cluster(self, bank_file):
        result = runner.invoke(app, ["stats", "--bank", str(bank_file.parent), "--cluster", "Biology"])
        assert result.exit_code == 1

    def test_missing_bank_dir(self, tmp_path):
        result = runner.invoke(app, ["stats", "--bank", str(tmp_path / "empty")])
        assert result.exit_code == 1


class TestCLIReset:
    """Test reset command."""

    def test_reset(self, bank_file):
        runner.invoke(app, ["calibrate", "--tier", "beginner", "--bank", str(bank_file)])

        result = runner.invoke(app, ["reset", "--yes"])

        assert result.exit_code == 0
        store = StateStore(get_settings().resolved_db_path)
        assert store.get_starter_tier() is None
        assert store.get_all_mastery() == {}
