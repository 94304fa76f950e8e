"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import subprocess
import sys
import zipfile
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


def run_cli_command(args: list[str], timeout: int = 30, stdin: str | None = None) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        args: Arguments after 'python -m escape_room'
        timeout: Maximum time to wait
        stdin: Text fed to the process

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    result = subprocess.run(
        [sys.executable, "-m", "escape_room", *args],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        input=stdin,
        timeout=timeout,
    )

    return result.returncode, result.stdout, result.stderr


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "sample.json"
    code, _, stderr = run_cli_command(["sample", "--output", str(path)])
    assert code == 0, f"sample failed: {stderr}"
    return path


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        """Main help should list every command."""
        code, stdout, stderr = run_cli_command(["--help"])

        assert code == 0, f"Help failed: {stderr}"
        for command in ("play", "preview", "bundle", "inspect", "sample"):
            assert command in stdout

    def test_bundle_help(self):
        code, stdout, stderr = run_cli_command(["bundle", "--help"])

        assert code == 0, f"Help failed: {stderr}"
        assert "--preview" in stdout


class TestCLICommands:
    """Commands against the shipped demo payload."""

    def test_sample_to_stdout(self):
        code, stdout, stderr = run_cli_command(["sample"])

        assert code == 0, f"sample failed: {stderr}"
        assert json.loads(stdout)["title"] == "Escape the Water Cycle"

    def test_inspect(self, sample_file):
        code, stdout, stderr = run_cli_command(["inspect", str(sample_file)])

        assert code == 0, f"inspect failed: {stderr}"
        assert "Escape the Water Cycle" in stdout
        assert "No content problems found" in stdout

    def test_bundle(self, sample_file, tmp_path):
        target = tmp_path / "room.pyz"
        code, stdout, stderr = run_cli_command(
            ["bundle", str(sample_file), "--output", str(target), "--preview"]
        )

        assert code == 0, f"bundle failed: {stderr}"
        assert target.exists()
        with zipfile.ZipFile(target) as archive:
            assert "__main__.py" in archive.namelist()

    def test_preview_quits_cleanly(self, sample_file):
        code, stdout, stderr = run_cli_command(["preview", str(sample_file)], stdin="n\nq\n")

        assert code == 0, f"preview failed: {stderr}"
        assert "Goodbye!" in stdout

    def test_missing_payload_exits_with_error(self, tmp_path):
        code, stdout, _ = run_cli_command(["play", str(tmp_path / "missing.json")])

        assert code == 1
        assert "Cannot read payload file" in stdout


class TestArtifact:
    """The bundled artifact runs on its own."""

    def test_artifact_plays(self, sample_file, tmp_path):
        target = tmp_path / "room.pyz"
        code, _, stderr = run_cli_command(["bundle", str(sample_file), "--output", str(target)])
        assert code == 0, f"bundle failed: {stderr}"

        result = subprocess.run(
            [sys.executable, str(target)],
            capture_output=True,
            text=True,
            input="n\nq\n",
            timeout=30,
        )

        assert result.returncode == 0, result.stderr
        assert "Challenge 1: The First Test" in result.stdout
