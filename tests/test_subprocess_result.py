"""Tests for pydevenv.subprocess_result."""

from __future__ import annotations

import subprocess
import sys
from typing import TYPE_CHECKING
from unittest.mock import patch

from pydevenv.subprocess_result import COMMAND_NOT_FOUND, SubprocessResult, run_command

if TYPE_CHECKING:
    from pathlib import Path


class TestSubprocessResult:
    def test_ok(self) -> None:
        assert SubprocessResult(returncode=0, stdout="", stderr="").ok is True

    def test_not_ok(self) -> None:
        assert SubprocessResult(returncode=2, stdout="", stderr="").ok is False


class TestRunCommand:
    def test_captures_and_strips_output(self, tmp_path: Path) -> None:
        result = run_command([sys.executable, "-c", "print('hello')"], cwd=tmp_path)
        assert result.ok
        assert result.stdout == "hello"

    def test_non_zero_exit_does_not_raise(self, tmp_path: Path) -> None:
        result = run_command([sys.executable, "-c", "import sys; sys.exit(4)"], cwd=tmp_path)
        assert result.returncode == 4
        assert not result.ok

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run_command(["definitely-not-a-real-tool-xyz"], cwd=tmp_path)
        assert result.returncode == COMMAND_NOT_FOUND
        assert "definitely-not-a-real-tool-xyz not found" in result.stderr

    def test_timeout(self, tmp_path: Path) -> None:
        with patch(
            "pydevenv.subprocess_result.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="slow", timeout=1),
        ):
            result = run_command(["slow"], cwd=tmp_path, timeout=1)
        assert not result.ok
        assert "timed out after 1s" in result.stderr

    def test_missing_working_directory(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing"
        with patch("pydevenv.subprocess_result.subprocess.run") as mock_run:
            result = run_command(["ruff", "check"], cwd=missing)
        mock_run.assert_not_called()
        assert not result.ok
        assert result.stderr == f"working directory {missing} does not exist"
        assert "not found" not in result.stderr
