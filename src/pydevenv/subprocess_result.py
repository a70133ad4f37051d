"""Shared subprocess result dataclass.

Used by both the quality checks (ruff, type checker, tests) and git queries.
"""

from __future__ import annotations

import dataclasses
import subprocess
from pathlib import Path

DEFAULT_TIMEOUT_SECONDS = 120

# Return code reported when the executable itself could not be started.
COMMAND_NOT_FOUND = 127


@dataclasses.dataclass(frozen=True)
class SubprocessResult:
    """Result of a subprocess invocation. Internal transport only."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_command(
    args: list[str],
    cwd: Path,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> SubprocessResult:
    """Execute a command and return the result.

    Does not raise on non-zero exit, on a missing executable, or on timeout;
    those are reported through ``returncode`` and ``stderr``.
    """
    if not Path(cwd).is_dir():
        return SubprocessResult(
            returncode=-1,
            stdout="",
            stderr=f"working directory {cwd} does not exist",
        )
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        return SubprocessResult(
            returncode=COMMAND_NOT_FOUND,
            stdout="",
            stderr=f"{args[0]} not found",
        )
    except subprocess.TimeoutExpired:
        return SubprocessResult(
            returncode=-1,
            stdout="",
            stderr=f"{args[0]} timed out after {timeout}s",
        )
    return SubprocessResult(
        returncode=result.returncode,
        stdout=result.stdout.strip(),
        stderr=result.stderr.strip(),
    )
