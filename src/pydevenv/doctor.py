"""Environment diagnostics for ``pydevenv doctor``.

Checks that the interpreter, virtual environment, command-line tools and
project layout match the setup the guide walks through.

Design follows Function Core / Imperative Shell:
- Pure functions: check_python_version, check_virtualenv, check_tool,
  check_pyproject, check_repo, has_failures, executable_of
- Imperative shell: run_diagnostics (reads sys, PATH, the filesystem and git)
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import sys
from pathlib import Path

from pydevenv.config import PYPROJECT_FILENAME
from pydevenv.git import GitError, repo_status
from pydevenv.models import Diagnostic, DiagnosticStatus, ProjectConfig, RepoStatus

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("uv", "git")


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def check_python_version(
    version_info: tuple[int, ...], minimum: tuple[int, int]
) -> Diagnostic:
    current = ".".join(str(part) for part in version_info[:3])
    wanted = ".".join(str(part) for part in minimum)
    if tuple(version_info[:2]) >= minimum:
        return Diagnostic(
            name="python",
            status=DiagnosticStatus.OK,
            message=f"Python {current} (>= {wanted})",
        )
    return Diagnostic(
        name="python",
        status=DiagnosticStatus.FAIL,
        message=f"Python {current} is older than the required {wanted}",
    )


def check_virtualenv(prefix: str, base_prefix: str, virtual_env: str | None) -> Diagnostic:
    """Report whether the interpreter runs inside a virtual environment.

    ``sys.prefix`` differs from ``sys.base_prefix`` inside a venv; ``VIRTUAL_ENV``
    covers activated environments whose interpreter is not the one running.
    """
    if prefix != base_prefix:
        return Diagnostic(
            name="virtualenv",
            status=DiagnosticStatus.OK,
            message=f"Running inside {prefix}",
        )
    if virtual_env:
        return Diagnostic(
            name="virtualenv",
            status=DiagnosticStatus.WARN,
            message=f"VIRTUAL_ENV is set to {virtual_env} but this interpreter is global",
        )
    return Diagnostic(
        name="virtualenv",
        status=DiagnosticStatus.WARN,
        message="Not running inside a virtual environment (try `uv venv`)",
    )


def check_tool(name: str, path: str | None, *, required: bool) -> Diagnostic:
    if path:
        return Diagnostic(name=name, status=DiagnosticStatus.OK, message=f"found at {path}")
    status = DiagnosticStatus.FAIL if required else DiagnosticStatus.WARN
    return Diagnostic(name=name, status=status, message=f"{name} not found on PATH")


def check_pyproject(exists: bool) -> Diagnostic:
    if exists:
        return Diagnostic(
            name=PYPROJECT_FILENAME,
            status=DiagnosticStatus.OK,
            message=f"{PYPROJECT_FILENAME} present",
        )
    return Diagnostic(
        name=PYPROJECT_FILENAME,
        status=DiagnosticStatus.FAIL,
        message=f"No {PYPROJECT_FILENAME} in project root (try `uv init`)",
    )


def check_repo(status: RepoStatus | None) -> Diagnostic:
    if status is None:
        return Diagnostic(
            name="git_repo",
            status=DiagnosticStatus.WARN,
            message="Project is not under version control (try `git init`)",
        )
    state = "clean" if status.clean else "uncommitted changes"
    return Diagnostic(
        name="git_repo",
        status=DiagnosticStatus.OK,
        message=f"{status.root} on {status.branch} ({state})",
    )


def has_failures(diagnostics: list[Diagnostic]) -> bool:
    return any(d.status is DiagnosticStatus.FAIL for d in diagnostics)


def executable_of(test_command: str) -> str | None:
    """First word of *test_command*, or None if it is blank or cannot be split."""
    try:
        args = shlex.split(test_command)
    except ValueError:
        return None
    return args[0] if args else None


# ---------------------------------------------------------------------------
# Imperative shell
# ---------------------------------------------------------------------------


def run_diagnostics(project_root: Path, config: ProjectConfig) -> list[Diagnostic]:
    """Inspect the running environment and the project at *project_root*."""
    diagnostics = [
        check_python_version(tuple(sys.version_info), config.min_python_tuple),
        check_virtualenv(sys.prefix, sys.base_prefix, os.environ.get("VIRTUAL_ENV")),
    ]

    for tool in REQUIRED_TOOLS:
        diagnostics.append(check_tool(tool, shutil.which(tool), required=True))

    optional = ["ruff", config.checks.type_checker.value]
    if config.checks.run_tests and (executable := executable_of(config.checks.test_command)):
        optional.append(executable)
    for tool in dict.fromkeys(optional):
        diagnostics.append(check_tool(tool, shutil.which(tool), required=False))

    if shutil.which("git"):
        try:
            diagnostics.append(check_repo(repo_status(project_root)))
        except GitError as e:
            logger.warning("git status failed: %s", e)
            diagnostics.append(
                Diagnostic(name="git_repo", status=DiagnosticStatus.WARN, message=str(e))
            )

    diagnostics.append(check_pyproject((project_root / PYPROJECT_FILENAME).is_file()))

    for d in diagnostics:
        logger.debug("%s: %s (%s)", d.name, d.status.value, d.message)

    return diagnostics
