"""Git repository queries for pydevenv.

Read-only helpers used by ``pydevenv doctor`` to confirm a project is under
version control and to report its branch and working-tree state.

Design follows Function Core / Imperative Shell:
- Pure function: parse_porcelain_status
- Subprocess wrapper: _run_git (thin, never raises on non-zero; uses SubprocessResult)
- Imperative shell: discover_repo_root, current_branch, is_clean, repo_status
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydevenv.models import RepoStatus
from pydevenv.subprocess_result import SubprocessResult, run_command

logger = logging.getLogger(__name__)

SUBPROCESS_TIMEOUT_SECONDS = 30

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class GitError(Exception):
    """Base exception for all git operations."""


class RepoDiscoveryError(GitError):
    """Failed to discover the git repository root."""


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def parse_porcelain_status(output: str) -> list[str]:
    """Return the paths listed in ``git status --porcelain`` output.

    Tolerates a stripped leading status column on the first line.
    """
    paths: list[str] = []
    for line in output.splitlines():
        parts = line.split(maxsplit=1)
        if len(parts) == 2:
            paths.append(parts[1])
    return paths


# ---------------------------------------------------------------------------
# Subprocess wrapper
# ---------------------------------------------------------------------------


def _run_git(*args: str, cwd: Path) -> SubprocessResult:
    """Execute ``git <args>`` and return the result.

    Does **not** raise on non-zero exit codes; callers decide what constitutes
    an error.
    """
    return run_command(["git", *args], cwd=cwd, timeout=SUBPROCESS_TIMEOUT_SECONDS)


# ---------------------------------------------------------------------------
# Imperative shell
# ---------------------------------------------------------------------------


def discover_repo_root(path: Path | None = None) -> Path:
    """Discover the git repository root.

    Args:
        path: Directory to start searching from. Defaults to the current
            working directory.

    Returns:
        Absolute path to the repository root.

    Raises:
        RepoDiscoveryError: If the path is not inside a git repository.
    """
    cwd = path or Path.cwd()
    result = _run_git("rev-parse", "--show-toplevel", cwd=cwd)
    if not result.ok:
        msg = f"Not a git repository (or any parent up to mount point): {cwd}"
        raise RepoDiscoveryError(msg)
    return Path(result.stdout)


def current_branch(repo_root: Path) -> str:
    """Return the checked-out branch name.

    Works on a fresh repository with no commits yet.

    Raises:
        GitError: If HEAD is detached or git fails.
    """
    result = _run_git("symbolic-ref", "--short", "HEAD", cwd=repo_root)
    if not result.ok:
        msg = f"Could not determine current branch in {repo_root}: {result.stderr}"
        raise GitError(msg)
    return result.stdout


def is_clean(repo_root: Path) -> bool:
    """Check for staged, unstaged and untracked changes.

    Raises:
        GitError: If ``git status`` fails.
    """
    result = _run_git("status", "--porcelain", cwd=repo_root)
    if not result.ok:
        msg = f"git status failed in {repo_root}: {result.stderr}"
        raise GitError(msg)
    return not parse_porcelain_status(result.stdout)


def repo_status(path: Path | None = None) -> RepoStatus | None:
    """Summarise the repository containing *path*.

    Returns None when *path* is not inside a git repository.
    """
    try:
        root = discover_repo_root(path)
    except RepoDiscoveryError:
        logger.debug("No git repository at %s", path)
        return None

    try:
        branch = current_branch(root)
    except GitError:
        branch = "(detached)"

    return RepoStatus(root=str(root), branch=branch, clean=is_clean(root))
