"""Quality checks for a project.

Runs the deterministic gates the guide sets up: ruff lint, ruff format,
a static type checker (mypy or ty) and the test suite.

Design follows Function Core / Imperative Shell:
- Pure functions: parse_check_result, ruff_args, type_check_command, all_passed
- Imperative shell (fix): run_ruff_lint_fix, run_ruff_format_fix
- Imperative shell (check): run_ruff_lint, run_ruff_format_check,
  run_type_check, run_tests
- Entry point: run_checks (traced, one child span per check)
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from functools import partial
from pathlib import Path

from pydevenv.models import CheckConfig, CheckResult, TypeChecker
from pydevenv.subprocess_result import DEFAULT_TIMEOUT_SECONDS, SubprocessResult, run_command
from pydevenv.tracing import check_attributes, get_tracer, run_attributes

logger = logging.getLogger(__name__)

SUMMARY_LIMIT = 200

_Check = Callable[[], CheckResult]


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def parse_check_result(check_name: str, result: SubprocessResult) -> CheckResult:
    """Convert a subprocess result to a CheckResult."""
    if result.ok:
        return CheckResult(
            check_name=check_name,
            passed=True,
            summary=f"{check_name} passed",
        )

    output = result.stdout or result.stderr
    # Truncate for the summary, keep full output in details.
    summary = output[:SUMMARY_LIMIT] + "..." if len(output) > SUMMARY_LIMIT else output

    return CheckResult(
        check_name=check_name,
        passed=False,
        summary=f"{check_name} failed: {summary}",
        details=output if len(output) > SUMMARY_LIMIT else None,
    )


def ruff_args(subcommand: str, ruff_config: str | None, *extra: str) -> list[str]:
    """Build a ruff command line, inserting ``--config`` when one is set."""
    args = ["ruff", subcommand]
    if ruff_config:
        args += ["--config", ruff_config]
    args += list(extra)
    return args


def type_check_command(checker: TypeChecker | str, paths: list[str]) -> list[str]:
    """Build the command line for a type checker.

    Raises:
        ValueError: If *checker* is not a supported type checker.
    """
    try:
        checker = TypeChecker(checker)
    except ValueError:
        valid = ", ".join(c.value for c in TypeChecker)
        msg = f"Unsupported type checker {checker!r}. Valid options: {valid}"
        raise ValueError(msg) from None

    if checker is TypeChecker.TY:
        return ["ty", "check", *paths]
    return ["mypy", *paths]


def all_passed(results: list[CheckResult]) -> bool:
    return all(r.passed for r in results)


# ---------------------------------------------------------------------------
# Imperative shell
# ---------------------------------------------------------------------------


def run_ruff_lint_fix(
    project_root: Path, paths: list[str], ruff_config: str | None = None
) -> None:
    """Run ruff lint auto-fix on the given paths. Ignores exit code."""
    run_command(ruff_args("check", ruff_config, "--fix", *paths), cwd=project_root)


def run_ruff_format_fix(
    project_root: Path, paths: list[str], ruff_config: str | None = None
) -> None:
    """Run ruff format on the given paths. Ignores exit code."""
    run_command(ruff_args("format", ruff_config, *paths), cwd=project_root)


def run_ruff_lint(
    project_root: Path,
    paths: list[str],
    ruff_config: str | None = None,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> CheckResult:
    """Run ruff lint check on the given paths."""
    result = run_command(
        ruff_args("check", ruff_config, "--no-fix", *paths),
        cwd=project_root,
        timeout=timeout,
    )
    return parse_check_result("ruff_lint", result)


def run_ruff_format_check(
    project_root: Path,
    paths: list[str],
    ruff_config: str | None = None,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> CheckResult:
    """Run ruff format check on the given paths."""
    result = run_command(
        ruff_args("format", ruff_config, "--check", *paths),
        cwd=project_root,
        timeout=timeout,
    )
    return parse_check_result("ruff_format", result)


def run_type_check(
    project_root: Path,
    paths: list[str],
    checker: TypeChecker | str = TypeChecker.MYPY,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> CheckResult:
    """Run the configured static type checker on the given paths."""
    result = run_command(type_check_command(checker, paths), cwd=project_root, timeout=timeout)
    return parse_check_result("type_check", result)


def run_tests(
    project_root: Path, test_command: str, timeout: int = DEFAULT_TIMEOUT_SECONDS
) -> CheckResult:
    """Run the test command. Shell syntax is split, not interpreted."""
    try:
        args = shlex.split(test_command)
    except ValueError as e:
        return CheckResult(
            check_name="tests",
            passed=False,
            summary=f"tests failed: invalid test_command {test_command!r}: {e}",
        )
    if not args:
        return CheckResult(
            check_name="tests", passed=False, summary="tests failed: empty test_command"
        )

    result = run_command(args, cwd=project_root, timeout=timeout)
    return parse_check_result("tests", result)


def _enabled_checks(project_root: Path, config: CheckConfig) -> list[tuple[str, _Check]]:
    """Pair each enabled check name with the call that runs it, in run order."""
    root, paths, ruff_cfg, timeout = project_root, config.paths, config.ruff_config, config.timeout
    checks: list[tuple[str, _Check]] = []

    if config.run_ruff_lint:
        checks.append(("ruff_lint", partial(run_ruff_lint, root, paths, ruff_cfg, timeout)))
    if config.run_ruff_format:
        checks.append(
            ("ruff_format", partial(run_ruff_format_check, root, paths, ruff_cfg, timeout))
        )
    if config.run_type_check:
        checks.append(
            ("type_check", partial(run_type_check, root, paths, config.type_checker, timeout))
        )
    if config.run_tests and config.test_command:
        checks.append(("tests", partial(run_tests, root, config.test_command, timeout)))
    return checks


def run_checks(project_root: Path, config: CheckConfig) -> list[CheckResult]:
    """Run every enabled check in order: lint, format, type check, tests.

    The whole run is one ``pydevenv.checks`` span with a child span per check.
    """
    tracer = get_tracer()

    with tracer.start_as_current_span("pydevenv.checks") as run_span:
        # Fix phase: lint fix first (may change imports), then format fix.
        if config.auto_fix:
            logger.info("Applying ruff fixes to %s", " ".join(config.paths))
            with tracer.start_as_current_span("pydevenv.checks.fix"):
                run_ruff_lint_fix(project_root, config.paths, config.ruff_config)
                run_ruff_format_fix(project_root, config.paths, config.ruff_config)

        results: list[CheckResult] = []
        for name, check in _enabled_checks(project_root, config):
            with tracer.start_as_current_span(f"pydevenv.checks.{name}") as span:
                result = check()
                span.set_attributes(check_attributes(result))
            log = logger.debug if result.passed else logger.warning
            log("%s", result.summary)
            results.append(result)

        run_span.set_attributes(run_attributes(results, project_root))

    return results
