"""CLI entry point for pydevenv.

Provides ``pydevenv calc``, ``pydevenv title``, ``pydevenv check`` and
``pydevenv doctor`` subcommands.

Follows Function Core / Imperative Shell:
- Pure functions: format_number, format_check_results, format_diagnostics
- Click commands: main, calc, title, check, doctor
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from pydevenv.calculator import OPERATIONS
from pydevenv.checks import all_passed, run_checks
from pydevenv.config import ConfigError, load_project_config
from pydevenv.doctor import has_failures, run_diagnostics
from pydevenv.models import CheckResult, Diagnostic, DiagnosticStatus, TypeChecker
from pydevenv.scraper import DEFAULT_TIMEOUT_SECONDS, ScraperError, WebScraper
from pydevenv.tracing import resolve_exporter_type, tracing_session

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 3

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_STATUS_TAGS = {
    DiagnosticStatus.OK: "OK",
    DiagnosticStatus.WARN: "WARN",
    DiagnosticStatus.FAIL: "FAIL",
}


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def format_number(value: float) -> str:
    """Render integral floats without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_check_results(results: list[CheckResult]) -> str:
    """Format a list of check results as human-readable lines."""
    lines: list[str] = []
    for r in results:
        tag = "PASS" if r.passed else "FAIL"
        lines.append(f"  [{tag}] {r.check_name}: {r.summary}")
    return "\n".join(lines)


def format_diagnostics(diagnostics: list[Diagnostic]) -> str:
    lines: list[str] = []
    for d in diagnostics:
        lines.append(f"  [{_STATUS_TAGS[d.status]}] {d.name}: {d.message}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Click commands
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="pydevenv")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """pydevenv: sample project and toolchain checks for the Python setup guide."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


@main.command()
@click.argument("operation", type=click.Choice(sorted(OPERATIONS)))
@click.argument("a", type=float)
@click.argument("b", type=float)
def calc(operation: str, a: float, b: float) -> None:
    """Apply OPERATION to A and B and print the result."""
    try:
        result = OPERATIONS[operation](a, b)
    except (ValueError, ArithmeticError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILURE)
    click.echo(format_number(result))


@main.command()
@click.argument("url")
@click.option(
    "--timeout",
    type=float,
    default=DEFAULT_TIMEOUT_SECONDS,
    show_default=True,
    help="Request timeout in seconds.",
)
def title(url: str, timeout: float) -> None:
    """Fetch URL and print its page title."""
    try:
        page_title = WebScraper(timeout=timeout).get_title(url)
    except (ScraperError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILURE)
    click.echo(page_title if page_title is not None else "(no title)")


@main.command()
@click.option(
    "--project",
    "project_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project root to check.",
)
@click.option("--fix", is_flag=True, help="Apply ruff lint and format fixes first.")
@click.option("--no-lint", is_flag=True, help="Skip ruff lint check.")
@click.option("--no-format", is_flag=True, help="Skip ruff format check.")
@click.option("--no-types", is_flag=True, help="Skip the type checker.")
@click.option("--no-tests", is_flag=True, help="Skip the test suite.")
@click.option("--type-checker", type=click.Choice(["mypy", "ty"]), help="Override type checker.")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON.")
def check(
    project_dir: Path,
    fix: bool,
    no_lint: bool,
    no_format: bool,
    no_types: bool,
    no_tests: bool,
    type_checker: str | None,
    output_json: bool,
) -> None:
    """Run lint, format, type and test checks against a project."""
    try:
        config = load_project_config(project_dir)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    updates: dict[str, object] = {}
    if fix:
        updates["auto_fix"] = True
    if no_lint:
        updates["run_ruff_lint"] = False
    if no_format:
        updates["run_ruff_format"] = False
    if no_types:
        updates["run_type_check"] = False
    if no_tests:
        updates["run_tests"] = False
    if type_checker:
        updates["type_checker"] = TypeChecker(type_checker)
    check_config = config.checks.model_copy(update=updates)

    try:
        exporter = resolve_exporter_type()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    with tracing_session(exporter):
        results = run_checks(project_dir.resolve(), check_config)

    if output_json:
        click.echo(json.dumps([r.model_dump() for r in results], indent=2))
    elif results:
        click.echo("Checks:")
        click.echo(format_check_results(results))
    else:
        click.echo("No checks enabled.")

    sys.exit(EXIT_SUCCESS if all_passed(results) else EXIT_FAILURE)


@main.command()
@click.option(
    "--project",
    "project_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project root to inspect.",
)
@click.option("--json", "output_json", is_flag=True, help="Output diagnostics as JSON.")
def doctor(project_dir: Path, output_json: bool) -> None:
    """Diagnose the development environment for a project."""
    try:
        config = load_project_config(project_dir)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    diagnostics = run_diagnostics(project_dir.resolve(), config)

    if output_json:
        click.echo(json.dumps([d.model_dump(mode="json") for d in diagnostics], indent=2))
    else:
        click.echo("Environment:")
        click.echo(format_diagnostics(diagnostics))

    sys.exit(EXIT_FAILURE if has_failures(diagnostics) else EXIT_SUCCESS)
