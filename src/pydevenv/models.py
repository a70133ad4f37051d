"""Core data models for pydevenv."""

from __future__ import annotations

import shlex
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class TypeChecker(StrEnum):
    """Supported static type checkers."""

    MYPY = "mypy"
    TY = "ty"


class CheckConfig(BaseModel):
    """Configuration for the quality checks run by ``pydevenv check``."""

    auto_fix: bool = False
    run_ruff_lint: bool = True
    run_ruff_format: bool = True
    run_type_check: bool = True
    type_checker: TypeChecker = TypeChecker.MYPY
    run_tests: bool = True
    test_command: str = "pytest"
    paths: list[str] = Field(
        default_factory=lambda: ["src", "tests"],
        description="Files or directories passed to ruff and the type checker.",
    )
    ruff_config: str | None = Field(
        default=None,
        description="Path to a ruff config file, relative to the project root.",
    )
    timeout: int = Field(default=120, description="Per-check subprocess timeout in seconds.")

    @field_validator("test_command")
    @classmethod
    def _test_command_splits(cls, value: str) -> str:
        try:
            args = shlex.split(value)
        except ValueError as e:
            msg = f"test_command {value!r} is not a valid command line: {e}"
            raise ValueError(msg) from e
        if not args:
            msg = "test_command must not be blank"
            raise ValueError(msg)
        return value


class CheckResult(BaseModel):
    """Outcome of a single quality check."""

    check_name: str
    passed: bool
    summary: str
    details: str | None = None


class ProjectConfig(BaseModel):
    """Settings read from ``[tool.pydevenv]`` in ``pyproject.toml``."""

    min_python: str = Field(default="3.11", pattern=r"^\d+\.\d+$")
    checks: CheckConfig = Field(default_factory=CheckConfig)

    @property
    def min_python_tuple(self) -> tuple[int, int]:
        major, minor = self.min_python.split(".")
        return int(major), int(minor)


class DiagnosticStatus(StrEnum):
    """Severity of a doctor finding."""

    OK = "ok"
    WARN = "warn"
    FAIL = "fail"


class Diagnostic(BaseModel):
    """A single environment finding reported by ``pydevenv doctor``."""

    name: str
    status: DiagnosticStatus
    message: str


class RepoStatus(BaseModel):
    """Summary of the git repository a project lives in."""

    root: str
    branch: str
    clean: bool
