"""Project configuration loading.

Reads the ``[tool.pydevenv]`` table from ``pyproject.toml`` and applies
environment variable overrides.

Design follows Function Core / Imperative Shell:
- Pure functions: parse_project_config, apply_env_overrides
- I/O shell: load_project_config (reads file)

Example:

.. code-block:: toml

    [tool.pydevenv]
    min_python = "3.12"

    [tool.pydevenv.checks]
    type_checker = "ty"
    paths = ["src"]
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path

from pydantic import ValidationError

from pydevenv.models import CheckConfig, ProjectConfig

logger = logging.getLogger(__name__)

PYPROJECT_FILENAME = "pyproject.toml"
TOOL_TABLE = "pydevenv"

ENV_TYPE_CHECKER = "PYDEVENV_TYPE_CHECKER"
ENV_TEST_COMMAND = "PYDEVENV_TEST_COMMAND"
ENV_MIN_PYTHON = "PYDEVENV_MIN_PYTHON"


class ConfigError(Exception):
    """Invalid or unreadable project configuration."""


def _known_keys(raw: dict, allowed: set[str], table: str) -> dict:
    unknown = sorted(set(raw) - allowed)
    for key in unknown:
        logger.warning("Ignoring unknown key %r in [%s]", key, table)
    return {k: v for k, v in raw.items() if k in allowed}


def parse_project_config(raw: dict) -> ProjectConfig:
    """Build a ProjectConfig from a parsed ``pyproject.toml`` document.

    Only ``[tool.pydevenv]`` is consulted. Unknown keys are dropped with a
    warning.

    Raises:
        ConfigError: If a value fails validation.
    """
    table = raw.get("tool", {}).get(TOOL_TABLE, {})
    if not isinstance(table, dict):
        msg = f"[tool.{TOOL_TABLE}] must be a table"
        raise ConfigError(msg)

    top = _known_keys(table, set(ProjectConfig.model_fields), f"tool.{TOOL_TABLE}")
    checks_raw = top.pop("checks", {})
    if not isinstance(checks_raw, dict):
        msg = f"[tool.{TOOL_TABLE}.checks] must be a table"
        raise ConfigError(msg)
    checks = _known_keys(checks_raw, set(CheckConfig.model_fields), f"tool.{TOOL_TABLE}.checks")

    try:
        return ProjectConfig(**top, checks=CheckConfig(**checks))
    except ValidationError as e:
        msg = f"Invalid [tool.{TOOL_TABLE}] configuration: {e}"
        raise ConfigError(msg) from e


def apply_env_overrides(
    config: ProjectConfig, environ: Mapping[str, str] | None = None
) -> ProjectConfig:
    """Return a copy of *config* with ``PYDEVENV_*`` environment overrides applied.

    Raises:
        ConfigError: If an override value fails validation.
    """
    env = os.environ if environ is None else environ

    check_updates: dict[str, str] = {}
    if value := env.get(ENV_TYPE_CHECKER):
        check_updates["type_checker"] = value
    if value := env.get(ENV_TEST_COMMAND):
        check_updates["test_command"] = value

    top_updates: dict[str, str] = {}
    if value := env.get(ENV_MIN_PYTHON):
        top_updates["min_python"] = value

    if not check_updates and not top_updates:
        return config

    data = config.model_dump()
    data.update(top_updates)
    data["checks"].update(check_updates)
    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid PYDEVENV_* environment override: {e}"
        raise ConfigError(msg) from e


def load_project_config(project_root: str | Path = ".") -> ProjectConfig:
    """Load configuration for the project rooted at *project_root*.

    Returns defaults (plus environment overrides) when there is no
    ``pyproject.toml``.

    Raises:
        ConfigError: If the file cannot be read or parsed, or holds invalid values.
    """
    path = Path(project_root) / PYPROJECT_FILENAME

    if not path.is_file():
        logger.debug("No %s found at %s, using defaults", PYPROJECT_FILENAME, path)
        return apply_env_overrides(ProjectConfig())

    try:
        with path.open("rb") as f:
            raw = tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError, OSError) as e:
        msg = f"Failed to read {path}: {e}"
        raise ConfigError(msg) from e

    logger.debug("Loaded project config from %s", path)
    return apply_env_overrides(parse_project_config(raw))
