"""OpenTelemetry spans for ``pydevenv check``.

A check run produces one ``pydevenv.checks`` span with a child span per
check. Export is opt-in through ``PYDEVENV_OTEL_EXPORTER``; without it the
spans are recorded by a provider with no processors and dropped.

The provider is held by this module rather than registered as the OTel
global, so a CLI invocation can install and tear down its own without
touching other instrumentation in the process.

Design follows Function Core / Imperative Shell:
- Pure functions: resolve_exporter_type, check_attributes, run_attributes
- Imperative shell: create_tracer_provider, init_tracing, get_tracer,
  shutdown_tracing, tracing_session
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from functools import cache
from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING

from pydevenv.models import CheckResult

if TYPE_CHECKING:
    from pathlib import Path

    from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
    from opentelemetry.trace import Tracer

SERVICE_NAME = "pydevenv"

PYDEVENV_OTEL_EXPORTER_ENV = "PYDEVENV_OTEL_EXPORTER"
PYDEVENV_OTEL_ENDPOINT_ENV = "PYDEVENV_OTEL_ENDPOINT"

_provider: TracerProvider | None = None


class ExporterType(Enum):
    """Where check spans are sent."""

    CONSOLE = "console"
    OTLP_GRPC = "otlp_grpc"
    OTLP_HTTP = "otlp_http"
    NONE = "none"


@cache
def package_version() -> str:
    """Installed pydevenv version, or ``"unknown"`` when running from a bare checkout."""
    try:
        return version(SERVICE_NAME)
    except PackageNotFoundError:
        return "unknown"


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def resolve_exporter_type(exporter: ExporterType | None = None) -> ExporterType:
    """Pick the exporter: explicit argument, then ``PYDEVENV_OTEL_EXPORTER``, then none.

    Raises:
        ValueError: If the environment variable names no known exporter.
    """
    if exporter is not None:
        return exporter

    env_value = os.environ.get(PYDEVENV_OTEL_EXPORTER_ENV)
    if env_value is None:
        return ExporterType.NONE
    try:
        return ExporterType(env_value)
    except ValueError:
        valid = ", ".join(e.value for e in ExporterType)
        msg = f"Invalid {PYDEVENV_OTEL_EXPORTER_ENV} value {env_value!r}. Valid options: {valid}"
        raise ValueError(msg) from None


def check_attributes(result: CheckResult) -> dict[str, str | bool]:
    """Attributes for the child span of a single check."""
    return {
        "pydevenv.check.name": result.check_name,
        "pydevenv.check.passed": result.passed,
        "pydevenv.check.summary": result.summary,
    }


def run_attributes(
    results: list[CheckResult], project_root: Path | str
) -> dict[str, str | int | bool]:
    """Attributes for the ``pydevenv.checks`` span covering a whole run."""
    passed = [r for r in results if r.passed]
    return {
        "pydevenv.project": str(project_root),
        "pydevenv.checks.count": len(results),
        "pydevenv.checks.pass_count": len(passed),
        "pydevenv.checks.passed": len(passed) == len(results),
        "pydevenv.checks.failed": ",".join(r.check_name for r in results if not r.passed),
    }


# ---------------------------------------------------------------------------
# Imperative shell
# ---------------------------------------------------------------------------


def _span_processor(exporter_type: ExporterType, endpoint: str | None) -> SpanProcessor | None:
    if exporter_type is ExporterType.NONE:
        return None

    from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor

    if exporter_type is ExporterType.CONSOLE:
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter

        return SimpleSpanProcessor(ConsoleSpanExporter())

    kwargs = {"endpoint": endpoint} if endpoint else {}
    if exporter_type is ExporterType.OTLP_GRPC:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter as GrpcSpanExporter,
        )

        return BatchSpanProcessor(GrpcSpanExporter(**kwargs))

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter as HttpSpanExporter,
    )

    return BatchSpanProcessor(HttpSpanExporter(**kwargs))


def create_tracer_provider(
    exporter_type: ExporterType, endpoint: str | None = None
) -> TracerProvider:
    """Build a provider tagged with the pydevenv service name and version."""
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider

    resource = Resource.create(
        {"service.name": SERVICE_NAME, "service.version": package_version()}
    )
    provider = TracerProvider(resource=resource)
    processor = _span_processor(exporter_type, endpoint)
    if processor is not None:
        provider.add_span_processor(processor)
    return provider


def init_tracing(exporter: ExporterType | None = None) -> TracerProvider:
    """Install a fresh provider for this module, replacing any previous one.

    Raises:
        ValueError: If ``PYDEVENV_OTEL_EXPORTER`` is invalid.
    """
    global _provider

    exporter_type = resolve_exporter_type(exporter)
    shutdown_tracing()
    _provider = create_tracer_provider(
        exporter_type, os.environ.get(PYDEVENV_OTEL_ENDPOINT_ENV)
    )
    return _provider


def get_tracer() -> Tracer:
    """Tracer from the installed provider, or from the OTel global one if none is installed."""
    if _provider is not None:
        return _provider.get_tracer(SERVICE_NAME, package_version())

    from opentelemetry import trace

    return trace.get_tracer(SERVICE_NAME, package_version())


def shutdown_tracing() -> None:
    """Flush and drop the installed provider. No-op when none is installed."""
    global _provider

    if _provider is not None:
        _provider.shutdown()
        _provider = None


@contextmanager
def tracing_session(exporter: ExporterType | None = None) -> Iterator[TracerProvider]:
    """Install a provider for the duration of the block, then flush it."""
    provider = init_tracing(exporter)
    try:
        yield provider
    finally:
        shutdown_tracing()
