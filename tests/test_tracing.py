"""Tests for pydevenv.tracing: exporter selection, span attributes, provider lifecycle."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from pathlib import Path
from unittest.mock import patch

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from pydevenv import tracing
from pydevenv.models import CheckResult
from pydevenv.tracing import (
    PYDEVENV_OTEL_EXPORTER_ENV,
    SERVICE_NAME,
    ExporterType,
    check_attributes,
    create_tracer_provider,
    get_tracer,
    init_tracing,
    package_version,
    resolve_exporter_type,
    run_attributes,
    shutdown_tracing,
    tracing_session,
)


def _result(name: str, passed: bool) -> CheckResult:
    state = "passed" if passed else "failed"
    return CheckResult(check_name=name, passed=passed, summary=f"{name} {state}")


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


class TestResolveExporterType:
    def test_explicit_param_wins_over_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(PYDEVENV_OTEL_EXPORTER_ENV, "none")
        assert resolve_exporter_type(ExporterType.CONSOLE) is ExporterType.CONSOLE

    def test_env_var_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(PYDEVENV_OTEL_EXPORTER_ENV, "otlp_http")
        assert resolve_exporter_type() is ExporterType.OTLP_HTTP

    def test_default_is_none(self) -> None:
        assert resolve_exporter_type() is ExporterType.NONE

    def test_invalid_env_var_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(PYDEVENV_OTEL_EXPORTER_ENV, "banana")
        with pytest.raises(ValueError, match="Invalid PYDEVENV_OTEL_EXPORTER value 'banana'"):
            resolve_exporter_type()


class TestCheckAttributes:
    def test_failed_check(self) -> None:
        attrs = check_attributes(_result("ruff_lint", passed=False))
        assert attrs == {
            "pydevenv.check.name": "ruff_lint",
            "pydevenv.check.passed": False,
            "pydevenv.check.summary": "ruff_lint failed",
        }


class TestRunAttributes:
    def test_mixed_results(self) -> None:
        results = [
            _result("ruff_lint", passed=True),
            _result("ruff_format", passed=False),
            _result("tests", passed=False),
        ]
        attrs = run_attributes(results, Path("/work/app"))
        assert attrs["pydevenv.project"] == "/work/app"
        assert attrs["pydevenv.checks.count"] == 3
        assert attrs["pydevenv.checks.pass_count"] == 1
        assert attrs["pydevenv.checks.passed"] is False
        assert attrs["pydevenv.checks.failed"] == "ruff_format,tests"

    def test_no_checks(self) -> None:
        attrs = run_attributes([], "/work/app")
        assert attrs["pydevenv.checks.count"] == 0
        assert attrs["pydevenv.checks.passed"] is True
        assert attrs["pydevenv.checks.failed"] == ""


class TestPackageVersion:
    def test_falls_back_when_not_installed(self) -> None:
        package_version.cache_clear()
        try:
            with patch("pydevenv.tracing.version", side_effect=PackageNotFoundError("pydevenv")):
                assert package_version() == "unknown"
        finally:
            package_version.cache_clear()


# ---------------------------------------------------------------------------
# Imperative shell
# ---------------------------------------------------------------------------


class TestCreateTracerProvider:
    def test_resource_names_service(self) -> None:
        provider = create_tracer_provider(ExporterType.NONE)
        attrs = provider.resource.attributes
        assert attrs["service.name"] == SERVICE_NAME
        assert attrs["service.version"] == package_version()
        provider.shutdown()

    def test_none_adds_no_processor(self) -> None:
        provider = create_tracer_provider(ExporterType.NONE)
        assert provider._active_span_processor._span_processors == ()
        provider.shutdown()

    def test_console_adds_processor(self) -> None:
        provider = create_tracer_provider(ExporterType.CONSOLE)
        assert len(provider._active_span_processor._span_processors) == 1
        provider.shutdown()


class TestInitTracing:
    def test_installs_provider(self) -> None:
        provider = init_tracing(ExporterType.NONE)
        assert isinstance(provider, TracerProvider)
        assert tracing._provider is provider

    def test_replaces_and_shuts_down_previous(self) -> None:
        first = init_tracing(ExporterType.NONE)
        with patch.object(first, "shutdown") as mock_shutdown:
            second = init_tracing(ExporterType.NONE)
        mock_shutdown.assert_called_once()
        assert tracing._provider is second

    def test_invalid_env_leaves_provider_alone(self, monkeypatch: pytest.MonkeyPatch) -> None:
        provider = init_tracing(ExporterType.NONE)
        monkeypatch.setenv(PYDEVENV_OTEL_EXPORTER_ENV, "banana")
        with pytest.raises(ValueError):
            init_tracing()
        assert tracing._provider is provider


class TestShutdownTracing:
    def test_noop_without_provider(self) -> None:
        shutdown_tracing()
        assert tracing._provider is None

    def test_clears_provider(self) -> None:
        init_tracing(ExporterType.NONE)
        shutdown_tracing()
        assert tracing._provider is None


class TestGetTracer:
    def test_spans_reach_installed_provider(self, span_exporter: InMemorySpanExporter) -> None:
        with get_tracer().start_as_current_span("pydevenv.test"):
            pass
        spans = span_exporter.get_finished_spans()
        assert [s.name for s in spans] == ["pydevenv.test"]
        assert spans[0].instrumentation_scope.name == SERVICE_NAME

    def test_falls_back_without_provider(self) -> None:
        tracer = get_tracer()
        with tracer.start_as_current_span("pydevenv.test") as span:
            assert span is not None


class TestTracingSession:
    def test_provider_removed_after_block(self) -> None:
        with tracing_session(ExporterType.NONE) as provider:
            assert tracing._provider is provider
        assert tracing._provider is None

    def test_provider_removed_on_error(self) -> None:
        with pytest.raises(RuntimeError), tracing_session(ExporterType.NONE):
            raise RuntimeError("boom")
        assert tracing._provider is None
