"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from opentelemetry import trace

from bba.utils.telemetry import (
    ATTR_BLACKBOARD_TOKENS,
    ATTR_ITERATION,
    ATTR_LOOP_STATE,
    ATTR_TOOL_NAME,
    configure_telemetry,
    get_tracer,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        assert isinstance(get_tracer("bba.agent.loop"), trace.Tracer)

    def test_default_name(self) -> None:
        assert isinstance(get_tracer(), trace.Tracer)

    def test_spans_work_without_sdk(self) -> None:
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("agent.iteration") as span:
            span.set_attribute(ATTR_ITERATION, 1)
            span.set_attribute(ATTR_LOOP_STATE, "iterating")


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry()

    def test_otlp_raises_without_exporter(self) -> None:
        pytest.importorskip("opentelemetry.sdk.trace")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(export_to_console=False, otlp_endpoint="http://localhost:4317")


class TestAttributeConstants:
    @pytest.mark.parametrize("attr", [ATTR_ITERATION, ATTR_LOOP_STATE, ATTR_TOOL_NAME, ATTR_BLACKBOARD_TOKENS])
    def test_namespaced(self, attr: str) -> None:
        assert attr.startswith("bba.")
