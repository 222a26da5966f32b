from __future__ import annotations

import pytest

from stepwise.core import ErrorKind, StepwiseError, instrument_stepwise, span


class TestTelemetry:
    def test_span_noop_when_logfire_missing(self, monkeypatch):
        monkeypatch.setattr("stepwise.core.telemetry.logfire", None)
        with span("stepwise.test"):
            pass

    def test_span_noop_until_instrumented(self, monkeypatch):
        monkeypatch.setattr("stepwise.core.telemetry._INSTRUMENTED", False)
        with span("stepwise.test", provider="openai"):
            pass

    def test_instrument_requires_logfire(self, monkeypatch):
        monkeypatch.setattr("stepwise.core.telemetry.logfire", None)

        with pytest.raises(StepwiseError) as exc_info:
            instrument_stepwise()
        assert exc_info.value.kind == ErrorKind.CONFIG
        assert str(exc_info.value).startswith("[config]")
