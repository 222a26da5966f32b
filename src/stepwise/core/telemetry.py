"""Observability helpers for Stepwise."""

from __future__ import annotations

from contextlib import nullcontext
from typing import Any

try:  # pragma: no cover - optional dependency
    import logfire  # type: ignore[import-not-found]
except ImportError:  # pragma: no cover - optional dependency
    logfire = None

from stepwise.core.errors import ErrorKind, StepwiseError

_INSTRUMENTED = False


def span(name: str, **attributes: Any):
    if not _INSTRUMENTED or logfire is None:
        return nullcontext()
    return logfire.span(name, **attributes)


def instrument_stepwise() -> None:
    """Enable Stepwise's Logfire spans after users configure Logfire themselves."""
    if logfire is None:
        raise StepwiseError(
            ErrorKind.CONFIG,
            "Logfire is not installed. Install with 'stepwise[observability]' to enable tracing.",
        )
    global _INSTRUMENTED
    _INSTRUMENTED = True
