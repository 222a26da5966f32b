"""Error definitions for Stepwise."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class ErrorKind(str, Enum):
    """Stable error kinds for caller decisions."""

    INVALID_INPUT = "invalid_input"
    CONFIG = "config"
    PROVIDER = "provider"
    TOOL = "tool"
    TEMPORARY = "temporary"
    EMPTY_STEP_SEQUENCE = "empty_step_sequence"
    UNKNOWN = "unknown"


@dataclass
class StepwiseError(Exception):
    """Public error type for Stepwise.

    Attributes:
        kind: Stable, actionable error kind.
        message: Human-readable description.
        cause: Original exception for debugging.
    """

    kind: ErrorKind
    message: str
    cause: Exception | None = None

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def with_cause(self, cause: Exception) -> StepwiseError:
        return replace(self, cause=cause)


class ExhaustedFakeQueueError(AssertionError):
    """Raised when a fake dispatcher is asked for more responses than were queued."""

    def __init__(self, provider: str, model: str, dispatched: int) -> None:
        super().__init__(
            f"No queued response left for provider={provider} model={model} (dispatch #{dispatched})"
        )
        self.provider = provider
        self.model = model
        self.dispatched = dispatched


class ToolResultOrphanWarning(UserWarning):
    """A tool result references a tool call id that is absent from the step history."""


class DuplicateToolCallIdWarning(UserWarning):
    """Two tool calls in one step share an id."""


class DuplicateToolResultWarning(UserWarning):
    """A tool call already answered by an earlier result receives another one."""
