"""Core primitives for Stepwise."""

from stepwise.core.errors import (
    DuplicateToolCallIdWarning,
    DuplicateToolResultWarning,
    ErrorKind,
    ExhaustedFakeQueueError,
    StepwiseError,
    ToolResultOrphanWarning,
)
from stepwise.core.finish import FinishReason, map_finish_reason
from stepwise.core.responses import (
    EmbeddingsResponse,
    Response,
    ResponseBuilder,
    StructuredResponse,
    TextResponse,
    find_orphan_tool_results,
)
from stepwise.core.steps import Step
from stepwise.core.telemetry import instrument_stepwise, span
from stepwise.core.values import Embedding, EmbeddingsUsage, Meta, ToolCall, ToolResult, Usage

__all__ = [
    "DuplicateToolCallIdWarning",
    "DuplicateToolResultWarning",
    "Embedding",
    "EmbeddingsResponse",
    "EmbeddingsUsage",
    "ErrorKind",
    "ExhaustedFakeQueueError",
    "FinishReason",
    "Meta",
    "Response",
    "ResponseBuilder",
    "Step",
    "StepwiseError",
    "StructuredResponse",
    "TextResponse",
    "ToolCall",
    "ToolResult",
    "ToolResultOrphanWarning",
    "Usage",
    "find_orphan_tool_results",
    "instrument_stepwise",
    "map_finish_reason",
    "span",
]
