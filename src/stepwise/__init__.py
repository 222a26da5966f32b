"""Stepwise public API."""

from stepwise.__about__ import DEFAULT_MODEL
from stepwise.core import (
    DuplicateToolCallIdWarning,
    DuplicateToolResultWarning,
    Embedding,
    EmbeddingsResponse,
    EmbeddingsUsage,
    ErrorKind,
    ExhaustedFakeQueueError,
    FinishReason,
    Meta,
    Response,
    ResponseBuilder,
    Step,
    StepwiseError,
    StructuredResponse,
    TextResponse,
    ToolCall,
    ToolResult,
    ToolResultOrphanWarning,
    Usage,
    instrument_stepwise,
    map_finish_reason,
)
from stepwise.dispatch import Dispatcher, FakeDispatcher, LiveDispatcher, Request, fake
from stepwise.generation import generate_text
from stepwise.tools import Tool, ToolExecutor, ToolSet, schema_from_model, tool, tool_from_model

__all__ = [
    "DEFAULT_MODEL",
    "Dispatcher",
    "DuplicateToolCallIdWarning",
    "DuplicateToolResultWarning",
    "Embedding",
    "EmbeddingsResponse",
    "EmbeddingsUsage",
    "ErrorKind",
    "ExhaustedFakeQueueError",
    "FakeDispatcher",
    "FinishReason",
    "LiveDispatcher",
    "Meta",
    "Request",
    "Response",
    "ResponseBuilder",
    "Step",
    "StepwiseError",
    "StructuredResponse",
    "TextResponse",
    "Tool",
    "ToolCall",
    "ToolExecutor",
    "ToolResult",
    "ToolResultOrphanWarning",
    "ToolSet",
    "Usage",
    "fake",
    "generate_text",
    "instrument_stepwise",
    "map_finish_reason",
    "schema_from_model",
    "tool",
    "tool_from_model",
]
