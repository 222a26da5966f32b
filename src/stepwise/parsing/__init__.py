"""Normalization of provider payloads into Stepwise values."""

from stepwise.parsing.common import expand_tool_calls, field
from stepwise.parsing.completion import step_from_completion, structured_from_completion
from stepwise.parsing.embedding import embeddings_from_payload

__all__ = [
    "embeddings_from_payload",
    "expand_tool_calls",
    "field",
    "step_from_completion",
    "structured_from_completion",
]
