"""Termination reasons for a single model turn."""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class FinishReason(str, Enum):
    """Why a model turn ended."""

    STOP = "stop"
    LENGTH = "length"
    CONTENT_FILTER = "content_filter"
    TOOL_CALLS = "tool_calls"
    ERROR = "error"
    OTHER = "other"
    UNKNOWN = "unknown"


# Provider spellings, lowercased. OpenAI, Anthropic, Gemini, Mistral and Bedrock
# all report one of these.
_PROVIDER_REASONS: dict[str, FinishReason] = {
    "stop": FinishReason.STOP,
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "eos": FinishReason.STOP,
    "complete": FinishReason.STOP,
    "finish_reason_stop": FinishReason.STOP,
    "length": FinishReason.LENGTH,
    "max_tokens": FinishReason.LENGTH,
    "model_length": FinishReason.LENGTH,
    "content_filter": FinishReason.CONTENT_FILTER,
    "content_filtered": FinishReason.CONTENT_FILTER,
    "safety": FinishReason.CONTENT_FILTER,
    "recitation": FinishReason.CONTENT_FILTER,
    "blocklist": FinishReason.CONTENT_FILTER,
    "prohibited_content": FinishReason.CONTENT_FILTER,
    "spii": FinishReason.CONTENT_FILTER,
    "refusal": FinishReason.CONTENT_FILTER,
    "guardrail_intervened": FinishReason.CONTENT_FILTER,
    "tool_calls": FinishReason.TOOL_CALLS,
    "tool_use": FinishReason.TOOL_CALLS,
    "function_call": FinishReason.TOOL_CALLS,
    "error": FinishReason.ERROR,
    "malformed_function_call": FinishReason.ERROR,
    "other": FinishReason.OTHER,
    "pause_turn": FinishReason.OTHER,
    "finish_reason_unspecified": FinishReason.UNKNOWN,
    "unknown": FinishReason.UNKNOWN,
}


def is_mappable(raw: object) -> bool:
    if raw is None or isinstance(raw, FinishReason):
        return True
    return isinstance(raw, str) and raw.strip().lower() in _PROVIDER_REASONS


def map_finish_reason(raw: str | FinishReason | None) -> FinishReason:
    """Map a provider finish reason onto the closed set, defaulting to UNKNOWN."""
    if isinstance(raw, FinishReason):
        return raw
    if raw is None:
        return FinishReason.UNKNOWN
    reason = _PROVIDER_REASONS.get(str(raw).strip().lower())
    if reason is None:
        logger.warning("Unmappable finish reason %r, using %s", raw, FinishReason.UNKNOWN.value)
        return FinishReason.UNKNOWN
    return reason
