"""A single model turn."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from stepwise.core.errors import ErrorKind, StepwiseError
from stepwise.core.finish import FinishReason, is_mappable, map_finish_reason
from stepwise.core.values import Meta, ToolCall, ToolResult, Usage, freeze_mapping, freeze_messages

RAW_FINISH_REASON_KEY = "raw_finish_reason"


@dataclass(frozen=True)
class Step:
    """One complete model turn.

    ``messages`` is the conversation transcript *after* this turn and
    ``additional_content`` carries provider-specific data untouched.
    A raw provider finish reason is accepted and mapped; when it cannot be
    mapped the step records ``UNKNOWN`` and keeps the raw value under
    ``additional_content["raw_finish_reason"]``.
    """

    text: str = ""
    finish_reason: FinishReason = FinishReason.UNKNOWN
    tool_calls: tuple[ToolCall, ...] = ()
    tool_results: tuple[ToolResult, ...] = ()
    usage: Usage = field(default_factory=Usage)
    meta: Meta = field(default_factory=Meta)
    messages: tuple[Mapping[str, Any], ...] = field(default=(), hash=False)
    system_prompts: tuple[str, ...] = ()
    additional_content: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise StepwiseError(ErrorKind.INVALID_INPUT, f"Step text must be a string, got {type(self.text).__name__}.")
        additional = dict(self.additional_content or {})
        raw_reason = self.finish_reason
        if not is_mappable(raw_reason):
            additional.setdefault(RAW_FINISH_REASON_KEY, raw_reason)
        object.__setattr__(self, "finish_reason", map_finish_reason(raw_reason))
        object.__setattr__(self, "tool_calls", _typed_tuple(self.tool_calls, ToolCall, "tool_calls"))
        object.__setattr__(self, "tool_results", _typed_tuple(self.tool_results, ToolResult, "tool_results"))
        object.__setattr__(self, "messages", freeze_messages(self.messages))
        object.__setattr__(self, "system_prompts", tuple(self.system_prompts or ()))
        object.__setattr__(self, "additional_content", freeze_mapping(additional))

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def with_tool_results(self, results: Iterable[ToolResult]) -> Step:
        return replace(self, tool_results=(*self.tool_results, *results))

    def with_messages(self, messages: Sequence[Mapping[str, Any]]) -> Step:
        return replace(self, messages=messages)

    def as_assistant_message(self) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": self.text}
        if self.tool_calls:
            message["tool_calls"] = [call.as_message() for call in self.tool_calls]
        return message


def _typed_tuple(items: Iterable[Any] | None, expected: type, name: str) -> tuple[Any, ...]:
    values = tuple(items or ())
    for item in values:
        if not isinstance(item, expected):
            raise StepwiseError(
                ErrorKind.INVALID_INPUT,
                f"Step {name} must contain {expected.__name__} items, got {type(item).__name__}.",
            )
    return values
