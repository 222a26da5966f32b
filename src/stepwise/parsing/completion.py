"""OpenAI chat-completions shape parsing."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from stepwise.core.responses import StructuredResponse
from stepwise.core.steps import Step
from stepwise.core.values import Meta, ToolCall, Usage
from stepwise.parsing.common import expand_tool_calls, field

# Provider extras worth carrying through untouched.
_PASSTHROUGH_MESSAGE_FIELDS = ("reasoning", "reasoning_content", "refusal", "annotations", "citations")
_PASSTHROUGH_RESPONSE_FIELDS = ("system_fingerprint", "service_tier", "citations")


def _first_choice(response: Any) -> Any:
    choices = field(response, "choices")
    if not choices:
        return None
    return choices[0]


def extract_text(response: Any) -> str:
    if isinstance(response, str):
        return response
    choice = _first_choice(response)
    message = field(choice, "message") if choice is not None else None
    if message is None:
        return ""
    return field(message, "content", "") or ""


def extract_finish_reason(response: Any) -> str | None:
    choice = _first_choice(response)
    if choice is None:
        return None
    return field(choice, "finish_reason")


def extract_tool_calls(response: Any) -> list[ToolCall]:
    choice = _first_choice(response)
    message = field(choice, "message") if choice is not None else None
    if message is None:
        return []
    raw_calls: list[dict[str, Any]] = []
    for index, tool_call in enumerate(field(message, "tool_calls") or []):
        function = field(tool_call, "function")
        if function is None:
            continue
        raw_calls.append({
            "id": field(tool_call, "id") or f"call_{index}",
            "name": field(function, "name"),
            "arguments": field(function, "arguments"),
        })
    return [
        ToolCall.from_raw(call["id"], call["name"], call["arguments"]) for call in expand_tool_calls(raw_calls)
    ]


def extract_additional_content(response: Any) -> dict[str, Any]:
    extras: dict[str, Any] = {}
    for key in _PASSTHROUGH_RESPONSE_FIELDS:
        value = field(response, key)
        if value is not None:
            extras[key] = value
    choice = _first_choice(response)
    message = field(choice, "message") if choice is not None else None
    if message is not None:
        for key in _PASSTHROUGH_MESSAGE_FIELDS:
            value = field(message, key)
            if value is not None:
                extras.setdefault(key, value)
    return extras


def extract_meta(response: Any, *, fallback_model: str = "") -> Meta:
    return Meta(id=field(response, "id") or "", model=field(response, "model") or fallback_model)


def step_from_completion(
    response: Any,
    *,
    messages: Sequence[Mapping[str, Any]] = (),
    system_prompts: Sequence[str] = (),
    model: str = "",
) -> Step:
    """Normalize one chat-completion payload into a Step.

    ``messages`` is the transcript that was sent; the step's own transcript
    appends the assistant turn to it.
    """
    text = extract_text(response)
    tool_calls = extract_tool_calls(response)
    step = Step(
        text=text,
        finish_reason=extract_finish_reason(response),
        tool_calls=tool_calls,
        usage=Usage.from_payload(field(response, "usage")),
        meta=extract_meta(response, fallback_model=model),
        system_prompts=system_prompts,
        additional_content=extract_additional_content(response),
    )
    return step.with_messages([*messages, step.as_assistant_message()])


def structured_from_completion(
    response: Any,
    *,
    messages: Sequence[Mapping[str, Any]] = (),
    system_prompts: Sequence[str] = (),
    model: str = "",
) -> StructuredResponse:
    step = step_from_completion(response, messages=messages, system_prompts=system_prompts, model=model)
    return StructuredResponse.from_text(
        step.text,
        finish_reason=step.finish_reason,
        usage=step.usage,
        meta=step.meta,
        steps=(step,),
        additional_content=step.additional_content,
    )
