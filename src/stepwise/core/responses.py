"""Aggregated responses and the builder that folds steps into them."""

from __future__ import annotations

import json
import logging
import warnings
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from stepwise.core.errors import (
    DuplicateToolCallIdWarning,
    DuplicateToolResultWarning,
    ErrorKind,
    StepwiseError,
    ToolResultOrphanWarning,
)
from stepwise.core.finish import FinishReason, map_finish_reason
from stepwise.core.steps import Step
from stepwise.core.values import Embedding, EmbeddingsUsage, Meta, ToolCall, ToolResult, Usage, freeze_mapping

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _empty_steps() -> StepwiseError:
    return StepwiseError(ErrorKind.EMPTY_STEP_SEQUENCE, "A text response needs at least one step.")


def find_orphan_tool_results(steps: Sequence[Step]) -> list[ToolResult]:
    """Return tool results whose call id was not issued in the same or an earlier step."""
    seen: set[str] = set()
    orphans: list[ToolResult] = []
    for step in steps:
        seen.update(call.id for call in step.tool_calls)
        orphans.extend(result for result in step.tool_results if result.tool_call_id not in seen)
    return orphans


@dataclass(frozen=True)
class TextResponse:
    """Multi-step, tool-capable response.

    Everything except ``steps`` is derived. ``usage`` is the sum over all
    steps, the other scalar fields come from the last step.
    """

    steps: tuple[Step, ...]

    def __post_init__(self) -> None:
        steps = tuple(self.steps or ())
        if not steps:
            raise _empty_steps()
        object.__setattr__(self, "steps", steps)

    @property
    def last_step(self) -> Step:
        return self.steps[-1]

    @property
    def text(self) -> str:
        return self.last_step.text

    @property
    def finish_reason(self) -> FinishReason:
        return self.last_step.finish_reason

    @property
    def meta(self) -> Meta:
        return self.last_step.meta

    @property
    def messages(self) -> tuple[Mapping[str, Any], ...]:
        return self.last_step.messages

    @property
    def system_prompts(self) -> tuple[str, ...]:
        return self.last_step.system_prompts

    @property
    def additional_content(self) -> Mapping[str, Any]:
        return self.last_step.additional_content

    @property
    def tool_calls(self) -> tuple[ToolCall, ...]:
        return tuple(call for step in self.steps for call in step.tool_calls)

    @property
    def tool_results(self) -> tuple[ToolResult, ...]:
        return tuple(result for step in self.steps for result in step.tool_results)

    @property
    def usage(self) -> Usage:
        total = Usage()
        for step in self.steps:
            total = total + step.usage
        return total

    @property
    def orphan_tool_results(self) -> tuple[ToolResult, ...]:
        return tuple(find_orphan_tool_results(self.steps))

    @classmethod
    def from_steps(cls, steps: Iterable[Step]) -> TextResponse:
        builder = ResponseBuilder()
        for step in steps:
            builder.add_step(step)
        return builder.to_response()


@dataclass(frozen=True)
class StructuredResponse:
    """Single-shot response carrying one JSON object.

    ``structured`` always equals ``json.loads(text)``; when only ``text`` is
    given the mapping is parsed from it.
    """

    text: str
    structured: Mapping[str, Any] | None = field(default=None, hash=False)
    finish_reason: FinishReason = FinishReason.STOP
    usage: Usage = field(default_factory=Usage)
    meta: Meta = field(default_factory=Meta)
    steps: tuple[Step, ...] = ()
    additional_content: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        parsed = _parse_object(self.text)
        if self.structured is not None and dict(self.structured) != parsed:
            raise StepwiseError(
                ErrorKind.INVALID_INPUT,
                "Structured payload does not match its serialized text.",
            )
        object.__setattr__(self, "structured", freeze_mapping(parsed))
        object.__setattr__(self, "finish_reason", map_finish_reason(self.finish_reason))
        object.__setattr__(self, "steps", tuple(self.steps or ()))
        object.__setattr__(self, "additional_content", freeze_mapping(self.additional_content))

    @classmethod
    def from_structured(cls, structured: Mapping[str, Any], **kwargs: Any) -> StructuredResponse:
        try:
            text = json.dumps(dict(structured), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise StepwiseError(
                ErrorKind.INVALID_INPUT,
                "Structured payload is not JSON serializable.",
                cause=exc,
            ) from exc
        return cls(text=text, structured=structured, **kwargs)

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> StructuredResponse:
        return cls(text=text, **kwargs)

    def to_model(self, model: type[ModelT]) -> ModelT:
        try:
            return model.model_validate(dict(self.structured))
        except ValidationError as exc:
            raise StepwiseError(
                ErrorKind.INVALID_INPUT,
                f"Structured payload failed validation for {model.__name__}.",
                cause=exc,
            ) from exc


def _parse_object(text: str) -> dict[str, Any]:
    try:
        parsed = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise StepwiseError(ErrorKind.INVALID_INPUT, "Structured text is not valid JSON.", cause=exc) from exc
    if not isinstance(parsed, dict):
        raise StepwiseError(ErrorKind.INVALID_INPUT, "Structured text must decode to a JSON object.")
    return parsed


@dataclass(frozen=True)
class EmbeddingsResponse:
    embeddings: tuple[Embedding, ...]
    usage: EmbeddingsUsage = field(default_factory=EmbeddingsUsage)
    meta: Meta = field(default_factory=Meta)

    def __post_init__(self) -> None:
        embeddings = tuple(
            item if isinstance(item, Embedding) else Embedding(tuple(item)) for item in self.embeddings or ()
        )
        lengths = {len(item) for item in embeddings}
        if len(lengths) > 1:
            raise StepwiseError(
                ErrorKind.INVALID_INPUT,
                f"Embeddings in one response must share a length, got {sorted(lengths)}.",
            )
        object.__setattr__(self, "embeddings", embeddings)

    @property
    def dimensions(self) -> int:
        return len(self.embeddings[0]) if self.embeddings else 0

    @classmethod
    def from_vectors(cls, vectors: Iterable[Sequence[float]], **kwargs: Any) -> EmbeddingsResponse:
        return cls(embeddings=tuple(Embedding(tuple(vector)) for vector in vectors), **kwargs)


Response = TextResponse | StructuredResponse | EmbeddingsResponse


def _warn(category: type[UserWarning], message: str) -> None:
    logger.warning("%s", message)
    warnings.warn(message, category, stacklevel=3)


class ResponseBuilder:
    """Accumulates steps in order and folds them into a TextResponse."""

    def __init__(self) -> None:
        self._steps: list[Step] = []

    def add_step(self, step: Step) -> ResponseBuilder:
        if not isinstance(step, Step):
            raise StepwiseError(
                ErrorKind.INVALID_INPUT,
                f"add_step expects a Step, got {type(step).__name__}.",
            )
        issued = {call.id for previous in self._steps for call in previous.tool_calls}
        answered = {result.tool_call_id for previous in self._steps for result in previous.tool_results}
        step_ids: set[str] = set()
        for call in step.tool_calls:
            if call.id in step_ids:
                _warn(DuplicateToolCallIdWarning, f"Tool call id {call.id!r} ({call.name}) repeats within one step.")
            elif call.id in issued:
                _warn(DuplicateToolCallIdWarning, f"Tool call id {call.id!r} ({call.name}) was issued by an earlier step.")
            step_ids.add(call.id)
        issued.update(step_ids)
        for result in step.tool_results:
            if result.tool_call_id not in issued:
                _warn(
                    ToolResultOrphanWarning,
                    f"Tool result {result.tool_call_id!r} ({result.tool_name}) has no matching tool call.",
                )
            elif result.tool_call_id in answered:
                _warn(
                    DuplicateToolResultWarning,
                    f"Tool call {result.tool_call_id!r} ({result.tool_name}) already has a result.",
                )
            answered.add(result.tool_call_id)
        self._steps.append(step)
        return self

    @property
    def steps(self) -> tuple[Step, ...]:
        return tuple(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def to_response(self) -> TextResponse:
        if not self._steps:
            raise _empty_steps()
        return TextResponse(steps=tuple(self._steps))
