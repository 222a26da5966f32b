"""Leaf value objects shared by steps and responses."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from stepwise.core.errors import ErrorKind, StepwiseError


def _require_count(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise StepwiseError(ErrorKind.INVALID_INPUT, f"{name} must be an integer, got {value!r}.")
    if value < 0:
        raise StepwiseError(ErrorKind.INVALID_INPUT, f"{name} must be >= 0, got {value}.")


def _read(data: Any, *keys: str) -> Any:
    for key in keys:
        value = data.get(key) if isinstance(data, Mapping) else getattr(data, key, None)
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class Usage:
    """Token accounting for one generative turn."""

    prompt_tokens: int = 0
    completion_tokens: int = 0

    def __post_init__(self) -> None:
        _require_count("prompt_tokens", self.prompt_tokens)
        _require_count("completion_tokens", self.completion_tokens)

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def __add__(self, other: Usage) -> Usage:
        if not isinstance(other, Usage):
            return NotImplemented
        return Usage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
        )

    @classmethod
    def from_payload(cls, payload: Any) -> Usage:
        """Read usage from an OpenAI- or Anthropic-shaped payload."""
        if payload is None:
            return cls()
        prompt = _read(payload, "prompt_tokens", "input_tokens") or 0
        completion = _read(payload, "completion_tokens", "output_tokens") or 0
        return cls(prompt_tokens=int(prompt), completion_tokens=int(completion))

    def as_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class Meta:
    """Provider-assigned identifiers for one turn."""

    id: str = ""
    model: str = ""


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.arguments, Mapping):
            raise StepwiseError(
                ErrorKind.INVALID_INPUT,
                f"Tool call '{self.name}' arguments must be a mapping, got {type(self.arguments).__name__}.",
            )
        object.__setattr__(self, "arguments", freeze_mapping(self.arguments))

    @classmethod
    def from_raw(cls, id: str, name: str, arguments: Mapping[str, Any] | str | None) -> ToolCall:
        """Build a tool call from provider arguments, which may be a JSON string."""
        if arguments is None or (isinstance(arguments, str) and not arguments.strip()):
            return cls(id=id, name=name, arguments={})
        if isinstance(arguments, str):
            try:
                parsed = json.loads(arguments)
            except json.JSONDecodeError as exc:
                raise StepwiseError(
                    ErrorKind.INVALID_INPUT,
                    f"Tool call '{name}' arguments are not valid JSON.",
                    cause=exc,
                ) from exc
            if not isinstance(parsed, dict):
                raise StepwiseError(
                    ErrorKind.INVALID_INPUT,
                    f"Tool call '{name}' arguments must decode to an object.",
                )
            return cls(id=id, name=name, arguments=parsed)
        return cls(id=id, name=name, arguments=arguments)

    def as_message(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": json.dumps(dict(self.arguments))},
        }


@dataclass(frozen=True)
class ToolResult:
    """Serialized output of one executed tool call."""

    tool_call_id: str
    tool_name: str
    result: str

    def as_message(self) -> dict[str, Any]:
        return {
            "role": "tool",
            "tool_call_id": self.tool_call_id,
            "name": self.tool_name,
            "content": self.result,
        }


@dataclass(frozen=True)
class Embedding:
    vector: tuple[float, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "vector", tuple(float(value) for value in self.vector))

    def __len__(self) -> int:
        return len(self.vector)


@dataclass(frozen=True)
class EmbeddingsUsage:
    tokens: int = 0

    def __post_init__(self) -> None:
        _require_count("tokens", self.tokens)


def freeze_mapping(data: Mapping[str, Any] | None) -> Mapping[str, Any]:
    """Read-only view over a shallow copy of ``data``."""
    return MappingProxyType(dict(data or {}))


def freeze_messages(messages: Sequence[Mapping[str, Any]] | None) -> tuple[Mapping[str, Any], ...]:
    return tuple(freeze_mapping(message) for message in messages or ())
