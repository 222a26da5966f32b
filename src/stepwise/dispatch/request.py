"""Outbound requests as seen by a dispatcher."""

from __future__ import annotations

import warnings
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Literal

from stepwise.__about__ import DEFAULT_MODEL
from stepwise.core.errors import ErrorKind, StepwiseError
from stepwise.core.values import freeze_mapping, freeze_messages

if TYPE_CHECKING:
    from stepwise.tools.schema import ToolInput

RequestKind = Literal["text", "structured", "embeddings"]


def resolve_model_provider(model: str | None, provider: str | None) -> tuple[str, str]:
    """Split ``provider:model`` or pair a bare model with an explicit provider."""
    if not model:
        model = DEFAULT_MODEL
        warnings.warn(f"No model was provided, defaulting to {model}", UserWarning, stacklevel=3)
        if provider:
            return provider, model.split(":", 1)[1]

    if provider:
        if ":" in model:
            raise StepwiseError(
                ErrorKind.INVALID_INPUT,
                "When provider is specified, model must not include a provider prefix.",
            )
        return provider, model

    if ":" not in model:
        raise StepwiseError(ErrorKind.INVALID_INPUT, "Model must be in 'provider:model' format.")

    provider_name, model_id = model.split(":", 1)
    if not provider_name or not model_id:
        raise StepwiseError(ErrorKind.INVALID_INPUT, "Model must be in 'provider:model' format.")
    return provider_name, model_id


@dataclass(frozen=True)
class Request:
    """Everything a dispatcher is asked to satisfy.

    ``messages`` is prior history without system prompts; ``tools`` holds
    normalized tool schemas; ``provider_config`` is the provider
    configuration in effect when the request was issued.
    """

    kind: RequestKind
    provider: str
    model: str
    prompt: str | None = None
    messages: tuple[Mapping[str, Any], ...] = field(default=(), hash=False)
    system_prompts: tuple[str, ...] = ()
    tools: tuple[Mapping[str, Any], ...] = field(default=(), hash=False)
    schema: Mapping[str, Any] | None = field(default=None, hash=False)
    inputs: tuple[str, ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict, hash=False)
    provider_config: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "messages", freeze_messages(self.messages))
        object.__setattr__(self, "system_prompts", tuple(self.system_prompts or ()))
        object.__setattr__(self, "tools", freeze_messages(self.tools))
        if self.schema is not None:
            object.__setattr__(self, "schema", freeze_mapping(self.schema))
        object.__setattr__(self, "inputs", tuple(self.inputs or ()))
        object.__setattr__(self, "options", freeze_mapping(self.options))
        object.__setattr__(self, "provider_config", freeze_mapping(self.provider_config))

    @classmethod
    def text(
        cls,
        prompt: str | None = None,
        *,
        model: str | None = None,
        provider: str | None = None,
        messages: Sequence[Mapping[str, Any]] = (),
        system_prompt: str | Sequence[str] | None = None,
        tools: ToolInput = None,
        provider_config: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> Request:
        from stepwise.tools.schema import normalize_tools

        if prompt is None and not messages:
            raise StepwiseError(ErrorKind.INVALID_INPUT, "Either prompt or messages is required.")
        provider_name, model_id = resolve_model_provider(model, provider)
        return cls(
            kind="text",
            provider=provider_name,
            model=model_id,
            prompt=prompt,
            messages=tuple(messages),
            system_prompts=_system_prompts(system_prompt),
            tools=tuple(normalize_tools(tools).schemas),
            options=options,
            provider_config=provider_config or {},
        )

    @classmethod
    def structured(
        cls,
        prompt: str | None = None,
        *,
        schema: Mapping[str, Any],
        model: str | None = None,
        provider: str | None = None,
        messages: Sequence[Mapping[str, Any]] = (),
        system_prompt: str | Sequence[str] | None = None,
        provider_config: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> Request:
        if prompt is None and not messages:
            raise StepwiseError(ErrorKind.INVALID_INPUT, "Either prompt or messages is required.")
        provider_name, model_id = resolve_model_provider(model, provider)
        return cls(
            kind="structured",
            provider=provider_name,
            model=model_id,
            prompt=prompt,
            messages=tuple(messages),
            system_prompts=_system_prompts(system_prompt),
            schema=dict(schema),
            options=options,
            provider_config=provider_config or {},
        )

    @classmethod
    def embeddings(
        cls,
        inputs: str | Sequence[str],
        *,
        model: str | None = None,
        provider: str | None = None,
        provider_config: Mapping[str, Any] | None = None,
        **options: Any,
    ) -> Request:
        items = (inputs,) if isinstance(inputs, str) else tuple(inputs)
        if not items:
            raise StepwiseError(ErrorKind.INVALID_INPUT, "At least one embedding input is required.")
        provider_name, model_id = resolve_model_provider(model, provider)
        return cls(
            kind="embeddings",
            provider=provider_name,
            model=model_id,
            inputs=items,
            options=options,
            provider_config=provider_config or {},
        )

    def as_messages(self) -> list[dict[str, Any]]:
        payload = [{"role": "system", "content": content} for content in self.system_prompts]
        payload.extend(dict(message) for message in self.messages)
        if self.prompt is not None:
            payload.append({"role": "user", "content": self.prompt})
        return payload

    def transcript(self) -> list[dict[str, Any]]:
        """History plus the prompt, without system prompts."""
        history = [dict(message) for message in self.messages]
        if self.prompt is not None:
            history.append({"role": "user", "content": self.prompt})
        return history

    def continued(self, messages: Sequence[Mapping[str, Any]]) -> Request:
        return replace(self, prompt=None, messages=tuple(messages))


def _system_prompts(system_prompt: str | Sequence[str] | None) -> tuple[str, ...]:
    if system_prompt is None:
        return ()
    if isinstance(system_prompt, str):
        return (system_prompt,)
    return tuple(system_prompt)
