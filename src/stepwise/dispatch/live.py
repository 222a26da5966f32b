"""Live dispatch through any-llm clients."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, NoReturn

from any_llm import AnyLLM
from any_llm.exceptions import (
    AnyLLMError,
    AuthenticationError,
    ContentFilterError,
    ContextLengthExceededError,
    InvalidRequestError,
    MissingApiKeyError,
    ModelNotFoundError,
    ProviderError,
    RateLimitError,
    UnsupportedParameterError,
    UnsupportedProviderError,
)
from pydantic import ValidationError

from stepwise.core.errors import ErrorKind, StepwiseError
from stepwise.core.responses import Response, TextResponse
from stepwise.core.telemetry import span
from stepwise.dispatch.request import Request
from stepwise.parsing import embeddings_from_payload, step_from_completion, structured_from_completion

logger = logging.getLogger(__name__)

_EXCEPTION_KINDS: tuple[tuple[tuple[type[Exception], ...], ErrorKind], ...] = (
    ((MissingApiKeyError, AuthenticationError), ErrorKind.CONFIG),
    (
        (
            UnsupportedProviderError,
            UnsupportedParameterError,
            InvalidRequestError,
            ModelNotFoundError,
            ContextLengthExceededError,
        ),
        ErrorKind.INVALID_INPUT,
    ),
    ((RateLimitError, ContentFilterError), ErrorKind.TEMPORARY),
    ((ProviderError, AnyLLMError), ErrorKind.PROVIDER),
)


def _status_code(exc: Exception) -> int | None:
    for source in (exc, getattr(exc, "response", None)):
        status = getattr(source, "status_code", None)
        if isinstance(status, int):
            return status
    return None


def _kind_for_status(status: int | None) -> ErrorKind:
    if status is None:
        return ErrorKind.UNKNOWN
    if status in (401, 403):
        return ErrorKind.CONFIG
    if status in (408, 409, 425, 429):
        return ErrorKind.TEMPORARY
    if status >= 500:
        return ErrorKind.PROVIDER
    if status >= 400:
        return ErrorKind.INVALID_INPUT
    return ErrorKind.UNKNOWN


class LiveDispatcher:
    """Forward requests to provider clients and normalize what comes back.

    One attempt per request: failures are classified and raised as
    StepwiseError with the original exception attached.
    """

    def __init__(
        self,
        *,
        api_key: str | dict[str, str] | None = None,
        api_base: str | dict[str, str] | None = None,
        client_args: dict[str, Any] | None = None,
        error_classifier: Callable[[Exception], ErrorKind | None] | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_base = api_base
        self._client_args = client_args or {}
        self._error_classifier = error_classifier
        self._client_cache: dict[str, AnyLLM] = {}

    def _resolve_api_key(self, provider: str) -> str | None:
        if isinstance(self._api_key, dict):
            return self._api_key.get(provider)
        return self._api_key

    def _resolve_api_base(self, provider: str) -> str | None:
        if isinstance(self._api_base, dict):
            return self._api_base.get(provider)
        return self._api_base

    def _cache_key(self, provider: str, api_key: str | None, api_base: str | None) -> str:
        payload = {
            "provider": provider,
            "api_key": api_key,
            "api_base": api_base,
            "client_args": {str(k): repr(v) for k, v in sorted(self._client_args.items())},
        }
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))

    def get_client(self, provider: str) -> AnyLLM:
        api_key = self._resolve_api_key(provider)
        api_base = self._resolve_api_base(provider)
        cache_key = self._cache_key(provider, api_key, api_base)
        if cache_key not in self._client_cache:
            self._client_cache[cache_key] = AnyLLM.create(
                provider,
                api_key=api_key,
                api_base=api_base,
                **self._client_args,
            )
        return self._client_cache[cache_key]

    def dispatch(self, request: Request) -> Response:
        try:
            client = self.get_client(request.provider)
            with span("stepwise.live.dispatch", provider=request.provider, model=request.model, kind=request.kind):
                if request.kind == "embeddings":
                    payload = client._embedding(model=request.model, inputs=list(request.inputs), **request.options)
                    return embeddings_from_payload(payload, model=request.model)
                if request.kind == "structured":
                    payload = client.completion(
                        model=request.model,
                        messages=request.as_messages(),
                        response_format={
                            "type": "json_schema",
                            "json_schema": {"name": "response", "schema": dict(request.schema or {})},
                        },
                        **request.options,
                    )
                    return structured_from_completion(
                        payload,
                        messages=request.transcript(),
                        system_prompts=request.system_prompts,
                        model=request.model,
                    )
                kwargs = dict(request.options)
                if request.tools:
                    kwargs["tools"] = [dict(schema) for schema in request.tools]
                payload = client.completion(model=request.model, messages=request.as_messages(), **kwargs)
                step = step_from_completion(
                    payload,
                    messages=request.transcript(),
                    system_prompts=request.system_prompts,
                    model=request.model,
                )
                return TextResponse(steps=(step,))
        except Exception as exc:
            self.raise_wrapped(exc, request.provider, request.model)

    def classify_exception(self, exc: Exception) -> ErrorKind:
        if isinstance(exc, StepwiseError):
            return exc.kind
        if self._error_classifier is not None:
            try:
                kind = self._error_classifier(exc)
            except Exception as classifier_exc:
                logger.warning("error_classifier failed: %r", classifier_exc)
            else:
                if isinstance(kind, ErrorKind):
                    return kind
        if isinstance(exc, ValidationError):
            return ErrorKind.INVALID_INPUT
        for types, kind in _EXCEPTION_KINDS:
            if isinstance(exc, types):
                return kind
        return _kind_for_status(_status_code(exc))

    def raise_wrapped(self, exc: Exception, provider: str, model: str) -> NoReturn:
        if isinstance(exc, StepwiseError):
            raise exc
        kind = self.classify_exception(exc)
        logger.warning("[%s:%s] dispatch failed: %s", provider, model, exc)
        raise StepwiseError(kind, f"{provider}:{model}: {exc}", cause=exc) from exc
