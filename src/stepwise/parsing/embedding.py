"""OpenAI embeddings shape parsing."""

from __future__ import annotations

from typing import Any

from stepwise.core.responses import EmbeddingsResponse
from stepwise.core.values import Embedding, EmbeddingsUsage, Meta
from stepwise.parsing.common import field


def embeddings_from_payload(response: Any, *, model: str = "") -> EmbeddingsResponse:
    data = sorted(field(response, "data") or [], key=lambda item: field(item, "index", 0) or 0)
    usage = field(response, "usage")
    tokens = field(usage, "total_tokens") or field(usage, "prompt_tokens") or 0
    return EmbeddingsResponse(
        embeddings=tuple(Embedding(tuple(field(item, "embedding") or ())) for item in data),
        usage=EmbeddingsUsage(tokens=int(tokens)),
        meta=Meta(id=field(response, "id") or "", model=field(response, "model") or model),
    )
