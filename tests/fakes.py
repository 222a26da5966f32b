from __future__ import annotations

from typing import Any

from any_llm.types.completion import ChatCompletion


def make_tool_call(name: str, arguments: str, *, call_id: str = "call_1") -> dict[str, Any]:
    return {"id": call_id, "type": "function", "function": {"name": name, "arguments": arguments}}


def make_completion(
    *,
    text: str | None = "",
    tool_calls: list[dict[str, Any]] | None = None,
    finish_reason: str = "stop",
    usage: dict[str, int] | None = None,
    completion_id: str = "chatcmpl_1",
    model: str = "gpt-4o-mini",
) -> ChatCompletion:
    message: dict[str, Any] = {"role": "assistant", "content": text}
    if tool_calls:
        message["tool_calls"] = tool_calls
    payload = {
        "id": completion_id,
        "object": "chat.completion",
        "created": 0,
        "model": model,
        "choices": [{"index": 0, "finish_reason": finish_reason, "message": message}],
        "usage": usage or {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
    }
    return ChatCompletion.model_validate(payload)


def make_embedding_payload(vectors: list[list[float]], *, model: str = "text-embedding-3-small") -> dict[str, Any]:
    return {
        "object": "list",
        "model": model,
        "data": [
            {"object": "embedding", "index": index, "embedding": vector} for index, vector in enumerate(vectors)
        ],
        "usage": {"prompt_tokens": 4, "total_tokens": 4},
    }
