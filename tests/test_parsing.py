from __future__ import annotations

import logging

import pytest

from stepwise import ErrorKind, FinishReason, Meta, StepwiseError, Usage
from stepwise.parsing import embeddings_from_payload, step_from_completion, structured_from_completion

from .fakes import make_completion, make_embedding_payload, make_tool_call


class TestStepFromCompletion:
    def test_text_completion(self):
        step = step_from_completion(
            make_completion(text="Hello", usage={"prompt_tokens": 7, "completion_tokens": 2, "total_tokens": 9}),
            messages=[{"role": "user", "content": "Hi"}],
            system_prompts=["be brief"],
        )
        assert step.text == "Hello"
        assert step.finish_reason is FinishReason.STOP
        assert step.usage == Usage(7, 2)
        assert step.meta == Meta(id="chatcmpl_1", model="gpt-4o-mini")
        assert step.messages[-1] == {"role": "assistant", "content": "Hello"}
        assert step.system_prompts == ("be brief",)

    def test_tool_calls(self):
        step = step_from_completion(
            make_completion(
                text=None,
                tool_calls=[
                    make_tool_call("weather", '{"city": "Paris"}', call_id="call_1"),
                    make_tool_call("clock", "", call_id="call_2"),
                ],
                finish_reason="tool_calls",
            )
        )
        assert step.finish_reason is FinishReason.TOOL_CALLS
        assert [(call.id, call.name, dict(call.arguments)) for call in step.tool_calls] == [
            ("call_1", "weather", {"city": "Paris"}),
            ("call_2", "clock", {}),
        ]
        assert step.messages[-1]["tool_calls"][0]["id"] == "call_1"

    def test_concatenated_arguments_are_expanded(self):
        payload = {
            "id": "chatcmpl_2",
            "model": "qwen",
            "choices": [
                {
                    "finish_reason": "tool_calls",
                    "message": {
                        "content": "",
                        "tool_calls": [
                            make_tool_call("weather", '{"city": "Paris"}{"city": "Rome"}', call_id="call_1"),
                        ],
                    },
                }
            ],
        }
        step = step_from_completion(payload)
        assert [call.id for call in step.tool_calls] == ["call_1", "call_1__2"]
        assert [call.arguments["city"] for call in step.tool_calls] == ["Paris", "Rome"]

    def test_unmappable_finish_reason_is_preserved(self, caplog):
        payload = {
            "id": "resp_1",
            "model": "vendor-model",
            "choices": [{"finish_reason": "vendor_halt", "message": {"content": "partial"}}],
            "citations": ["https://example.com"],
        }
        with caplog.at_level(logging.WARNING):
            step = step_from_completion(payload)
        assert step.finish_reason is FinishReason.UNKNOWN
        assert step.additional_content["raw_finish_reason"] == "vendor_halt"
        assert step.additional_content["citations"] == ["https://example.com"]
        assert "vendor_halt" in caplog.text

    def test_empty_payload(self):
        step = step_from_completion({}, model="fallback-model")
        assert step.text == ""
        assert step.finish_reason is FinishReason.UNKNOWN
        assert step.meta.model == "fallback-model"


class TestStructuredFromCompletion:
    def test_parses_payload(self):
        response = structured_from_completion(make_completion(text='{"name": "Alice", "bio": "..."}'))
        assert response.structured == {"name": "Alice", "bio": "..."}
        assert response.usage == Usage(3, 2)
        assert response.steps[0].text == response.text

    def test_rejects_non_json(self):
        with pytest.raises(StepwiseError) as exc_info:
            structured_from_completion(make_completion(text="not json"))
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT


class TestEmbeddingsFromPayload:
    def test_orders_by_index(self):
        payload = make_embedding_payload([[1.0, 0.0], [0.0, 1.0]])
        payload["data"].reverse()
        response = embeddings_from_payload(payload)
        assert [embedding.vector for embedding in response.embeddings] == [(1.0, 0.0), (0.0, 1.0)]
        assert response.usage.tokens == 4
        assert response.meta.model == "text-embedding-3-small"
