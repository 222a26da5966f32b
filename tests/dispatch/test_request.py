from __future__ import annotations

import pytest

from stepwise import DEFAULT_MODEL, ErrorKind, Request, StepwiseError, tool
from stepwise.dispatch import resolve_model_provider


class TestResolveModelProvider:
    def test_with_prefix(self):
        assert resolve_model_provider("openrouter:openrouter/free", None) == ("openrouter", "openrouter/free")

    def test_with_explicit_provider(self):
        assert resolve_model_provider("gpt-4o-mini", "openai") == ("openai", "gpt-4o-mini")

    def test_rejects_mixed(self):
        with pytest.raises(StepwiseError) as exc_info:
            resolve_model_provider("openai:gpt-4o-mini", "openai")
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT

    def test_rejects_bare_model(self):
        with pytest.raises(StepwiseError):
            resolve_model_provider("gpt-4o-mini", None)

    def test_missing_model_warns_and_defaults(self):
        with pytest.warns(UserWarning, match="defaulting"):
            provider, model = resolve_model_provider(None, None)
        assert f"{provider}:{model}" == DEFAULT_MODEL


class TestRequest:
    def test_text_request(self):
        @tool
        def weather(city: str) -> str:
            """Look up the weather."""
            return "Sunny"

        request = Request.text(
            "Weather in Paris?",
            model="openai:gpt-4o-mini",
            system_prompt="be brief",
            tools=[weather],
            temperature=0.2,
        )
        assert request.kind == "text"
        assert request.provider == "openai"
        assert request.model == "gpt-4o-mini"
        assert request.tools[0]["function"]["name"] == "weather"
        assert request.options == {"temperature": 0.2}
        assert request.as_messages() == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "Weather in Paris?"},
        ]

    def test_prompt_or_messages_required(self):
        with pytest.raises(StepwiseError):
            Request.text(model="openai:gpt-4o-mini")

    def test_messages_without_prompt(self):
        history = [{"role": "user", "content": "Hi"}, {"role": "assistant", "content": "Hello"}]
        request = Request.text(messages=history, model="openai:gpt-4o-mini", system_prompt=["a", "b"])
        assert request.prompt is None
        assert request.system_prompts == ("a", "b")
        assert request.transcript() == history
        assert request.as_messages()[:2] == [{"role": "system", "content": "a"}, {"role": "system", "content": "b"}]

    def test_continued_drops_prompt(self):
        request = Request.text("Hi", model="openai:gpt-4o-mini")
        transcript = [*request.transcript(), {"role": "assistant", "content": "Hello"}]
        follow_up = request.continued(transcript)
        assert follow_up.prompt is None
        assert follow_up.transcript() == transcript
        assert request.prompt == "Hi"

    def test_embeddings_request(self):
        request = Request.embeddings("hello", model="openai:text-embedding-3-small")
        assert request.kind == "embeddings"
        assert request.inputs == ("hello",)

    def test_embeddings_require_inputs(self):
        with pytest.raises(StepwiseError):
            Request.embeddings([], model="openai:text-embedding-3-small")

    def test_structured_request_keeps_schema(self):
        schema = {"type": "object", "properties": {"name": {"type": "string"}}}
        request = Request.structured("Who?", schema=schema, model="openai:gpt-4o")
        assert request.kind == "structured"
        assert request.schema == schema

    def test_mappings_are_read_only(self):
        options = {"temperature": 0.2}
        request = Request.text(
            "Hi",
            model="openai:gpt-4o-mini",
            tools=[{"type": "function", "function": {"name": "lookup", "parameters": {}}}],
            provider_config={"timeout": 30},
            **options,
        )
        with pytest.raises(TypeError):
            request.options["temperature"] = 1.0  # type: ignore[index]
        with pytest.raises(TypeError):
            request.provider_config["timeout"] = 60  # type: ignore[index]
        with pytest.raises(TypeError):
            request.tools[0]["type"] = "retrieval"  # type: ignore[index]
        assert isinstance(hash(request), int)
