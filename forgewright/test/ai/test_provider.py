"""Tests for ai/provider.py."""

from __future__ import annotations

import pytest

from forgewright.ai.provider import (
    DEFAULT_MODELS,
    AnthropicModel,
    GoogleModel,
    OllamaModel,
    OpenAIModel,
    ProviderSettings,
    api_key_env_var,
    create_model,
    resolve_api_key,
)
from forgewright.core.config import AIProvider
from forgewright.core.result import Err, Ok
from forgewright.net.http import HttpError, MockHttpClient


class TestCreateModel:
    @pytest.mark.parametrize(
        ("provider", "cls"),
        [
            (AIProvider.ANTHROPIC, AnthropicModel),
            (AIProvider.OPENAI, OpenAIModel),
            (AIProvider.GOOGLE, GoogleModel),
            (AIProvider.OLLAMA, OllamaModel),
        ],
    )
    def test_every_provider_maps_to_a_model(self, provider: AIProvider, cls: type) -> None:
        model = create_model(ProviderSettings(provider=provider), MockHttpClient())
        assert isinstance(model, cls)
        assert model.name == f"{provider.value}/{DEFAULT_MODELS[provider]}"

    def test_model_override(self) -> None:
        model = create_model(
            ProviderSettings(provider=AIProvider.OPENAI, model="gpt-test"), MockHttpClient()
        )
        assert model.name == "openai/gpt-test"


class TestCredentials:
    def test_env_vars(self) -> None:
        assert api_key_env_var(AIProvider.ANTHROPIC) == "ANTHROPIC_API_KEY"
        assert api_key_env_var(AIProvider.OLLAMA) is None

    def test_resolve_from_explicit_mapping(self) -> None:
        environ = {"OPENAI_API_KEY": "sk-test", "GOOGLE_API_KEY": ""}
        assert resolve_api_key(AIProvider.OPENAI, environ) == "sk-test"
        assert resolve_api_key(AIProvider.GOOGLE, environ) is None
        assert resolve_api_key(AIProvider.OLLAMA, environ) is None

    def test_missing_key_reported_on_first_use(self) -> None:
        http = MockHttpClient()
        model = create_model(ProviderSettings(provider=AIProvider.ANTHROPIC), http)

        result = model.generate("system", "prompt")

        assert isinstance(result, Err)
        assert result.error.kind == "missing_credential"
        assert result.error.hint is not None
        assert "ANTHROPIC_API_KEY" in result.error.hint
        assert http.requests == []


class TestAnthropic:
    URL = "https://api.anthropic.com/v1/messages"

    def test_generate(self) -> None:
        http = MockHttpClient()
        http.set_json("POST", self.URL, {"content": [{"type": "text", "text": "hello"}]})
        model = AnthropicModel(model="claude-x", api_key="key", http=http)

        assert model.generate("sys", "hi", json_output=True) == Ok("hello")

        request = http.requests[0]
        assert request.headers["x-api-key"] == "key"
        assert request.payload is not None
        assert request.payload["system"] == "sys"
        assert "JSON" in request.payload["messages"][0]["content"]

    def test_http_failure_is_request_failed(self) -> None:
        http = MockHttpClient()
        http.set_json("POST", self.URL, HttpError(url=self.URL, status=529, message="Overloaded"))
        model = AnthropicModel(model="claude-x", api_key="key", http=http)

        result = model.generate("sys", "hi")

        assert isinstance(result, Err)
        assert result.error.kind == "request_failed"
        assert "Overloaded" in result.error.message
        assert result.error.status == 529
        assert self.URL not in result.error.message

    def test_reply_without_text_is_invalid(self) -> None:
        http = MockHttpClient()
        http.set_json("POST", self.URL, {"content": []})
        model = AnthropicModel(model="claude-x", api_key="key", http=http)

        result = model.generate("sys", "hi")

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_response"


class TestOpenAI:
    def test_generate_requests_json_object(self) -> None:
        url = "https://api.openai.com/v1/chat/completions"
        http = MockHttpClient()
        http.set_json("POST", url, {"choices": [{"message": {"content": "{}"}}]})
        model = OpenAIModel(model="gpt-x", api_key="sk", http=http)

        assert model.generate("sys", "hi", json_output=True) == Ok("{}")

        request = http.requests[0]
        assert request.headers["Authorization"] == "Bearer sk"
        assert request.payload is not None
        assert request.payload["response_format"] == {"type": "json_object"}


class TestGoogle:
    def test_generate(self) -> None:
        url = "https://generativelanguage.googleapis.com/v1beta/models/gemini-x:generateContent"
        http = MockHttpClient()
        http.set_json(
            "POST", url, {"candidates": [{"content": {"parts": [{"text": "bonjour"}]}}]}
        )
        model = GoogleModel(model="gemini-x", api_key="g", http=http)

        assert model.generate("sys", "hi") == Ok("bonjour")
        assert http.requests[0].headers["x-goog-api-key"] == "g"


class TestOllama:
    def test_generate_without_key(self) -> None:
        http = MockHttpClient()
        http.set_json("POST", "http://gpu-box:11434/api/chat", {"message": {"content": "ok"}})
        model = create_model(
            ProviderSettings(provider=AIProvider.OLLAMA, base_url="http://gpu-box:11434/"), http
        )

        assert model.generate("sys", "hi", json_output=True) == Ok("ok")
        payload = http.requests[0].payload
        assert payload is not None
        assert payload["stream"] is False
        assert payload["format"] == "json"
