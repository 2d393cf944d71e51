"""Reasoning provider dispatch.

A configured ``AIProvider`` maps to exactly one ``ChatModel`` implementation
through an exhaustive ``match`` in ``create_model``; adding a provider means
adding an enum member and a case here. All providers speak their vendor's
REST API through the injectable ``HttpClient``.

Credentials are passed in explicitly (``ProviderSettings.api_key``); this
module never reads the process environment. A missing key is reported by
``generate`` on first use, not at construction.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol, assert_never

from forgewright.ai.errors import AIError
from forgewright.core.config import AIProvider
from forgewright.core.result import Err, Ok, Result
from forgewright.core.structured import as_obj_list, as_str_dict, get_table
from forgewright.net.http import HttpClient, HttpError

__all__ = [
    "DEFAULT_MODELS",
    "AnthropicModel",
    "ChatModel",
    "GoogleModel",
    "OllamaModel",
    "OpenAIModel",
    "ProviderSettings",
    "api_key_env_var",
    "create_model",
    "resolve_api_key",
]

DEFAULT_MODELS: dict[AIProvider, str] = {
    AIProvider.ANTHROPIC: "claude-sonnet-4-20250514",
    AIProvider.OPENAI: "gpt-5.2",
    AIProvider.GOOGLE: "gemini-2.0-flash-exp",
    AIProvider.OLLAMA: "llama3.2",
}

_API_KEY_ENV_VARS: dict[AIProvider, str | None] = {
    AIProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    AIProvider.OPENAI: "OPENAI_API_KEY",
    AIProvider.GOOGLE: "GOOGLE_API_KEY",
    AIProvider.OLLAMA: None,
}

OLLAMA_BASE_URL_ENV_VAR = "OLLAMA_BASE_URL"

_ANTHROPIC_URL = "https://api.anthropic.com/v1"
_ANTHROPIC_VERSION = "2023-06-01"
_OPENAI_URL = "https://api.openai.com/v1"
_GOOGLE_URL = "https://generativelanguage.googleapis.com/v1beta"
_OLLAMA_URL = "http://127.0.0.1:11434"
_MAX_OUTPUT_TOKENS = 4096


class ChatModel(Protocol):
    """Uniform "callable model" capability."""

    @property
    def name(self) -> str: ...

    def generate(
        self,
        system: str,
        prompt: str,
        *,
        json_output: bool = False,
    ) -> Result[str, AIError]:
        """Send one system+user exchange and return the reply text.

        Args:
            json_output: Ask the provider for a JSON object reply when it supports it
        """
        ...


@dataclass(frozen=True, slots=True)
class ProviderSettings:
    provider: AIProvider
    model: str | None = None
    api_key: str | None = None
    base_url: str | None = None


def api_key_env_var(provider: AIProvider) -> str | None:
    """Environment variable holding the provider key (None if keyless)."""
    return _API_KEY_ENV_VARS[provider]


def resolve_api_key(provider: AIProvider, environ: Mapping[str, str]) -> str | None:
    var = api_key_env_var(provider)
    if var is None:
        return None
    return environ.get(var) or None


def _missing_key(provider: AIProvider) -> AIError:
    var = api_key_env_var(provider)
    return AIError(
        kind="missing_credential",
        message=f"missing API key for {provider.value}",
        hint=f"Set the {var} environment variable." if var else None,
    )


def _request_failed(provider: AIProvider, error: HttpError) -> AIError:
    return AIError(
        kind="request_failed",
        message=f"{provider.value}: {error.detail}",
        status=error.status,
    )


def _malformed(provider: AIProvider, what: str) -> AIError:
    return AIError(kind="invalid_response", message=f"{provider.value}: malformed reply ({what})")


def _first_text(items: object, key: str = "text") -> str | None:
    for item in as_obj_list(items) or []:
        d = as_str_dict(item)
        if d is None:
            continue
        text = d.get(key)
        if isinstance(text, str):
            return text
    return None


@dataclass(frozen=True, slots=True)
class AnthropicModel:
    model: str
    api_key: str | None
    http: HttpClient
    base_url: str = _ANTHROPIC_URL

    @property
    def name(self) -> str:
        return f"anthropic/{self.model}"

    def generate(
        self,
        system: str,
        prompt: str,
        *,
        json_output: bool = False,
    ) -> Result[str, AIError]:
        if not self.api_key:
            return Err(_missing_key(AIProvider.ANTHROPIC))

        user = prompt
        if json_output:
            user += "\n\nRespond with a single JSON object and nothing else."
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": _MAX_OUTPUT_TOKENS,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }
        headers = {"x-api-key": self.api_key, "anthropic-version": _ANTHROPIC_VERSION}

        url = f"{self.base_url.rstrip('/')}/messages"
        result = self.http.post_json(url, payload, headers=headers)
        if isinstance(result, Err):
            return Err(_request_failed(AIProvider.ANTHROPIC, result.error))

        text = _first_text(result.value.get("content"))
        if text is None:
            return Err(_malformed(AIProvider.ANTHROPIC, "no text content"))
        return Ok(text)


@dataclass(frozen=True, slots=True)
class OpenAIModel:
    model: str
    api_key: str | None
    http: HttpClient
    base_url: str = _OPENAI_URL

    @property
    def name(self) -> str:
        return f"openai/{self.model}"

    def generate(
        self,
        system: str,
        prompt: str,
        *,
        json_output: bool = False,
    ) -> Result[str, AIError]:
        if not self.api_key:
            return Err(_missing_key(AIProvider.OPENAI))

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }
        if json_output:
            payload["response_format"] = {"type": "json_object"}
        headers = {"Authorization": f"Bearer {self.api_key}"}

        url = f"{self.base_url.rstrip('/')}/chat/completions"
        result = self.http.post_json(url, payload, headers=headers)
        if isinstance(result, Err):
            return Err(_request_failed(AIProvider.OPENAI, result.error))

        for choice in as_obj_list(result.value.get("choices")) or []:
            d = as_str_dict(choice)
            message = get_table(d, "message") if d is not None else None
            content = message.get("content") if message is not None else None
            if isinstance(content, str):
                return Ok(content)
        return Err(_malformed(AIProvider.OPENAI, "no message content"))


@dataclass(frozen=True, slots=True)
class GoogleModel:
    model: str
    api_key: str | None
    http: HttpClient
    base_url: str = _GOOGLE_URL

    @property
    def name(self) -> str:
        return f"google/{self.model}"

    def generate(
        self,
        system: str,
        prompt: str,
        *,
        json_output: bool = False,
    ) -> Result[str, AIError]:
        if not self.api_key:
            return Err(_missing_key(AIProvider.GOOGLE))

        payload: dict[str, Any] = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if json_output:
            payload["generationConfig"] = {"responseMimeType": "application/json"}
        headers = {"x-goog-api-key": self.api_key}

        url = f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"
        result = self.http.post_json(url, payload, headers=headers)
        if isinstance(result, Err):
            return Err(_request_failed(AIProvider.GOOGLE, result.error))

        for candidate in as_obj_list(result.value.get("candidates")) or []:
            d = as_str_dict(candidate)
            content = get_table(d, "content") if d is not None else None
            text = _first_text(content.get("parts")) if content is not None else None
            if text is not None:
                return Ok(text)
        return Err(_malformed(AIProvider.GOOGLE, "no candidate text"))


@dataclass(frozen=True, slots=True)
class OllamaModel:
    model: str
    http: HttpClient
    base_url: str = _OLLAMA_URL

    @property
    def name(self) -> str:
        return f"ollama/{self.model}"

    def generate(
        self,
        system: str,
        prompt: str,
        *,
        json_output: bool = False,
    ) -> Result[str, AIError]:
        payload: dict[str, Any] = {
            "model": self.model,
            "stream": False,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }
        if json_output:
            payload["format"] = "json"

        url = f"{self.base_url.rstrip('/')}/api/chat"
        result = self.http.post_json(url, payload)
        if isinstance(result, Err):
            return Err(_request_failed(AIProvider.OLLAMA, result.error))

        message = get_table(result.value, "message")
        content = message.get("content") if message is not None else None
        if not isinstance(content, str):
            return Err(_malformed(AIProvider.OLLAMA, "no message content"))
        return Ok(content)


def create_model(settings: ProviderSettings, http: HttpClient) -> ChatModel:
    """Build the ChatModel for the configured provider."""
    model = settings.model or DEFAULT_MODELS[settings.provider]
    match settings.provider:
        case AIProvider.ANTHROPIC:
            return AnthropicModel(
                model=model,
                api_key=settings.api_key,
                http=http,
                base_url=settings.base_url or _ANTHROPIC_URL,
            )
        case AIProvider.OPENAI:
            return OpenAIModel(
                model=model,
                api_key=settings.api_key,
                http=http,
                base_url=settings.base_url or _OPENAI_URL,
            )
        case AIProvider.GOOGLE:
            return GoogleModel(
                model=model,
                api_key=settings.api_key,
                http=http,
                base_url=settings.base_url or _GOOGLE_URL,
            )
        case AIProvider.OLLAMA:
            return OllamaModel(model=model, http=http, base_url=settings.base_url or _OLLAMA_URL)
        case _:
            assert_never(settings.provider)
