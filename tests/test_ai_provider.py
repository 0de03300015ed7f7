"""Tests for the AI provider adapters with the network stubbed out."""

from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest
import requests

from interview_api.errors import (
    ConfigurationError,
    ProviderAPIError,
    ProviderConnectionError,
    ProviderResponseError,
)
from interview_api.services import ai_provider, openai_service
from interview_api.services.ai_provider import (
    AnthropicProvider,
    GoogleProvider,
    OpenAIProvider,
    PROVIDER_BASE_URLS,
    create_provider,
    get_provider_config,
    provider_from_config,
    provider_from_env,
)

MESSAGES = [
    {"role": "system", "content": "Be brief."},
    {"role": "user", "content": "Hi"},
    {"role": "assistant", "content": "Hello!"},
    {"role": "user", "content": "Explain heaps."},
]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


@pytest.fixture
def http_calls(monkeypatch):
    """Record outbound ``requests.request`` calls and reply with queued responses."""
    calls = []
    replies = []

    def fake_request(method, url, **kwargs):
        calls.append(SimpleNamespace(method=method, url=url, **kwargs))
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(ai_provider.requests, "request", fake_request)
    return SimpleNamespace(calls=calls, replies=replies)


def test_anthropic_chat_moves_system_prompt(http_calls):
    http_calls.replies.append(
        FakeResponse(
            payload={
                "content": [{"type": "text", "text": "A heap is a tree."}],
                "model": "claude-3-5-sonnet-20241022",
                "usage": {"input_tokens": 12, "output_tokens": 5},
            }
        )
    )

    reply = AnthropicProvider("ak-test", "claude-3-5-sonnet-20241022").chat(MESSAGES)

    call = http_calls.calls[0]
    assert call.url == "https://api.anthropic.com/v1/messages"
    assert call.headers["x-api-key"] == "ak-test"
    assert call.headers["anthropic-version"] == "2023-06-01"
    assert call.json["system"] == "Be brief."
    assert [m["role"] for m in call.json["messages"]] == ["user", "assistant", "user"]
    assert call.json["max_tokens"] == 2000
    assert reply["content"] == "A heap is a tree."
    assert reply["usage"] == {"promptTokens": 12, "completionTokens": 5, "totalTokens": 17}


def test_google_chat_maps_roles_and_json_mode(http_calls):
    http_calls.replies.append(
        FakeResponse(
            payload={
                "candidates": [{"content": {"parts": [{"text": "{}"}]}}],
                "usageMetadata": {"promptTokenCount": 3, "candidatesTokenCount": 1, "totalTokenCount": 4},
            }
        )
    )

    reply = GoogleProvider("g-key", "gemini-1.5-pro").chat(MESSAGES, json_mode=True)

    call = http_calls.calls[0]
    assert call.url.endswith("/models/gemini-1.5-pro:generateContent")
    assert call.params == {"key": "g-key"}
    assert [c["role"] for c in call.json["contents"]] == ["user", "model", "user"]
    assert call.json["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
    assert call.json["generationConfig"]["responseMimeType"] == "application/json"
    assert reply == {
        "content": "{}",
        "model": "gemini-1.5-pro",
        "usage": {"promptTokens": 3, "completionTokens": 1, "totalTokens": 4},
    }


def test_http_error_status_raises_provider_api_error(http_calls):
    http_calls.replies.append(FakeResponse(status_code=401, reason="Unauthorized"))

    with pytest.raises(ProviderAPIError) as excinfo:
        AnthropicProvider("bad", "claude").chat(MESSAGES)

    assert excinfo.value.status == 401
    assert str(excinfo.value) == "Anthropic API error: 401 Unauthorized"


def test_transport_failure_does_not_leak_the_key(http_calls):
    http_calls.replies.append(requests.ConnectionError("https://host/?key=g-secret unreachable"))

    with pytest.raises(ProviderConnectionError) as excinfo:
        GoogleProvider("g-secret", "gemini-1.5-pro").chat(MESSAGES)

    assert "g-secret" not in str(excinfo.value)


@pytest.mark.parametrize(
    "payload",
    [None, {"candidates": []}, {"unexpected": True}],
)
def test_unexpected_bodies_raise_provider_response_error(http_calls, payload):
    http_calls.replies.append(FakeResponse(payload=payload))

    with pytest.raises(ProviderResponseError):
        GoogleProvider("g-key", "gemini-1.5-pro").chat(MESSAGES)


def test_validate_api_key_degrades_to_false(http_calls):
    http_calls.replies.extend(
        [
            FakeResponse(payload={"models": []}),
            FakeResponse(status_code=403, reason="Forbidden"),
            requests.Timeout("slow"),
        ]
    )
    provider = GoogleProvider("g-key", "gemini-1.5-pro")

    assert provider.validate_api_key() is True
    assert provider.validate_api_key() is False
    assert provider.validate_api_key() is False


def _fake_openai_client(create=None, models=None):
    return SimpleNamespace(
        chat=SimpleNamespace(completions=SimpleNamespace(create=create)),
        models=SimpleNamespace(list=models),
    )


def test_openai_chat_uses_json_response_format(monkeypatch):
    seen = {}

    def create(**kwargs):
        seen.update(kwargs)
        return SimpleNamespace(
            model="gpt-4-0613",
            choices=[SimpleNamespace(message=SimpleNamespace(content='{"ok": true}'))],
            usage=SimpleNamespace(prompt_tokens=10, completion_tokens=4, total_tokens=14),
        )

    monkeypatch.setattr(
        openai_service, "get_openai_client", lambda api_key, **kwargs: _fake_openai_client(create=create)
    )

    reply = OpenAIProvider("sk-test", "gpt-4").chat(MESSAGES, json_mode=True)

    assert seen["model"] == "gpt-4"
    assert seen["response_format"] == {"type": "json_object"}
    assert seen["temperature"] == 0.7
    assert reply["content"] == '{"ok": true}'
    assert reply["usage"]["totalTokens"] == 14


def test_openai_status_error_becomes_provider_api_error(monkeypatch):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(429, request=request)

    def create(**kwargs):
        raise openai.RateLimitError("rate limited", response=response, body=None)

    monkeypatch.setattr(
        openai_service, "get_openai_client", lambda api_key, **kwargs: _fake_openai_client(create=create)
    )

    with pytest.raises(ProviderAPIError) as excinfo:
        OpenAIProvider("sk-test", "gpt-4").chat(MESSAGES)

    assert excinfo.value.status == 429
    assert str(excinfo.value).startswith("OpenAI API error: 429")


def test_openai_validate_api_key(monkeypatch):
    def rejected():
        raise openai.OpenAIError("bad key")

    clients = iter([_fake_openai_client(models=lambda: []), _fake_openai_client(models=rejected)])
    monkeypatch.setattr(openai_service, "get_openai_client", lambda api_key, **kwargs: next(clients))
    provider = OpenAIProvider("sk-test", "gpt-4")

    assert provider.validate_api_key() is True
    assert provider.validate_api_key() is False


def test_create_provider_rejects_unknown_names():
    assert isinstance(create_provider("google", "k", "gemini-1.5-pro"), GoogleProvider)
    with pytest.raises(ConfigurationError):
        create_provider("mistral", "k", "m")


def test_provider_from_env_uses_default_model():
    provider = provider_from_env({"AI_PROVIDER": "anthropic", "ANTHROPIC_API_KEY": "ak"})
    assert isinstance(provider, AnthropicProvider)
    assert provider.model == "claude-3-5-sonnet-20241022"


@pytest.mark.parametrize(
    "environ",
    [{}, {"AI_PROVIDER": "openai"}, {"AI_PROVIDER": "cohere", "COHERE_API_KEY": "x"}],
)
def test_provider_from_env_requires_complete_settings(environ):
    with pytest.raises(ConfigurationError):
        provider_from_env(environ)


def test_provider_from_config():
    provider = provider_from_config({"provider": "openai", "apiKey": "sk", "model": "gpt-4o"}, timeout=5)
    assert isinstance(provider, OpenAIProvider)
    assert provider.timeout == 5

    with pytest.raises(ConfigurationError, match="AI provider configuration not found"):
        provider_from_config({})
    with pytest.raises(ConfigurationError, match="API key is required"):
        provider_from_config({"provider": "openai", "model": "gpt-4"})


def test_provider_config_uses_shared_base_urls():
    settings = get_provider_config({"provider": "anthropic", "apiKey": "k", "model": "claude"})
    assert settings == {"baseURL": "https://api.anthropic.com/v1", "apiKey": "k", "model": "claude"}

    with pytest.raises(ConfigurationError, match="Unsupported AI provider"):
        get_provider_config({"provider": "cohere", "apiKey": "k", "model": "m"})


def test_adapters_call_the_configured_base_url():
    for name, base_url in PROVIDER_BASE_URLS.items():
        provider = provider_from_config({"provider": name, "apiKey": "k", "model": "m"})
        assert provider.base_url == base_url
