"""Chat-completion adapters for the supported AI providers.

Every adapter exposes the same two calls: ``chat`` returning
``{content, model, usage}`` and ``validate_api_key`` returning a bool.
Calls are made once; there is no retry.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Mapping, Optional

import requests
from openai import APIConnectionError, APIStatusError, OpenAIError

from interview_api.errors import (
    ConfigurationError,
    ProviderAPIError,
    ProviderConnectionError,
    ProviderResponseError,
)
from interview_api.services import openai_service

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0
MAX_TOKENS = 2000
TEMPERATURE = 0.7

ANTHROPIC_VERSION = "2023-06-01"

PROVIDER_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com/v1",
    "google": "https://generativelanguage.googleapis.com/v1beta",
}

DEFAULT_MODELS = {
    "openai": "gpt-4",
    "anthropic": "claude-3-5-sonnet-20241022",
    "google": "gemini-1.5-pro",
}

VALID_ROLES = ("system", "user", "assistant")

Message = Dict[str, str]


def _usage(prompt: Any, completion: Any, total: Any = None) -> Optional[Dict[str, int]]:
    if prompt is None or completion is None:
        return None
    return {
        "promptTokens": int(prompt),
        "completionTokens": int(completion),
        "totalTokens": int(total) if total is not None else int(prompt) + int(completion),
    }


def split_system_message(messages: List[Message]):
    """Return ``(system_text, other_messages)``; the first system message wins."""
    system = next((m["content"] for m in messages if m["role"] == "system"), None)
    return system, [m for m in messages if m["role"] != "system"]


class AIProvider:
    """Base adapter holding credentials and the shared HTTP plumbing."""

    name = ""
    label = ""

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        timeout: Optional[float] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url or PROVIDER_BASE_URLS[self.name]
        self.timeout = timeout if timeout is not None else DEFAULT_TIMEOUT_SECONDS

    def chat(self, messages: List[Message], *, json_mode: bool = False) -> Dict[str, Any]:
        raise NotImplementedError

    def validate_api_key(self) -> bool:
        raise NotImplementedError

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            # The exception text may carry the URL, which holds the Google key.
            raise ProviderConnectionError(
                self.label, f"{self.label} request failed: {type(exc).__name__}"
            ) from exc

        if not response.ok:
            _LOGGER.warning("%s returned HTTP %s", self.label, response.status_code)
            raise ProviderAPIError(self.label, response.status_code, response.reason)

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderResponseError(self.label, f"{self.label} returned a non-JSON body") from exc

    def _responds_ok(self, method: str, url: str, **kwargs: Any) -> bool:
        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException:
            _LOGGER.info("%s key validation could not reach the API", self.label)
            return False
        return response.ok

    def __repr__(self) -> str:
        return f"<{type(self).__name__} model={self.model!r}>"


class OpenAIProvider(AIProvider):
    name = "openai"
    label = "OpenAI"

    def chat(self, messages: List[Message], *, json_mode: bool = False) -> Dict[str, Any]:
        client = openai_service.get_openai_client(
            self.api_key, timeout=self.timeout, base_url=self.base_url
        )
        try:
            completion = openai_service.create_chat_completion(
                client, messages, model=self.model, json_mode=json_mode, max_tokens=MAX_TOKENS
            )
        except APIStatusError as exc:
            reason = getattr(exc.response, "reason_phrase", "") if exc.response is not None else ""
            raise ProviderAPIError(self.label, exc.status_code, reason) from exc
        except APIConnectionError as exc:
            raise ProviderConnectionError(
                self.label, f"{self.label} request failed: {type(exc).__name__}"
            ) from exc

        if not completion.choices:
            raise ProviderResponseError(self.label, "OpenAI returned no choices")

        usage = completion.usage
        return {
            "content": completion.choices[0].message.content or "",
            "model": completion.model,
            "usage": _usage(usage.prompt_tokens, usage.completion_tokens, usage.total_tokens)
            if usage
            else None,
        }

    def validate_api_key(self) -> bool:
        client = openai_service.get_openai_client(
            self.api_key, timeout=self.timeout, base_url=self.base_url
        )
        try:
            client.models.list()
        except OpenAIError:
            return False
        return True


class AnthropicProvider(AIProvider):
    name = "anthropic"
    label = "Anthropic"

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def chat(self, messages: List[Message], *, json_mode: bool = False) -> Dict[str, Any]:
        system, conversation = split_system_message(messages)
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
            "messages": [{"role": m["role"], "content": m["content"]} for m in conversation],
        }
        if system:
            payload["system"] = system

        data = self._request("POST", f"{self.base_url}/messages", json=payload, headers=self._headers())

        try:
            content = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderResponseError(self.label, "Anthropic response had no text content") from exc

        usage = data.get("usage") or {}
        return {
            "content": content,
            "model": data.get("model", self.model),
            "usage": _usage(usage.get("input_tokens"), usage.get("output_tokens")),
        }

    def validate_api_key(self) -> bool:
        payload = {
            "model": self.model,
            "max_tokens": 1,
            "messages": [{"role": "user", "content": "test"}],
        }
        return self._responds_ok("POST", f"{self.base_url}/messages", json=payload, headers=self._headers())


class GoogleProvider(AIProvider):
    name = "google"
    label = "Google"

    def chat(self, messages: List[Message], *, json_mode: bool = False) -> Dict[str, Any]:
        system, conversation = split_system_message(messages)
        generation_config: Dict[str, Any] = {
            "temperature": TEMPERATURE,
            "maxOutputTokens": MAX_TOKENS,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"

        payload: Dict[str, Any] = {
            "contents": [
                {
                    "role": "model" if m["role"] == "assistant" else "user",
                    "parts": [{"text": m["content"]}],
                }
                for m in conversation
            ],
            "generationConfig": generation_config,
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}

        data = self._request(
            "POST",
            f"{self.base_url}/models/{self.model}:generateContent",
            json=payload,
            params={"key": self.api_key},
            headers={"Content-Type": "application/json"},
        )

        try:
            content = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderResponseError(self.label, "Google response had no candidate text") from exc

        usage = data.get("usageMetadata") or {}
        return {
            "content": content,
            "model": self.model,
            "usage": _usage(
                usage.get("promptTokenCount"),
                usage.get("candidatesTokenCount"),
                usage.get("totalTokenCount"),
            ),
        }

    def validate_api_key(self) -> bool:
        return self._responds_ok("GET", f"{self.base_url}/models", params={"key": self.api_key})


PROVIDERS = {
    OpenAIProvider.name: OpenAIProvider,
    AnthropicProvider.name: AnthropicProvider,
    GoogleProvider.name: GoogleProvider,
}


def create_provider(
    provider: str,
    api_key: str,
    model: str,
    *,
    timeout: Optional[float] = None,
    base_url: Optional[str] = None,
) -> AIProvider:
    """Instantiate the adapter registered for ``provider``."""
    try:
        provider_cls = PROVIDERS[provider]
    except KeyError:
        raise ConfigurationError(f"Unsupported AI provider: {provider}") from None
    return provider_cls(api_key, model, timeout=timeout, base_url=base_url)


def provider_from_env(
    environ: Optional[Mapping[str, str]] = None, *, timeout: Optional[float] = None
) -> AIProvider:
    """Build the server-wide provider from ``AI_PROVIDER`` and its key/model variables."""
    env = os.environ if environ is None else environ
    provider = env.get("AI_PROVIDER")
    if not provider:
        raise ConfigurationError("AI_PROVIDER environment variable is required")
    if provider not in DEFAULT_MODELS:
        raise ConfigurationError(f"Unsupported AI provider: {provider}")

    prefix = provider.upper()
    api_key = env.get(f"{prefix}_API_KEY")
    if not api_key:
        raise ConfigurationError(f"API key is required for {provider} provider")
    model = env.get(f"{prefix}_MODEL") or DEFAULT_MODELS[provider]
    return create_provider(provider, api_key, model, timeout=timeout)


def get_provider_config(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Return the base URL, key and model a cookie configuration points at."""
    provider = config.get("provider") if config else None
    if not provider:
        raise ConfigurationError("AI provider configuration not found. Please complete setup.")
    if provider not in PROVIDER_BASE_URLS:
        raise ConfigurationError(f"Unsupported AI provider: {provider}")
    if not config.get("apiKey"):
        raise ConfigurationError(f"API key is required for {provider} provider")
    if not config.get("model"):
        raise ConfigurationError(f"Model is required for {provider} provider")
    return {
        "baseURL": PROVIDER_BASE_URLS[provider],
        "apiKey": config["apiKey"],
        "model": config["model"],
    }


def provider_from_config(config: Mapping[str, Any], *, timeout: Optional[float] = None) -> AIProvider:
    """Build a provider from a decrypted configuration cookie."""
    settings = get_provider_config(config)
    return create_provider(
        config["provider"],
        settings["apiKey"],
        settings["model"],
        timeout=timeout,
        base_url=settings["baseURL"],
    )
