"""Wrapper utilities around the OpenAI client."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from openai import OpenAI

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4")
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000


def get_openai_client(
    api_key: str, *, timeout: Optional[float] = None, base_url: Optional[str] = None
) -> OpenAI:
    """Instantiate an OpenAI client for a caller-supplied API key.

    Retries are disabled: a failed call surfaces to the caller immediately.
    """
    if not api_key:
        raise RuntimeError("An OpenAI API key is required")
    kwargs: Dict[str, Any] = {"api_key": api_key, "max_retries": 0}
    if timeout is not None:
        kwargs["timeout"] = timeout
    if base_url:
        kwargs["base_url"] = base_url
    return OpenAI(**kwargs)


def create_chat_completion(
    client: OpenAI,
    messages: List[Dict[str, str]],
    *,
    model: Optional[str] = None,
    json_mode: bool = False,
    max_tokens: int = DEFAULT_MAX_TOKENS,
):
    """Invoke the Chat Completions API with shared defaults."""
    kwargs: Dict[str, Any] = {
        "model": model or DEFAULT_MODEL,
        "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
        "temperature": DEFAULT_TEMPERATURE,
        "max_tokens": max_tokens,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    return client.chat.completions.create(**kwargs)
