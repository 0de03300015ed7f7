"""/api/ai endpoints proxying chat completions to the configured provider."""

from __future__ import annotations

import os

from flask import Blueprint, current_app, g, jsonify, request
from pydantic import ValidationError

from interview_api.errors import ConfigurationError, ProviderError
from interview_api.schemas import ChatRequest
from interview_api.services.ai_provider import provider_from_config, provider_from_env
from interview_api.utils.auth import get_config_summary, require_config
from interview_api.utils.responses import validation_details

bp = Blueprint("ai", __name__, url_prefix="/api/ai")


def _timeout() -> float:
    return current_app.config["AI_REQUEST_TIMEOUT_SECONDS"]


@bp.post("/chat")
def chat():
    config, error_response = require_config()
    if error_response is not None:
        return error_response

    try:
        payload = ChatRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return jsonify(
            success=False,
            error="Messages array is required",
            details=validation_details(exc),
        ), 400

    messages = [message.model_dump() for message in payload.messages]
    try:
        provider = provider_from_config(config, timeout=_timeout())
        reply = provider.chat(messages)
    except ConfigurationError as exc:
        return jsonify(success=False, error="Invalid configuration", details=str(exc)), 400
    except ProviderError as exc:
        current_app.logger.warning("AI chat failed: %s", exc)
        return jsonify(success=False, error="Failed to process AI request", details=str(exc)), 502
    except Exception as exc:
        current_app.logger.exception("Unexpected AI chat failure")
        return jsonify(success=False, error="Failed to process AI request", details=str(exc)), 500

    return jsonify(
        success=True,
        response=reply["content"],
        model=reply["model"],
        usage=reply["usage"],
    ), 200


@bp.get("/validate")
def validate():
    try:
        provider = provider_from_env(timeout=_timeout())
    except ConfigurationError as exc:
        current_app.logger.warning("Environment AI configuration is incomplete: %s", exc)
        return jsonify(
            success=False,
            error="Failed to validate AI configuration",
            details=str(exc),
        ), 500

    return jsonify(
        success=True,
        valid=provider.validate_api_key(),
        provider=provider.name,
        model=provider.model,
    ), 200


@bp.get("/status")
def status():
    config = g.get("user_config")
    if g.get("has_valid_config") and config:
        return jsonify(success=True, configured=True, source="cookie", **get_config_summary(config)), 200

    provider = os.getenv("AI_PROVIDER")
    prefix = (provider or "").upper()
    return jsonify(
        success=True,
        provider=provider,
        model=os.getenv(f"{prefix}_MODEL"),
        configured=bool(provider) and bool(os.getenv(f"{prefix}_API_KEY")),
        source="environment",
        environment=current_app.config["NODE_ENV"],
    ), 200


@bp.get("/validate-cookie")
def validate_cookie():
    config = g.get("user_config")
    if not g.get("has_valid_config") or not config:
        return jsonify(success=False, error="No valid configuration found", configured=False), 401

    try:
        provider_from_config(config, timeout=_timeout())
    except ConfigurationError as exc:
        current_app.logger.warning("Cookie configuration cannot build a provider: %s", exc)
        return jsonify(success=False, error="Invalid configuration", details=str(exc)), 400

    return jsonify(success=True, valid=True, configured=True, **get_config_summary(config)), 200
