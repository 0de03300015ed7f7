"""/api/v1/roadmap endpoints generating AI study roadmaps."""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from interview_api.errors import ConfigurationError, ProviderError
from interview_api.routes.health import health_payload
from interview_api.schemas import RoadmapPreferences
from interview_api.services.ai_provider import provider_from_config
from interview_api.services.roadmap_service import RoadmapService
from interview_api.utils import responses
from interview_api.utils.auth import require_own_data
from interview_api.utils.rate_limit import roadmap_limit

bp = Blueprint("roadmap", __name__, url_prefix="/api/v1/roadmap")


def _service() -> RoadmapService:
    return current_app.extensions["roadmap_service"]


def _generate(
    user_id: str,
    config: Dict[str, Any],
    preferences: Optional[Dict[str, Any]],
    force: bool,
    fallback_code: str,
    fallback_message: str,
):
    """Run generation and translate failures into envelope responses."""
    started = time.monotonic()
    try:
        provider = provider_from_config(config, timeout=current_app.config["AI_REQUEST_TIMEOUT_SECONDS"])
        result = _service().generate_roadmap(user_id, provider, preferences, force_regenerate=force)
    except ConfigurationError as exc:
        return responses.error_response(
            400,
            "CONFIGURATION_ERROR",
            str(exc),
            {"action": "Please check your AI provider settings"},
        )
    except ProviderError as exc:
        current_app.logger.warning("Roadmap provider call failed: %s", exc)
        return responses.error_response(
            502,
            "AI_SERVICE_ERROR",
            "Failed to communicate with AI provider",
            {"originalError": str(exc)},
        )
    except Exception as exc:
        current_app.logger.exception("Roadmap generation failed")
        return responses.error_response(500, fallback_code, fallback_message, {"error": str(exc)})

    elapsed_ms = int((time.monotonic() - started) * 1000)
    current_app.logger.info(
        "Roadmap ready in %dms (cached=%s)", elapsed_ms, result.from_cache
    )
    body = responses.api_response(
        True,
        data=result.roadmap,
        cached=result.from_cache,
        cacheExpiry=result.expires_at,
        aiProvider=config["provider"],
        generationTimeMs=elapsed_ms,
    )
    return jsonify(body), 200


@bp.get("/health")
def roadmap_health():
    return jsonify(responses.api_response(True, data=health_payload("roadmap-api"))), 200


@bp.get("/<user_id>")
@roadmap_limit
def get_roadmap(user_id: str):
    config, error_response = require_own_data(user_id, "access your own roadmap")
    if error_response is not None:
        return error_response

    args = request.args
    try:
        preferences = RoadmapPreferences(
            targetRole=args.get("targetRole") or None,
            timelineToInterview=args.get("timeline") or None,
            preferredDifficulty=args.get("difficulty") or "gradual",
        )
    except ValidationError as exc:
        return responses.validation_error_response(responses.validation_details(exc))

    return _generate(
        user_id,
        config,
        preferences.model_dump(exclude_none=True),
        args.get("regenerate") == "true",
        "INTERNAL_ERROR",
        "Failed to generate roadmap",
    )


@bp.post("/<user_id>/regenerate")
@roadmap_limit
def regenerate_roadmap(user_id: str):
    config, error_response = require_own_data(user_id, "regenerate your own roadmap")
    if error_response is not None:
        return error_response

    try:
        preferences = RoadmapPreferences.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return responses.validation_error_response(responses.validation_details(exc))

    return _generate(
        user_id,
        config,
        preferences.model_dump(exclude_none=True) or None,
        True,
        "REGENERATION_ERROR",
        "Failed to regenerate roadmap",
    )


@bp.delete("/<user_id>/cache")
def clear_roadmap_cache(user_id: str):
    _config, error_response = require_own_data(user_id, "clear your own roadmap cache")
    if error_response is not None:
        return error_response

    _service().clear_cache(user_id)
    current_app.logger.info("Cleared cached roadmap")
    return jsonify(responses.api_response(True, data={"message": "Roadmap cache cleared"})), 200
