"""/api/config endpoints writing, updating and clearing the configuration cookie."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from interview_api.errors import ConfigurationError
from interview_api.schemas import UserConfigPayload, UserConfigUpdate
from interview_api.utils import responses
from interview_api.utils.auth import (
    clear_config_cookie,
    get_config_summary,
    require_config,
    set_config_cookie,
    validate_config,
)
from interview_api.utils.dates import now_utc, to_iso

bp = Blueprint("config", __name__, url_prefix="/api/config")


def _with_cookie(config, status: int):
    response = jsonify(responses.api_response(True, data=get_config_summary(config)))
    try:
        set_config_cookie(response, config)
    except ConfigurationError as exc:
        current_app.logger.error("Cannot issue configuration cookie: %s", exc)
        return responses.error_response(500, "CONFIGURATION_ERROR", "Server cannot store configuration")
    return response, status


@bp.post("")
def save_config():
    try:
        payload = UserConfigPayload.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return responses.validation_error_response(responses.validation_details(exc), "Invalid configuration")

    config = payload.model_dump()
    config["email"] = str(config["email"])
    config["createdAt"] = to_iso(now_utc())

    current_app.logger.info("Storing configuration for provider %s", config["provider"])
    return _with_cookie(config, 201)


@bp.patch("")
def update_config():
    config, error_response = require_config()
    if error_response is not None:
        return error_response

    try:
        updates = UserConfigUpdate.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return responses.validation_error_response(responses.validation_details(exc), "Invalid configuration")

    # createdAt is kept so updates never extend the 30-day lifetime
    merged = {**config, **updates.model_dump(exclude_none=True)}
    if not validate_config(merged):
        return responses.validation_error_response([], "Invalid configuration")
    return _with_cookie(merged, 200)


@bp.delete("")
def delete_config():
    response = jsonify(responses.api_response(True, data={"message": "Configuration cleared"}))
    clear_config_cookie(response)
    return response, 200
