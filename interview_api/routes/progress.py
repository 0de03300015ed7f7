"""/api/v1/progress endpoints serving mock practice statistics."""

from __future__ import annotations

import json

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError
from werkzeug.http import generate_etag

from interview_api.routes.health import health_payload
from interview_api.schemas import DifficultyQuery, ProblemSearchQuery, RecommendationQuery, SubmissionPayload
from interview_api.services.progress_service import MockLeetCodeService
from interview_api.utils import responses
from interview_api.utils.auth import require_config, require_own_data
from interview_api.utils.dates import to_iso
from interview_api.utils.rate_limit import progress_limit

bp = Blueprint("progress", __name__, url_prefix="/api/v1/progress")

MAX_NAME_LENGTH = 50


def _service() -> MockLeetCodeService:
    return current_app.extensions["progress_service"]


def _cached(body, cache_control: str):
    """JSON response with caching headers, answering 304 when the data is unchanged."""
    response = jsonify(body)
    response.headers["Cache-Control"] = cache_control
    # meta carries a timestamp and request id, so only data feeds the tag
    data = json.dumps(body.get("data"), sort_keys=True, default=str)
    response.set_etag(generate_etag(data.encode("utf-8")))
    return response.make_conditional(request)


def _invalid_name(field: str, value: str):
    if 1 <= len(value) <= MAX_NAME_LENGTH:
        return None
    return responses.validation_error_response(
        [{"field": field, "message": f"Valid {field} name required"}]
    )


@bp.get("/health")
@progress_limit
def progress_health():
    return jsonify(responses.api_response(True, data=health_payload("progress-api"))), 200


@bp.get("/metrics")
@progress_limit
def metrics():
    _config, error_response = require_config()
    if error_response is not None:
        return error_response

    data = {
        "service": "progress-api",
        "status": "operational",
        "catalogSize": len(_service().problems),
    }
    return jsonify(responses.api_response(True, data=data)), 200


@bp.get("/<user_id>")
@progress_limit
def get_progress(user_id: str):
    _config, error_response = require_own_data(user_id, "access your own progress data")
    if error_response is not None:
        return error_response

    current_app.logger.info("Fetching progress data")
    progress = _service().get_user_progress(user_id)
    return _cached(responses.api_response(True, data=progress), "private, max-age=300")


@bp.post("/<user_id>/submissions")
@progress_limit
def add_submission(user_id: str):
    _config, error_response = require_own_data(user_id, "update your own progress data")
    if error_response is not None:
        return error_response

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return responses.validation_error_response([], "Submission body must be a JSON object")
    try:
        payload = SubmissionPayload.model_validate(body)
    except ValidationError as exc:
        return responses.validation_error_response(responses.validation_details(exc))

    fields = payload.model_dump()
    fields["submissionTime"] = to_iso(payload.submissionTime)

    service = _service()
    submission = service.build_submission(fields)
    service.update_user_progress(user_id, submission)
    current_app.logger.info("Recorded submission for problem %s", submission["problemId"])

    data = {"submissionId": submission["submissionId"], "message": "Submission recorded successfully"}
    return jsonify(responses.api_response(True, data=data)), 201


@bp.get("/<user_id>/recommendations")
@progress_limit
def recommendations(user_id: str):
    _config, error_response = require_own_data(user_id, "access your own recommendations")
    if error_response is not None:
        return error_response

    try:
        query = RecommendationQuery.model_validate(request.args.to_dict())
    except ValidationError as exc:
        return responses.validation_error_response(responses.validation_details(exc))

    items = _service().get_recommendations(user_id, query.count)
    return _cached(responses.api_response(True, data=items), "private, max-age=600")


@bp.get("/problems/topic/<topic>")
@progress_limit
def problems_by_topic(topic: str):
    _config, error_response = require_config()
    if error_response is not None:
        return error_response

    invalid = _invalid_name("topic", topic)
    if invalid is not None:
        return invalid
    try:
        query = DifficultyQuery.model_validate(request.args.to_dict())
    except ValidationError as exc:
        return responses.validation_error_response(responses.validation_details(exc))

    problems = _service().get_problems_by_topic(topic, query.difficulty)
    return _cached(responses.api_response(True, data=problems), "public, max-age=3600")


@bp.get("/problems/company/<company>")
@progress_limit
def problems_by_company(company: str):
    _config, error_response = require_config()
    if error_response is not None:
        return error_response

    invalid = _invalid_name("company", company)
    if invalid is not None:
        return invalid
    try:
        query = DifficultyQuery.model_validate(request.args.to_dict())
    except ValidationError as exc:
        return responses.validation_error_response(responses.validation_details(exc))

    problems = _service().get_problems_by_company(company, query.difficulty)
    return _cached(responses.api_response(True, data=problems), "public, max-age=3600")


@bp.get("/problems/search")
@progress_limit
def search_problems():
    _config, error_response = require_config()
    if error_response is not None:
        return error_response

    try:
        query = ProblemSearchQuery.model_validate(request.args.to_dict())
    except ValidationError as exc:
        return responses.validation_error_response(responses.validation_details(exc))

    results = _service().search_problems(query.q, query.filters())
    return _cached(responses.api_response(True, data=results), "public, max-age=1800")
