"""Builders for the JSON envelope every versioned endpoint returns."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from flask import jsonify
from pydantic import ValidationError

from interview_api.utils.dates import now_utc, to_iso

API_VERSION = "v1"


def api_response(
    success: bool,
    data: Any = None,
    error: Optional[Dict[str, Any]] = None,
    **meta: Any,
) -> Dict[str, Any]:
    """Return ``{success, data?, error?, meta}`` with request metadata filled in."""
    body: Dict[str, Any] = {"success": success}
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error

    envelope_meta: Dict[str, Any] = {
        "timestamp": to_iso(now_utc()),
        "requestId": uuid.uuid4().hex,
        "version": API_VERSION,
        "cached": False,
    }
    envelope_meta.update({key: value for key, value in meta.items() if value is not None})
    body["meta"] = envelope_meta
    return body


def error_body(code: str, message: str, details: Any = None) -> Dict[str, Any]:
    """Return the ``error`` member of the envelope."""
    error: Dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return error


def error_response(status: int, code: str, message: str, details: Any = None, **extra: Any):
    """Return a Flask ``(response, status)`` pair describing a failure."""
    body = api_response(False, error=error_body(code, message, details))
    body.update(extra)
    return jsonify(body), status


def validation_details(exc: ValidationError) -> List[Dict[str, str]]:
    """Flatten a pydantic error into JSON-safe ``{field, message}`` items."""
    return [
        {
            "field": ".".join(str(part) for part in item.get("loc", ())),
            "message": item.get("msg", "Invalid value"),
        }
        for item in exc.errors()
    ]


def validation_error_response(details: Any, message: str = "Invalid request parameters"):
    """Return the 400 response used for every request validation failure."""
    return error_response(400, "VALIDATION_ERROR", message, details)
