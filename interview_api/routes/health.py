"""Liveness endpoint."""

from __future__ import annotations

import time
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify

from interview_api.utils.dates import now_utc, to_iso

bp = Blueprint("health", __name__)

SERVICE_NAME = "ai-interview-prep-api"


def health_payload(service: str = SERVICE_NAME) -> Dict[str, Any]:
    """Status document shared by every health endpoint."""
    started_at = current_app.extensions.get("started_at", time.monotonic())
    return {
        "status": "healthy",
        "service": service,
        "uptime": round(time.monotonic() - started_at, 3),
        "timestamp": to_iso(now_utc()),
        "version": "v1",
    }


@bp.get("/health")
def health():
    return jsonify(health_payload()), 200
