"""Per-client request limits for the progress and roadmap blueprints."""

from __future__ import annotations

from flask import Flask, current_app, request
from flask_limiter import Limiter
from flask_limiter.errors import RateLimitExceeded
from flask_limiter.util import get_remote_address

from interview_api.utils.responses import error_response

limiter = Limiter(key_func=get_remote_address, headers_enabled=True)


def _limit_from_config(setting: str) -> str:
    count = current_app.config[setting]
    window = current_app.config["RATE_LIMIT_WINDOW_SECONDS"]
    return f"{count} per {window} seconds"


def roadmap_limit_value() -> str:
    return _limit_from_config("ROADMAP_RATE_LIMIT")


def progress_limit_value() -> str:
    return _limit_from_config("PROGRESS_RATE_LIMIT")


# One counter per client across every route in the scope
roadmap_limit = limiter.shared_limit(roadmap_limit_value, scope="roadmap")
progress_limit = limiter.shared_limit(progress_limit_value, scope="progress")


def register_rate_limits(app: Flask) -> None:
    """Bind the limiter to ``app`` and answer breaches with the error envelope."""
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)
    app.config.setdefault("RATELIMIT_HEADER_LIMIT", "RateLimit-Limit")
    app.config.setdefault("RATELIMIT_HEADER_REMAINING", "RateLimit-Remaining")
    app.config.setdefault("RATELIMIT_HEADER_RESET", "RateLimit-Reset")
    limiter.init_app(app)

    @app.errorhandler(RateLimitExceeded)
    def _rate_limit_exceeded(exc: RateLimitExceeded):
        current_app.logger.warning("Rate limit %s exceeded for %s", exc.description, request.remote_addr)
        window_minutes = max(1, round(current_app.config["RATE_LIMIT_WINDOW_SECONDS"] / 60))
        return error_response(
            429,
            "RATE_LIMIT_EXCEEDED",
            "Too many requests. Please try again later.",
            {"retryAfter": f"{window_minutes} minutes"},
        )
