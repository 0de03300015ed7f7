"""Flask application setup and blueprint wiring."""

from __future__ import annotations

import os
import time
from typing import Any, Mapping, Optional

from flask import Flask, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from interview_api import database
from interview_api.routes import register_routes
from interview_api.services.mongo_store import MongoRoadmapStore, MongoSubmissionStore
from interview_api.services.progress_service import DEFAULT_PROBLEM_COUNT, MockLeetCodeService
from interview_api.services.roadmap_service import RoadmapService
from interview_api.storage import MemoryRoadmapStore, MemorySubmissionStore
from interview_api.utils.auth import register_config_loader
from interview_api.utils.rate_limit import register_rate_limits
from interview_api.utils.responses import error_response


def _settings_from_env() -> dict:
    return {
        "PORT": int(os.getenv("PORT", "5050")),
        "CORS_ORIGIN": os.getenv("CORS_ORIGIN", "http://localhost:3000"),
        "NODE_ENV": os.getenv("NODE_ENV", "development"),
        "CONFIG_ENCRYPTION_KEY": os.getenv("CONFIG_ENCRYPTION_KEY"),
        "AI_REQUEST_TIMEOUT_SECONDS": float(os.getenv("AI_REQUEST_TIMEOUT_SECONDS", "60")),
        "ROADMAP_RATE_LIMIT": int(os.getenv("ROADMAP_RATE_LIMIT", "5")),
        "PROGRESS_RATE_LIMIT": int(os.getenv("PROGRESS_RATE_LIMIT", "100")),
        "RATE_LIMIT_WINDOW_SECONDS": int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900")),
        "RATELIMIT_STORAGE_URI": os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
        "ROADMAP_CACHE_TTL_SECONDS": int(os.getenv("ROADMAP_CACHE_TTL_SECONDS", "7200")),
        "PROBLEM_COUNT": DEFAULT_PROBLEM_COUNT,
        "ENABLE_MONGODB": database.mongodb_enabled(),
    }


def _init_services(app: Flask) -> None:
    if app.config["ENABLE_MONGODB"]:
        submission_store = MongoSubmissionStore()
        roadmap_store = MongoRoadmapStore()
        try:
            submission_store.create_indexes()
            roadmap_store.create_indexes()
            app.logger.info("MongoDB indexes created successfully")
        except Exception as e:
            app.logger.warning(f"Failed to create MongoDB indexes: {e}")
    else:
        submission_store = MemorySubmissionStore()
        roadmap_store = MemoryRoadmapStore()

    progress_service = MockLeetCodeService(
        problem_count=app.config["PROBLEM_COUNT"],
        submission_store=submission_store,
    )
    app.extensions["progress_service"] = progress_service
    app.extensions["roadmap_service"] = RoadmapService(
        progress_service,
        roadmap_store,
        ttl_seconds=app.config["ROADMAP_CACHE_TTL_SECONDS"],
    )


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(_exc):
        return error_response(404, "NOT_FOUND", f"Route {request.method} {request.path} not found")

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException):
        code = (exc.name or "HTTP_ERROR").upper().replace(" ", "_")
        return error_response(exc.code or 500, code, exc.description or exc.name)

    @app.errorhandler(Exception)
    def unhandled_error(exc: Exception):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Configure and return the Flask application instance."""
    app = Flask(__name__)
    app.config.from_mapping(_settings_from_env())
    if test_config:
        app.config.update(test_config)

    CORS(app, origins=app.config["CORS_ORIGIN"], supports_credentials=True)

    if not app.config["CONFIG_ENCRYPTION_KEY"]:
        app.logger.warning("CONFIG_ENCRYPTION_KEY is not set; configuration cookies will be rejected")

    app.extensions["started_at"] = time.monotonic()
    register_config_loader(app)
    register_rate_limits(app)
    _init_services(app)
    register_routes(app)
    _register_error_handlers(app)

    return app


app = create_app()
