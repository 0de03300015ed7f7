"""Blueprint registration helper."""

from __future__ import annotations

from flask import Flask

from .ai import bp as ai_bp
from .config import bp as config_bp
from .health import bp as health_bp
from .progress import bp as progress_bp
from .roadmap import bp as roadmap_bp


def register_routes(app: Flask) -> None:
    """Register all application blueprints on the provided Flask app."""
    app.register_blueprint(health_bp)
    app.register_blueprint(ai_bp)
    app.register_blueprint(config_bp)
    app.register_blueprint(progress_bp)
    app.register_blueprint(roadmap_bp)
