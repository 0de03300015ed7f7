"""Service layer modules for the interview prep API."""

from . import ai_provider, mongo_store, openai_service, progress_service, roadmap_service

__all__ = [
    "ai_provider",
    "mongo_store",
    "openai_service",
    "progress_service",
    "roadmap_service",
]
