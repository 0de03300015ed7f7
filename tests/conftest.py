"""Shared pytest fixtures for the API and its stores."""

from __future__ import annotations

import json
import random
import sys
from datetime import timedelta
from pathlib import Path

import mongomock
import pytest

# Ensure the application package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from interview_api import database  # noqa: E402
from interview_api.main import create_app  # noqa: E402
from interview_api.utils.auth import COOKIE_NAME, encrypt_config  # noqa: E402
from interview_api.utils.dates import now_utc, to_iso  # noqa: E402
from interview_api.utils.rate_limit import limiter  # noqa: E402

TEST_KEY = "test-encryption-key"
TEST_EMAIL = "test@example.com"


def make_config(**overrides):
    """Return a complete, valid user configuration."""
    config = {
        "email": TEST_EMAIL,
        "password": "hunter2",
        "provider": "openai",
        "model": "gpt-4",
        "apiKey": "sk-test-key",
        "apiUrl": "https://api.openai.com/v1",
        "setupComplete": True,
        "createdAt": to_iso(now_utc() - timedelta(days=1)),
    }
    config.update(overrides)
    return config


@pytest.fixture
def mongo_db(monkeypatch: pytest.MonkeyPatch):
    """Provide an isolated in-memory MongoDB database for each test."""
    test_db_name = "test_ai_interview_prep"
    monkeypatch.setenv("MONGODB_DATABASE", test_db_name)

    client = mongomock.MongoClient()
    db = client[test_db_name]

    monkeypatch.setattr(database, "get_mongo_client", lambda: client)
    monkeypatch.setattr(database, "get_database", lambda: db)

    yield db

    client.drop_database(test_db_name)


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "CONFIG_ENCRYPTION_KEY": TEST_KEY,
            "ENABLE_MONGODB": False,
            "PROBLEM_COUNT": 300,
        }
    )
    # Deterministic submission histories
    app.extensions["progress_service"]._rng = random.Random(7)
    return app


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Start every test with empty rate-limit counters."""
    limiter.reset()
    yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def configure(client):
    """Install an encrypted configuration cookie on the test client."""

    def _configure(**overrides):
        config = make_config(**overrides)
        client.set_cookie(COOKIE_NAME, encrypt_config(config, TEST_KEY))
        return config

    return _configure


ROADMAP = {
    "userId": "someone-else",
    "generatedAt": "2000-01-01T00:00:00Z",
    "nextFocusArea": {"topic": "Graph", "reason": "Lowest coverage", "priority": "high", "estimatedTimeToImprove": "2 weeks"},
    "recommendedProblems": [
        {"problemId": 1, "title": "Clone Graph", "difficulty": "Medium", "topic": "Graph", "reason": "BFS", "order": 9},
        {"problemId": 2, "title": "Course Schedule", "difficulty": "Medium", "topic": "Graph", "reason": "Topo", "order": 3},
    ],
    "studyPlan": {"weeklyGoals": ["10 graph problems"], "dailyTimeRecommendation": 60, "focusAreas": ["Graph"]},
    "weakestTopics": [{"topic": "Graph", "currentProgress": 10, "targetProgress": 50, "actionItems": ["Practice BFS"]}],
    "overallRecommendation": {
        "skillLevel": "intermediate",
        "readinessScore": 55,
        "keyStrengths": ["Arrays"],
        "criticalGaps": ["Graphs"],
        "timelineEstimate": "6 weeks",
    },
}


class FakeProvider:
    name = "openai"
    label = "OpenAI"

    def __init__(self, content=None, error=None):
        self.content = json.dumps(ROADMAP) if content is None else content
        self.error = error
        self.calls = []

    def chat(self, messages, *, json_mode=False):
        self.calls.append({"messages": messages, "json_mode": json_mode})
        if self.error is not None:
            raise self.error
        return {"content": self.content, "model": "gpt-4", "usage": None}
