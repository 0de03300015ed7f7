"""Tests for roadmap prompt construction, parsing and caching."""

from __future__ import annotations

import json
import random
from datetime import datetime, timedelta, timezone

import pytest

from conftest import ROADMAP, FakeProvider

from interview_api.errors import ProviderAPIError, RoadmapParseError, RoadmapSchemaError
from interview_api.services.progress_service import MockLeetCodeService
from interview_api.services.roadmap_service import (
    RoadmapService,
    analyze_recent_activity,
    determine_skill_level,
    format_last_practiced,
    parse_roadmap,
)
from interview_api.storage import MemoryRoadmapStore

USER = "test@example.com"
START = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock(START)


@pytest.fixture
def service(clock):
    progress = MockLeetCodeService(rng=random.Random(11), problem_count=250, clock=clock)
    return RoadmapService(progress, MemoryRoadmapStore(), clock=clock)


def test_generates_and_normalizes_roadmap(service):
    provider = FakeProvider()

    result = service.generate_roadmap(USER, provider)

    assert result.from_cache is False
    assert result.roadmap["userId"] == USER
    assert result.roadmap["generatedAt"] == "2024-06-15T12:00:00.000Z"
    assert result.expires_at == "2024-06-15T14:00:00.000Z"
    assert [(p["problemId"], p["order"]) for p in result.roadmap["recommendedProblems"]] == [(1000, 1), (1001, 2)]
    assert provider.calls[0]["json_mode"] is True
    assert [m["role"] for m in provider.calls[0]["messages"]] == ["system", "user"]


def test_prompt_contains_progress_sections(service):
    provider = FakeProvider()
    service.generate_roadmap(
        USER,
        provider,
        {"targetRole": "Backend Engineer", "timelineToInterview": "1 month", "focusAreas": ["Graph", "Heap"]},
    )

    system, user = (m["content"] for m in provider.calls[0]["messages"])
    assert '"recommendedProblems"' in system
    for section in (
        "USER PROGRESS ANALYSIS:",
        "DIFFICULTY BREAKDOWN:",
        "TOPIC PERFORMANCE (weakest areas):",
        "RECENT ACTIVITY PATTERN:",
        "READINESS INDICATORS:",
    ):
        assert section in user
    assert "- Target Role: Backend Engineer" in user
    assert "- Interview Timeline: 1 month" in user
    assert "- Preferred Difficulty: gradual" in user
    assert "- Focus Areas: Graph, Heap" in user


def test_prompt_without_preferences(service):
    provider = FakeProvider()
    service.generate_roadmap(USER, provider)
    assert "No specific preferences provided" in provider.calls[0]["messages"][1]["content"]


def test_second_call_is_served_from_cache(service):
    provider = FakeProvider()

    first = service.generate_roadmap(USER, provider)
    second = service.generate_roadmap(USER, provider)

    assert second.from_cache is True
    assert second.roadmap == first.roadmap
    assert second.expires_at == first.expires_at
    assert len(provider.calls) == 1


def test_force_regenerate_bypasses_cache(service):
    provider = FakeProvider()

    service.generate_roadmap(USER, provider)
    result = service.generate_roadmap(USER, provider, force_regenerate=True)

    assert result.from_cache is False
    assert len(provider.calls) == 2


def test_expired_entry_is_regenerated(service, clock):
    provider = FakeProvider()
    service.generate_roadmap(USER, provider)

    clock.now = START + timedelta(hours=2)
    assert service.generate_roadmap(USER, provider).from_cache is True

    clock.now = START + timedelta(hours=2, seconds=1)
    result = service.generate_roadmap(USER, provider)

    assert result.from_cache is False
    assert result.generated_at == "2024-06-15T14:00:01.000Z"
    assert len(provider.calls) == 2


def test_clear_cache(service):
    provider = FakeProvider()
    service.generate_roadmap(USER, provider)
    service.generate_roadmap("other@example.com", provider)

    service.clear_cache(USER)
    assert service.get_cached(USER) is None
    assert service.get_cached("other@example.com") is not None

    service.clear_cache()
    assert service.get_cached("other@example.com") is None


def test_provider_errors_propagate_and_nothing_is_cached(service):
    provider = FakeProvider(error=ProviderAPIError("OpenAI", 500, "Internal Server Error"))

    with pytest.raises(ProviderAPIError):
        service.generate_roadmap(USER, provider)
    assert service.get_cached(USER) is None


def test_invalid_json_raises_parse_error(service):
    with pytest.raises(RoadmapParseError):
        service.generate_roadmap(USER, FakeProvider(content="Sure! Here is your roadmap."))


def test_parse_roadmap_strips_code_fence():
    fenced = "```json\n" + json.dumps(ROADMAP) + "\n```"
    assert parse_roadmap(fenced)["nextFocusArea"]["topic"] == "Graph"


@pytest.mark.parametrize(
    "payload",
    [
        [ROADMAP],
        {key: value for key, value in ROADMAP.items() if key != "studyPlan"},
        dict(ROADMAP, recommendedProblems="Clone Graph"),
    ],
)
def test_schema_violations(payload):
    with pytest.raises(RoadmapSchemaError):
        parse_roadmap(json.dumps(payload))


@pytest.mark.parametrize(
    "solved, hard, level",
    [
        (10, 0.5, "beginner"),
        (100, 0.5, "intermediate"),
        (200, 0.05, "intermediate"),
        (200, 0.2, "advanced"),
        (400, 0.2, "advanced"),
        (400, 0.4, "expert"),
    ],
)
def test_skill_levels(solved, hard, level):
    stats = {"easy": {"percentage": 0.9}, "medium": {"percentage": 0.5}, "hard": {"percentage": hard}}
    assert determine_skill_level(solved, stats) == level


def test_activity_analysis():
    assert analyze_recent_activity([]).startswith("No recent activity detected")
    steady = [{"problemsSolved": 2} for _ in range(10)]
    assert "Excellent consistency" in analyze_recent_activity(steady)
    patchy = [{"problemsSolved": n} for n in (0, 0, 1, 0, 3)]
    assert "Inconsistent practice" in analyze_recent_activity(patchy)


@pytest.mark.parametrize(
    "delta, text",
    [
        (timedelta(hours=5), "5h ago"),
        (timedelta(hours=30), "yesterday"),
        (timedelta(days=3), "3d ago"),
        (timedelta(days=15), "2w ago"),
        (timedelta(days=65), "2mo ago"),
    ],
)
def test_format_last_practiced(delta, text):
    assert format_last_practiced((START - delta).isoformat(), START) == text
