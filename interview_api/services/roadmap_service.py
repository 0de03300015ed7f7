"""AI study-roadmap generation on top of the mock progress data."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from interview_api.errors import RoadmapParseError, RoadmapSchemaError
from interview_api.storage import MemoryRoadmapStore
from interview_api.utils.dates import now_utc, parse_iso, to_iso

_LOGGER = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 2 * 60 * 60
CACHE_VERSION = "1.0"
REQUIRED_SECTIONS = (
    "nextFocusArea",
    "recommendedProblems",
    "studyPlan",
    "weakestTopics",
    "overallRecommendation",
)
WEAK_TOPIC_THRESHOLD = 0.7
RECOMMENDED_PROBLEM_BASE_ID = 1000

SYSTEM_PROMPT = """You are an expert coding interview preparation coach with deep knowledge of algorithms, data structures, and technical interview best practices. Your task is to analyze a user's LeetCode-style progress data and create a highly personalized, actionable study roadmap.

Key Principles:
1. Focus on the most impactful improvements for interview success
2. Balance addressing weaknesses with reinforcing strengths
3. Consider recency of practice and learning curves
4. Provide specific, actionable recommendations
5. Account for different skill levels and timelines

Response Format: You must respond with valid JSON matching this exact schema:
{
  "userId": "string",
  "generatedAt": "string (ISO date)",
  "nextFocusArea": {
    "topic": "string",
    "reason": "string (detailed explanation)",
    "priority": "high|medium|low",
    "estimatedTimeToImprove": "string (e.g., '1-2 weeks')"
  },
  "recommendedProblems": [
    {
      "problemId": number,
      "title": "string",
      "difficulty": "Easy|Medium|Hard",
      "topic": "string",
      "reason": "string (why this specific problem)",
      "order": number
    }
  ],
  "studyPlan": {
    "weeklyGoals": ["string array of specific goals"],
    "dailyTimeRecommendation": number (minutes),
    "focusAreas": ["string array of topics to focus on"]
  },
  "weakestTopics": [
    {
      "topic": "string",
      "currentProgress": number (0-100),
      "targetProgress": number (0-100),
      "actionItems": ["string array of specific actions"]
    }
  ],
  "overallRecommendation": {
    "skillLevel": "beginner|intermediate|advanced|expert",
    "readinessScore": number (0-100),
    "keyStrengths": ["string array"],
    "criticalGaps": ["string array"],
    "timelineEstimate": "string"
  }
}"""

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


@dataclass
class RoadmapResult:
    roadmap: Dict[str, Any]
    generated_at: str
    expires_at: str
    from_cache: bool


def _percent(value: float) -> int:
    return int(round(value * 100))


def determine_skill_level(solved: int, difficulty_stats: Dict[str, Dict[str, Any]]) -> str:
    """Bucket a user by solved count and share of hard problems solved."""
    hard_percentage = difficulty_stats["hard"]["percentage"]
    if solved < 50:
        return "beginner"
    if solved < 150 or hard_percentage < 0.1:
        return "intermediate"
    if solved < 300 or hard_percentage < 0.3:
        return "advanced"
    return "expert"


def analyze_recent_activity(recent_activity: List[Dict[str, Any]]) -> str:
    if not recent_activity:
        return "No recent activity detected - consistency is crucial for interview prep."

    days = len(recent_activity)
    average = sum(day["problemsSolved"] for day in recent_activity) / days
    consistency = sum(1 for day in recent_activity if day["problemsSolved"] > 0) / days

    analysis = f"Average {average:.1f} problems/day over {days} days. "
    if consistency > 0.8:
        analysis += "Excellent consistency! "
    elif consistency > 0.5:
        analysis += "Good consistency, but room for improvement. "
    else:
        analysis += "Inconsistent practice - this is a key area to improve. "
    return analysis


def readiness_factors(context: Dict[str, Any]) -> List[str]:
    stats = context["difficultyStats"]
    factors = []

    if stats["easy"]["percentage"] > 0.8:
        factors.append("Strong foundation in easy problems ✓")
    else:
        factors.append("Need to strengthen fundamentals (easy problems)")

    if stats["medium"]["percentage"] > 0.6:
        factors.append("Good progress on medium difficulty ✓")
    else:
        factors.append("Medium problems need significant work")

    if context["currentStreak"] > 7:
        factors.append("Excellent practice consistency ✓")
    elif context["currentStreak"] > 3:
        factors.append("Good practice momentum")
    else:
        factors.append("Need to build consistent practice habit")

    if context["avgSolveTime"] < 30:
        factors.append("Efficient problem-solving speed ✓")
    else:
        factors.append("Could improve problem-solving speed")

    return factors


def format_last_practiced(value: str, now: datetime) -> str:
    """Render an ISO timestamp as ``5h ago``, ``yesterday``, ``3d ago``..."""
    try:
        hours = int((now - parse_iso(value)).total_seconds() // 3600)
    except ValueError:
        return "unknown"

    if hours < 24:
        return f"{hours}h ago"
    if hours < 48:
        return "yesterday"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    if days < 30:
        return f"{days // 7}w ago"
    return f"{days // 30}mo ago"


def build_generation_context(user_id: str, progress: Dict[str, Any]) -> Dict[str, Any]:
    overall = progress["overallStats"]
    return {
        "userId": user_id,
        "totalProblems": overall["totalProblems"],
        "solvedProblems": overall["totalSolved"],
        "progressPercentage": overall["progressPercentage"],
        "topicProgress": [
            {
                "topicName": topic["topicName"],
                "progressPercentage": topic["progressPercentage"],
                "solvedProblems": topic["solvedProblems"],
                "totalProblems": topic["totalProblems"],
                "lastPracticed": topic["lastPracticed"],
            }
            for topic in progress["topicProgress"]
        ],
        "difficultyStats": overall["difficultyStats"],
        "recentActivity": progress["recentActivity"],
        "currentStreak": progress["streakInfo"]["currentStreak"],
        "avgSolveTime": overall["avgSolveTime"],
    }


def _format_preferences(preferences: Optional[Dict[str, Any]]) -> str:
    if not preferences:
        return "No specific preferences provided"
    focus_areas = ", ".join(preferences.get("focusAreas") or []) or "None specified"
    return "\n".join(
        [
            f"- Target Role: {preferences.get('targetRole') or 'Software Engineer'}",
            f"- Interview Timeline: {preferences.get('timelineToInterview') or 'Not specified'}",
            f"- Preferred Difficulty: {preferences.get('preferredDifficulty') or 'gradual'}",
            f"- Focus Areas: {focus_areas}",
        ]
    )


def build_user_prompt(
    context: Dict[str, Any], preferences: Optional[Dict[str, Any]], now: datetime
) -> str:
    stats = context["difficultyStats"]
    skill_level = determine_skill_level(context["solvedProblems"], stats)

    weakest = sorted(
        (t for t in context["topicProgress"] if t["progressPercentage"] < WEAK_TOPIC_THRESHOLD),
        key=lambda t: t["progressPercentage"],
    )[:5]
    topic_lines = "\n".join(
        f"- {t['topicName']}: {_percent(t['progressPercentage'])}% "
        f"({t['solvedProblems']}/{t['totalProblems']}) - "
        f"Last practiced: {format_last_practiced(t['lastPracticed'], now)}"
        for t in weakest
    )
    difficulty_lines = "\n".join(
        f"- {level.title()}: {stats[level]['solved']}/{stats[level]['total']} "
        f"({_percent(stats[level]['percentage'])}%)"
        for level in ("easy", "medium", "hard")
    )
    readiness_lines = "\n".join(f"- {factor}" for factor in readiness_factors(context))

    return f"""Please analyze this user's coding interview preparation progress and create a personalized roadmap.

USER PROGRESS ANALYSIS:
- Total Progress: {context['solvedProblems']}/{context['totalProblems']} problems ({_percent(context['progressPercentage'])}%)
- Current Skill Level: {skill_level}
- Current Streak: {context['currentStreak']} days
- Average Solve Time: {round(context['avgSolveTime'])} minutes

DIFFICULTY BREAKDOWN:
{difficulty_lines}

TOPIC PERFORMANCE (weakest areas):
{topic_lines}

RECENT ACTIVITY PATTERN:
{analyze_recent_activity(context['recentActivity'])}

READINESS INDICATORS:
{readiness_lines}

USER PREFERENCES:
{_format_preferences(preferences)}

REQUIREMENTS:
1. Identify the single most important focus area for maximum impact
2. Recommend 5-8 specific problems in order of priority
3. Create a realistic weekly study plan
4. Provide actionable steps for the 3-4 weakest topics
5. Give an honest assessment of interview readiness and timeline

Focus on practical, achievable goals that build momentum and confidence while addressing critical gaps."""


def parse_roadmap(text: str) -> Dict[str, Any]:
    """Decode model output into a roadmap dict, tolerating a markdown code fence."""
    cleaned = (text or "").strip()
    match = _CODE_FENCE.match(cleaned)
    if match:
        cleaned = match.group(1)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise RoadmapParseError(f"AI response was not valid JSON: {exc.msg}") from exc

    if not isinstance(data, dict):
        raise RoadmapSchemaError("Invalid roadmap structure received from AI")
    missing = [section for section in REQUIRED_SECTIONS if section not in data]
    if missing:
        raise RoadmapSchemaError(
            f"Invalid roadmap structure received from AI: missing {', '.join(missing)}"
        )
    if not isinstance(data["recommendedProblems"], list):
        raise RoadmapSchemaError("Invalid roadmap structure received from AI: recommendedProblems must be a list")
    return data


class RoadmapService:
    """Generates roadmaps through an AI provider and caches them per user."""

    def __init__(
        self,
        progress_service,
        store: Any = None,
        ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._progress = progress_service
        self._store = store if store is not None else MemoryRoadmapStore()
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    def get_cached(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Return the live cache entry for ``user_id``; expired entries are dropped."""
        entry = self._store.get(user_id)
        if entry is None:
            return None
        try:
            expired = self._clock() > parse_iso(entry["expiresAt"])
        except (KeyError, ValueError):
            expired = True
        if expired:
            self._store.delete(user_id)
            return None
        return entry

    def generate_roadmap(
        self,
        user_id: str,
        provider,
        preferences: Optional[Dict[str, Any]] = None,
        force_regenerate: bool = False,
    ) -> RoadmapResult:
        if not force_regenerate:
            cached = self.get_cached(user_id)
            if cached is not None:
                _LOGGER.info("Returning cached roadmap")
                return RoadmapResult(cached["roadmap"], cached["generatedAt"], cached["expiresAt"], True)

        _LOGGER.info("Generating new roadmap with %s", getattr(provider, "label", provider))
        now = self._clock()
        progress = self._progress.get_user_progress(user_id)
        context = build_generation_context(user_id, progress)

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_prompt(context, preferences, now)},
        ]
        reply = provider.chat(messages, json_mode=True)
        roadmap = parse_roadmap(reply["content"])

        generated_at = to_iso(now)
        expires_at = to_iso(now + self._ttl)
        roadmap["userId"] = user_id
        roadmap["generatedAt"] = generated_at
        # Model-chosen ids do not exist in the mock catalog
        problems = [p if isinstance(p, dict) else {} for p in roadmap["recommendedProblems"]]
        roadmap["recommendedProblems"] = [
            {**problem, "problemId": RECOMMENDED_PROBLEM_BASE_ID + index, "order": index + 1}
            for index, problem in enumerate(problems)
        ]

        self._store.set(
            user_id,
            {
                "roadmap": roadmap,
                "generatedAt": generated_at,
                "expiresAt": expires_at,
                "version": CACHE_VERSION,
            },
        )
        return RoadmapResult(roadmap, generated_at, expires_at, False)

    def clear_cache(self, user_id: Optional[str] = None) -> None:
        if user_id:
            self._store.delete(user_id)
        else:
            self._store.clear()
