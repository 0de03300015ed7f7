"""Request validation models shared by the blueprints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, field_validator

Difficulty = Literal["Easy", "Medium", "Hard"]
SubmissionStatus = Literal[
    "Accepted",
    "Wrong Answer",
    "Time Limit Exceeded",
    "Memory Limit Exceeded",
    "Runtime Error",
    "Compile Error",
]
ProviderName = Literal["openai", "anthropic", "google"]

_EMAIL = TypeAdapter(EmailStr)
_DIFFICULTIES = ("Easy", "Medium", "Hard")
# Tolerated lead of a client clock over the server clock
_CLOCK_SKEW = timedelta(minutes=1)


def validate_user_id(value: str) -> str:
    """Raise ``pydantic.ValidationError`` unless ``value`` is an email address."""
    return _EMAIL.validate_python(value)


def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(min_length=1)


class SubmissionPayload(BaseModel):
    """Body of ``POST /api/v1/progress/<userId>/submissions``."""

    problemId: int = Field(ge=1)
    status: SubmissionStatus
    runtime: int = Field(ge=0)
    memory: float = Field(ge=0)
    language: str = Field(min_length=1, max_length=50)
    submissionTime: datetime

    @field_validator("submissionTime")
    @classmethod
    def not_in_future(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value > datetime.now(timezone.utc) + _CLOCK_SKEW:
            raise ValueError("submissionTime cannot be in the future")
        return value


class DifficultyQuery(BaseModel):
    difficulty: Optional[Difficulty] = None


class RecommendationQuery(BaseModel):
    count: int = Field(default=5, ge=1, le=50)


class ProblemSearchQuery(BaseModel):
    """Query string of the problem search; list filters arrive comma-separated."""

    q: str = Field(min_length=1, max_length=100)
    difficulty: Optional[str] = None
    topics: Optional[str] = None
    companies: Optional[str] = None
    isPaid: Optional[bool] = None
    minAcceptanceRate: Optional[float] = Field(default=None, ge=0, le=1)
    maxAcceptanceRate: Optional[float] = Field(default=None, ge=0, le=1)

    @field_validator("difficulty")
    @classmethod
    def check_difficulties(cls, value: Optional[str]) -> Optional[str]:
        for level in _split_csv(value) or []:
            if level not in _DIFFICULTIES:
                raise ValueError(f"Invalid difficulty: {level}")
        return value

    def filters(self) -> Dict[str, Any]:
        return {
            "difficulty": _split_csv(self.difficulty),
            "topics": _split_csv(self.topics),
            "companies": _split_csv(self.companies),
            "isPaid": self.isPaid,
            "minAcceptanceRate": self.minAcceptanceRate,
            "maxAcceptanceRate": self.maxAcceptanceRate,
        }


class RoadmapPreferences(BaseModel):
    targetRole: Optional[str] = Field(default=None, max_length=100)
    timelineToInterview: Optional[str] = Field(default=None, max_length=100)
    preferredDifficulty: Optional[Literal["gradual", "challenging"]] = None
    focusAreas: Optional[List[str]] = None


class UserConfigPayload(BaseModel):
    """Configuration submitted by the setup wizard."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)
    provider: ProviderName
    model: str = Field(min_length=1)
    apiKey: str = Field(min_length=1)
    apiUrl: str = Field(min_length=1)
    setupComplete: bool = True


class UserConfigUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    password: Optional[str] = Field(default=None, min_length=1)
    provider: Optional[ProviderName] = None
    model: Optional[str] = Field(default=None, min_length=1)
    apiKey: Optional[str] = Field(default=None, min_length=1)
    apiUrl: Optional[str] = Field(default=None, min_length=1)
    setupComplete: Optional[bool] = None
