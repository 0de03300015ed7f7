"""In-memory stores backing per-user state.

Nothing here survives a restart. The Mongo-backed equivalents in
``interview_api.services.mongo_store`` expose the same methods.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class MemorySubmissionStore:
    """Submission histories keyed by user id, newest submission first."""

    def __init__(self) -> None:
        self._submissions: Dict[str, List[Dict[str, Any]]] = {}

    def get(self, user_id: str) -> Optional[List[Dict[str, Any]]]:
        submissions = self._submissions.get(user_id)
        return list(submissions) if submissions is not None else None

    def set(self, user_id: str, submissions: List[Dict[str, Any]]) -> None:
        self._submissions[user_id] = list(submissions)

    def prepend(self, user_id: str, submission: Dict[str, Any]) -> None:
        self._submissions.setdefault(user_id, []).insert(0, submission)

    def clear(self) -> None:
        self._submissions.clear()


class MemoryRoadmapStore:
    """Cached roadmap entries (``{roadmap, generatedAt, expiresAt, version}``)."""

    def __init__(self) -> None:
        self._entries: Dict[str, Dict[str, Any]] = {}

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._entries.get(user_id)

    def set(self, user_id: str, entry: Dict[str, Any]) -> None:
        self._entries[user_id] = entry

    def delete(self, user_id: str) -> None:
        self._entries.pop(user_id, None)

    def clear(self) -> None:
        self._entries.clear()
