"""MongoDB-backed submission and roadmap stores."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pymongo.database import Database

from interview_api import database
from interview_api.utils.dates import now_utc


def _strip_id(document: Dict[str, Any]) -> Dict[str, Any]:
    document.pop("_id", None)
    return document


class MongoSubmissionStore:
    """Submission histories kept in the ``submissions`` collection."""

    def __init__(self, db: Optional[Database] = None) -> None:
        self._db = db

    @property
    def collection(self):
        db = self._db if self._db is not None else database.get_database()
        return db.submissions

    def get(self, user_id: str) -> Optional[List[Dict[str, Any]]]:
        """
        Return the user's submissions, newest first.

        Args:
            user_id: The user id (the configured email address)

        Returns:
            The submission list, or None when the user has no history yet
        """
        document = self.collection.find_one({"user_id": user_id})
        if document is None:
            return None
        return [_strip_id(dict(item)) for item in document.get("submissions", [])]

    def set(self, user_id: str, submissions: List[Dict[str, Any]]) -> None:
        self.collection.update_one(
            {"user_id": user_id},
            {
                "$set": {
                    "submissions": list(submissions),
                    "updated_at": now_utc(),
                }
            },
            upsert=True,
        )

    def prepend(self, user_id: str, submission: Dict[str, Any]) -> None:
        """Insert ``submission`` at the head of the user's history."""
        self.collection.update_one(
            {"user_id": user_id},
            {
                "$push": {"submissions": {"$each": [submission], "$position": 0}},
                "$set": {"updated_at": now_utc()},
            },
            upsert=True,
        )

    def create_indexes(self) -> None:
        self.collection.create_index("user_id", unique=True)

    def clear(self) -> None:
        self.collection.delete_many({})


class MongoRoadmapStore:
    """Cached roadmaps kept in the ``roadmaps`` collection."""

    def __init__(self, db: Optional[Database] = None) -> None:
        self._db = db

    @property
    def collection(self):
        db = self._db if self._db is not None else database.get_database()
        return db.roadmaps

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        document = self.collection.find_one({"user_id": user_id}, {"_id": 0, "user_id": 0})
        return document

    def set(self, user_id: str, entry: Dict[str, Any]) -> None:
        # Upsert: replace the cached entry wholesale
        self.collection.replace_one(
            {"user_id": user_id},
            {"user_id": user_id, **entry},
            upsert=True,
        )

    def delete(self, user_id: str) -> None:
        self.collection.delete_one({"user_id": user_id})

    def create_indexes(self) -> None:
        self.collection.create_index("user_id", unique=True)

    def clear(self) -> None:
        self.collection.delete_many({})
