"""Mock LeetCode-style catalog and per-user progress statistics.

The catalog is generated once when the service is built. Submission histories
are synthesized the first time a user's progress is requested and kept in the
injected submission store. Every aggregate is recomputed per request.
"""

from __future__ import annotations

import logging
import random
import re
import string
from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set

from interview_api.storage import MemorySubmissionStore
from interview_api.utils.dates import iso_date, now_millis, now_utc, to_iso

_LOGGER = logging.getLogger(__name__)

DEFAULT_PROBLEM_COUNT = 1200
MIN_SOLVED = 50
MAX_SOLVED = 250
HISTORY_DAYS = 90
SEARCH_LIMIT = 50
COMPANY_PROGRESS_LIMIT = 10
ACTIVITY_SUBMISSIONS = 30
ACTIVITY_DAYS = 14
MIN_TOPIC_SIZE = 5

DIFFICULTIES = ("Easy", "Medium", "Hard")
ACCEPTED = "Accepted"
FAILURE_STATUSES = ("Wrong Answer", "Time Limit Exceeded", "Memory Limit Exceeded", "Runtime Error")
SUBMISSION_STATUSES = (ACCEPTED,) + FAILURE_STATUSES + ("Compile Error",)

TOPICS = [
    "Array", "Two Pointers", "String", "Linked List",
    "Stack", "Queue", "Binary Tree", "Binary Search Tree",
    "Hash Table", "Heap", "Graph", "Dynamic Programming",
    "Backtracking", "Greedy", "Trie", "Union Find",
    "Binary Search", "Sliding Window", "Recursion", "Sort",
]

COMPANIES = [
    "Google", "Amazon", "Microsoft", "Apple", "Facebook",
    "Netflix", "Uber", "Airbnb", "LinkedIn", "Twitter",
    "Tesla", "Spotify", "Dropbox", "Salesforce", "Adobe",
]

LANGUAGES = [
    "Python", "JavaScript", "Java", "C++", "C",
    "Go", "Rust", "TypeScript", "Swift", "Kotlin",
]

HIGH_FREQUENCY_COMPANIES = {"Google", "Amazon", "Microsoft", "Apple", "Facebook"}
MEDIUM_FREQUENCY_COMPANIES = {"Netflix", "Uber", "Airbnb", "LinkedIn"}

# (title, difficulty, topics, acceptance rate)
PROBLEM_TEMPLATES = [
    ("Two Sum", "Easy", ["Array", "Hash Table"], 0.52),
    ("Best Time to Buy and Sell Stock", "Easy", ["Array", "Dynamic Programming"], 0.54),
    ("Maximum Subarray", "Medium", ["Array", "Dynamic Programming"], 0.50),
    ("Product of Array Except Self", "Medium", ["Array"], 0.64),
    ("Find Minimum in Rotated Sorted Array", "Medium", ["Array", "Binary Search"], 0.46),
    ("Valid Anagram", "Easy", ["String", "Hash Table"], 0.63),
    ("Group Anagrams", "Medium", ["String", "Hash Table"], 0.67),
    ("Longest Substring Without Repeating Characters", "Medium", ["String", "Sliding Window"], 0.35),
    ("Valid Parentheses", "Easy", ["String", "Stack"], 0.40),
    ("Reverse Linked List", "Easy", ["Linked List"], 0.73),
    ("Merge Two Sorted Lists", "Easy", ["Linked List", "Recursion"], 0.62),
    ("Remove Nth Node From End of List", "Medium", ["Linked List", "Two Pointers"], 0.39),
    ("Linked List Cycle", "Easy", ["Linked List", "Two Pointers"], 0.48),
    ("Maximum Depth of Binary Tree", "Easy", ["Binary Tree", "Recursion"], 0.74),
    ("Same Tree", "Easy", ["Binary Tree", "Recursion"], 0.57),
    ("Invert Binary Tree", "Easy", ["Binary Tree", "Recursion"], 0.76),
    ("Binary Tree Level Order Traversal", "Medium", ["Binary Tree", "Queue"], 0.64),
    ("Validate Binary Search Tree", "Medium", ["Binary Search Tree", "Recursion"], 0.31),
    ("Climbing Stairs", "Easy", ["Dynamic Programming"], 0.52),
    ("House Robber", "Medium", ["Dynamic Programming"], 0.48),
    ("Coin Change", "Medium", ["Dynamic Programming"], 0.41),
    ("Longest Increasing Subsequence", "Medium", ["Dynamic Programming", "Binary Search"], 0.54),
    ("Edit Distance", "Hard", ["Dynamic Programming"], 0.53),
    ("Number of Islands", "Medium", ["Graph"], 0.57),
    ("Clone Graph", "Medium", ["Graph"], 0.51),
    ("Course Schedule", "Medium", ["Graph", "Backtracking"], 0.45),
    ("Word Ladder", "Hard", ["Graph", "String"], 0.37),
]

TITLE_PATTERNS = {
    "Array": [
        "Rotate Array", "Remove Duplicates", "Merge Sorted Arrays", "Search in Rotated Array",
        "Find Peak Element", "Missing Number", "Majority Element", "Contains Duplicate",
    ],
    "String": [
        "Reverse String", "First Unique Character", "Valid Palindrome", "String to Integer",
        "Implement strStr", "Longest Common Prefix", "Count and Say", "Zigzag Conversion",
    ],
    "Dynamic Programming": [
        "Unique Paths", "Minimum Path Sum", "Triangle", "Word Break", "Decode Ways",
        "Perfect Squares", "Partition Equal Subset Sum", "Target Sum",
    ],
    "Graph": [
        "Find Path", "Shortest Path", "Minimum Spanning Tree", "Detect Cycle",
        "Topological Sort", "Connected Components", "Graph Coloring", "Network Flow",
    ],
}
GENERIC_TITLE_PATTERNS = ["Problem", "Challenge", "Task", "Question"]

HINT_TEMPLATES = [
    "Try using a hash map to store intermediate results.",
    "Consider the two-pointer technique.",
    "Think about the edge cases.",
    "Can you solve this recursively?",
    "What if you sort the input first?",
    "Consider using dynamic programming.",
    "Try to find a pattern in the examples.",
    "Can you optimize the space complexity?",
]

BASE_ACCEPTANCE_RATES = {"Easy": 0.6, "Medium": 0.45, "Hard": 0.35}
BASE_RUNTIMES_MS = {"Easy": 50, "Medium": 100, "Hard": 200}

DEFAULT_GOALS = {
    "dailyTarget": 2,
    "weeklyTarget": 10,
    "targetTopics": ["Dynamic Programming", "Graph"],
    "targetCompanies": ["Google", "Amazon"],
}


def slugify(title: str) -> str:
    """Lower-case ``title`` and replace every non-alphanumeric character with '-'."""
    return re.sub(r"[^a-z0-9]", "-", title.lower())


def company_frequency(company: str) -> str:
    if company in HIGH_FREQUENCY_COMPANIES:
        return "High"
    if company in MEDIUM_FREQUENCY_COMPANIES:
        return "Medium"
    return "Low"


def _ratio(part: int, whole: int) -> float:
    return part / whole if whole > 0 else 0.0


def _difficulty_counter() -> Dict[str, Dict[str, int]]:
    return {level.lower(): {"solved": 0, "total": 0} for level in DIFFICULTIES}


class MockLeetCodeService:
    """Synthetic problem catalog plus per-user progress analytics."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        problem_count: int = DEFAULT_PROBLEM_COUNT,
        submission_store: Any = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._rng = rng or random.Random()
        self._store = submission_store if submission_store is not None else MemorySubmissionStore()
        self._clock = clock

        self.problems: List[Dict[str, Any]] = []
        self._by_id: Dict[int, Dict[str, Any]] = {}
        self._by_topic: Dict[str, List[Dict[str, Any]]] = {topic: [] for topic in TOPICS}
        self._by_company: Dict[str, List[Dict[str, Any]]] = {company: [] for company in COMPANIES}

        self._generate_problems(problem_count)
        self._topic_acceptance = {
            topic: (sum(p["acRate"] for p in problems) / len(problems) if problems else 0.0)
            for topic, problems in self._by_topic.items()
        }
        _LOGGER.info("Generated mock catalog with %d problems", len(self.problems))

    # ------------------------------------------------------------------
    # Catalog generation
    # ------------------------------------------------------------------

    def _generate_problems(self, count: int) -> None:
        for index, (title, difficulty, topics, ac_rate) in enumerate(PROBLEM_TEMPLATES[:count]):
            self._add_problem(self._make_problem(index + 1, title, difficulty, list(topics), ac_rate))

        for problem_id in range(len(self.problems) + 1, count + 1):
            self._add_problem(self._random_problem(problem_id))

        self._link_similar_problems()

    def _add_problem(self, problem: Dict[str, Any]) -> None:
        self.problems.append(problem)
        self._by_id[problem["id"]] = problem
        for topic in problem["topics"]:
            self._by_topic.setdefault(topic, []).append(problem)
        for company in problem["companies"]:
            self._by_company.setdefault(company, []).append(problem)

    def _make_problem(
        self, problem_id: int, title: str, difficulty: str, topics: List[str], ac_rate: float
    ) -> Dict[str, Any]:
        slug = slugify(title)
        return {
            "id": problem_id,
            "title": title,
            "slug": slug,
            "difficulty": difficulty,
            "topics": topics,
            "companies": self._sample(COMPANIES, self._rng.randint(2, 9)),
            "isPaid": self._rng.random() < 0.3,
            "acRate": ac_rate,
            "url": f"https://leetcode.com/problems/{slug}/",
            "hints": self._sample(HINT_TEMPLATES, self._rng.randint(1, 3)),
            "similar": [],
        }

    def _random_problem(self, problem_id: int) -> Dict[str, Any]:
        difficulty = self._rng.choice(DIFFICULTIES)
        topics = self._sample(TOPICS, self._rng.randint(1, 3))
        patterns = TITLE_PATTERNS.get(topics[0], GENERIC_TITLE_PATTERNS)
        title = f"{self._rng.choice(patterns)} {problem_id}"
        return self._make_problem(problem_id, title, difficulty, topics, self._acceptance_rate(difficulty))

    def _acceptance_rate(self, difficulty: str) -> float:
        rate = BASE_ACCEPTANCE_RATES[difficulty] + (self._rng.random() - 0.5) * 0.3
        return min(1.0, max(0.0, round(rate, 2)))

    def _sample(self, items: Sequence[Any], count: int) -> List[Any]:
        return self._rng.sample(list(items), min(count, len(items)))

    def _link_similar_problems(self) -> None:
        for problem in self.problems:
            candidates: Set[int] = set()
            for topic in problem["topics"]:
                candidates.update(p["id"] for p in self._by_topic.get(topic, []))
            candidates.discard(problem["id"])
            problem["similar"] = self._sample(sorted(candidates), 3)

    # ------------------------------------------------------------------
    # Submission histories
    # ------------------------------------------------------------------

    def _submission_id(self) -> str:
        suffix = "".join(self._rng.choice(string.ascii_lowercase + string.digits) for _ in range(9))
        return f"sub_{now_millis()}_{suffix}"

    def _generate_submissions(self, user_id: str, solved_count: int) -> List[Dict[str, Any]]:
        now = self._clock()
        problem_ids = self._rng.sample(list(self._by_id), min(solved_count, len(self._by_id)))
        submissions: List[Dict[str, Any]] = []

        for problem_id in problem_ids:
            difficulty = self._by_id[problem_id]["difficulty"]
            attempts = self._rng.randint(1, 3)
            solved_at = now - timedelta(
                days=self._rng.randrange(HISTORY_DAYS), minutes=self._rng.randrange(0, 600)
            )
            for attempt in range(attempts):
                is_last = attempt == attempts - 1
                base_runtime = BASE_RUNTIMES_MS[difficulty]
                submitted_at = solved_at - timedelta(minutes=(attempts - 1 - attempt) * self._rng.randint(2, 20))
                submissions.append(
                    {
                        "problemId": problem_id,
                        "status": ACCEPTED if is_last else self._rng.choice(FAILURE_STATUSES),
                        "runtime": base_runtime + self._rng.randrange(base_runtime),
                        "memory": self._rng.randint(10, 29),
                        "submissionTime": to_iso(submitted_at),
                        "language": self._rng.choice(LANGUAGES),
                        "submissionId": self._submission_id(),
                        "runtimePercentile": self._rng.random(),
                        "memoryPercentile": self._rng.random(),
                    }
                )

        submissions.sort(key=lambda s: s["submissionTime"], reverse=True)
        self._store.set(user_id, submissions)
        _LOGGER.info("Synthesized %d submissions for %d problems for a new user", len(submissions), len(problem_ids))
        return submissions

    def _ensure_submissions(self, user_id: str) -> List[Dict[str, Any]]:
        submissions = self._store.get(user_id)
        if submissions is None:
            submissions = self._generate_submissions(user_id, self._rng.randint(MIN_SOLVED, MAX_SOLVED))
        return submissions

    @staticmethod
    def _solved_ids(submissions: Iterable[Dict[str, Any]]) -> Set[int]:
        return {s["problemId"] for s in submissions if s["status"] == ACCEPTED}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_problem(self, problem_id: int) -> Optional[Dict[str, Any]]:
        return self._by_id.get(problem_id)

    def get_user_progress(self, user_id: str) -> Dict[str, Any]:
        """Return the full progress view for ``user_id``, generating history on first use."""
        submissions = self._ensure_submissions(user_id)
        solved_ids = self._solved_ids(submissions)

        topic_progress = self._topic_progress(submissions, solved_ids)
        streak_info = self._streak_info(submissions)

        return {
            "userId": user_id,
            "lastUpdated": to_iso(self._clock()),
            "overallStats": self._overall_stats(submissions, solved_ids, streak_info),
            "topicProgress": topic_progress,
            "companyProgress": self._company_progress(solved_ids),
            "recentActivity": self._recent_activity(submissions),
            "weakestTopics": self._weakest_topics(topic_progress),
            "strongestTopics": self._strongest_topics(topic_progress),
            "nextRecommendations": self.get_recommendations(user_id, 5),
            "streakInfo": streak_info,
            "goals": dict(DEFAULT_GOALS),
        }

    def update_user_progress(self, user_id: str, submission: Dict[str, Any]) -> None:
        """Record ``submission`` as the user's newest attempt."""
        self._ensure_submissions(user_id)
        self._store.prepend(user_id, submission)

    def get_problems_by_topic(self, topic: str, difficulty: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            p for p in self._by_topic.get(topic, [])
            if not difficulty or p["difficulty"] == difficulty
        ]

    def get_problems_by_company(self, company: str, difficulty: Optional[str] = None) -> List[Dict[str, Any]]:
        return [
            p for p in self._by_company.get(company, [])
            if not difficulty or p["difficulty"] == difficulty
        ]

    def build_submission(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Complete client-reported ``fields`` with an id and mock percentiles."""
        return {
            **fields,
            "submissionId": self._submission_id(),
            "runtimePercentile": self._rng.random(),
            "memoryPercentile": self._rng.random(),
        }

    def get_recommendations(self, user_id: str, count: int = 5) -> List[Dict[str, Any]]:
        """Pick ``count`` unsolved problems with a reason and priority attached."""
        solved_ids = self._solved_ids(self._ensure_submissions(user_id))
        unsolved = [p for p in self.problems if p["id"] not in solved_ids]

        return [
            {
                "problem": problem,
                "reason": self._recommendation_reason(problem),
                "priority": self._rng.choice(("High", "Medium", "Low")),
                "estimatedDifficulty": self._rng.randint(1, 10),
                "topics": problem["topics"],
                "expectedLearning": [f"Improve {topic} skills" for topic in problem["topics"]],
            }
            for problem in self._rng.sample(unsolved, min(count, len(unsolved)))
        ]

    def _recommendation_reason(self, problem: Dict[str, Any]) -> str:
        reasons = [
            f"Strengthen your {problem['topics'][0]} skills",
            f"Popular at {problem['companies'][0]}",
            f"Good practice for {problem['difficulty']} level problems",
            f"High acceptance rate ({round(problem['acRate'] * 100)}%)",
            "Commonly asked in interviews",
        ]
        return self._rng.choice(reasons)

    def search_problems(self, query: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Match ``query`` against titles and topics, then apply ``filters``.

        Recognised filters: ``difficulty``, ``topics`` and ``companies`` (lists),
        ``isPaid`` (bool), ``minAcceptanceRate`` and ``maxAcceptanceRate``.
        """
        needle = query.lower()
        results = [
            p for p in self.problems
            if needle in p["title"].lower() or any(needle in topic.lower() for topic in p["topics"])
        ]

        filters = filters or {}
        if filters.get("difficulty"):
            results = [p for p in results if p["difficulty"] in filters["difficulty"]]
        if filters.get("topics"):
            wanted = set(filters["topics"])
            results = [p for p in results if wanted.intersection(p["topics"])]
        if filters.get("companies"):
            wanted = set(filters["companies"])
            results = [p for p in results if wanted.intersection(p["companies"])]
        if filters.get("isPaid") is not None:
            results = [p for p in results if p["isPaid"] == filters["isPaid"]]
        if filters.get("minAcceptanceRate") is not None:
            results = [p for p in results if p["acRate"] >= filters["minAcceptanceRate"]]
        if filters.get("maxAcceptanceRate") is not None:
            results = [p for p in results if p["acRate"] <= filters["maxAcceptanceRate"]]

        return results[:SEARCH_LIMIT]

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def _overall_stats(
        self,
        submissions: List[Dict[str, Any]],
        solved_ids: Set[int],
        streak_info: Dict[str, Any],
    ) -> Dict[str, Any]:
        accepted = [s for s in submissions if s["status"] == ACCEPTED]
        avg_runtime = sum(s["runtime"] for s in accepted) / len(accepted) if accepted else 0.0
        total_solved = len(solved_ids & set(self._by_id))

        return {
            "totalSolved": total_solved,
            "totalProblems": len(self.problems),
            "progressPercentage": _ratio(total_solved, len(self.problems)),
            "currentStreak": streak_info["currentStreak"],
            "maxStreak": streak_info["maxStreak"],
            "ranking": self._rng.randint(1000, 100999),
            "contestRating": self._rng.randint(1200, 2199),
            "difficultyStats": self._difficulty_stats(solved_ids),
            "accuracyRate": _ratio(len(accepted), len(submissions)),
            "avgSolveTime": avg_runtime / 1000 / 60,
        }

    def _difficulty_stats(self, solved_ids: Set[int]) -> Dict[str, Dict[str, Any]]:
        counts = _difficulty_counter()
        for problem in self.problems:
            bucket = counts[problem["difficulty"].lower()]
            bucket["total"] += 1
            if problem["id"] in solved_ids:
                bucket["solved"] += 1
        return {
            level: {**bucket, "percentage": _ratio(bucket["solved"], bucket["total"])}
            for level, bucket in counts.items()
        }

    def _topic_progress(self, submissions: List[Dict[str, Any]], solved_ids: Set[int]) -> List[Dict[str, Any]]:
        recent: Dict[str, List[Dict[str, Any]]] = {topic: [] for topic in TOPICS}
        for submission in submissions[:20]:
            problem = self._by_id.get(submission["problemId"])
            if not problem:
                continue
            for topic in problem["topics"]:
                if len(recent[topic]) < 5:
                    recent[topic].append(submission)

        attempts_by_problem: Dict[int, int] = {}
        for submission in submissions:
            attempts_by_problem[submission["problemId"]] = attempts_by_problem.get(submission["problemId"], 0) + 1

        progress = []
        for topic in TOPICS:
            problems = self._by_topic.get(topic, [])
            counts = _difficulty_counter()
            solved = 0
            attempted = []
            for problem in problems:
                bucket = counts[problem["difficulty"].lower()]
                bucket["total"] += 1
                if problem["id"] in solved_ids:
                    solved += 1
                    bucket["solved"] += 1
                if problem["id"] in attempts_by_problem:
                    attempted.append(attempts_by_problem[problem["id"]])

            progress.append(
                {
                    "topicName": topic,
                    "totalProblems": len(problems),
                    "solvedProblems": solved,
                    "easyCount": counts["easy"],
                    "mediumCount": counts["medium"],
                    "hardCount": counts["hard"],
                    "progressPercentage": _ratio(solved, len(problems)),
                    "lastPracticed": recent[topic][0]["submissionTime"] if recent[topic] else to_iso(self._clock()),
                    "averageAcceptanceRate": self._topic_acceptance.get(topic, 0.0),
                    "recentSubmissions": recent[topic],
                    "averageAttempts": sum(attempted) / len(attempted) if attempted else 0.0,
                    "timeSpent": self._rng.randint(60, 359),
                }
            )
        return progress

    def _company_progress(self, solved_ids: Set[int]) -> List[Dict[str, Any]]:
        progress = []
        for company in COMPANIES:
            problems = self._by_company.get(company, [])
            if not problems:
                continue
            counts = _difficulty_counter()
            solved = 0
            for problem in problems:
                bucket = counts[problem["difficulty"].lower()]
                bucket["total"] += 1
                if problem["id"] in solved_ids:
                    solved += 1
                    bucket["solved"] += 1
            progress.append(
                {
                    "companyName": company,
                    "totalProblems": len(problems),
                    "solvedProblems": solved,
                    "easyCount": counts["easy"],
                    "mediumCount": counts["medium"],
                    "hardCount": counts["hard"],
                    "progressPercentage": _ratio(solved, len(problems)),
                    "lastPracticed": to_iso(self._clock()),
                    "frequency": company_frequency(company),
                }
            )
        progress.sort(key=lambda entry: entry["totalProblems"], reverse=True)
        return progress[:COMPANY_PROGRESS_LIMIT]

    def _recent_activity(self, submissions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        activities: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
        for submission in submissions[:ACTIVITY_SUBMISSIONS]:
            day = iso_date(submission["submissionTime"])
            activity = activities.setdefault(
                day,
                {
                    "date": day,
                    "problemsSolved": 0,
                    "timeSpent": 0,
                    "topics": [],
                    "submissions": [],
                    "achievements": [],
                },
            )
            activity["submissions"].append(submission)
            if submission["status"] == ACCEPTED:
                activity["problemsSolved"] += 1
            activity["timeSpent"] += self._rng.randint(15, 59)

            problem = self._by_id.get(submission["problemId"])
            if problem:
                for topic in problem["topics"]:
                    if topic not in activity["topics"]:
                        activity["topics"].append(topic)

        ordered = sorted(activities.values(), key=lambda a: a["date"], reverse=True)
        return ordered[:ACTIVITY_DAYS]

    def _streak_info(self, submissions: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Scan the distinct solving days, newest first, for consecutive runs."""
        accepted = sorted(
            (s for s in submissions if s["status"] == ACCEPTED),
            key=lambda s: s["submissionTime"],
            reverse=True,
        )
        today = self._clock().date()
        # Future-dated submissions never count towards a streak
        solved_days = {date.fromisoformat(iso_date(s["submissionTime"])) for s in accepted}
        days: List[date] = sorted((day for day in solved_days if day <= today), reverse=True)

        max_streak = 0
        run = 0
        previous: Optional[date] = None
        for day in days:
            run = run + 1 if previous is not None and (previous - day).days == 1 else 1
            max_streak = max(max_streak, run)
            previous = day

        current_streak = 0
        if days and (today - days[0]).days <= 1:
            current_streak = 1
            for newer, older in zip(days, days[1:]):
                if (newer - older).days != 1:
                    break
                current_streak += 1

        return {
            "currentStreak": current_streak,
            "maxStreak": max_streak,
            "streakDates": [day.isoformat() for day in days[:current_streak]],
            "lastSolvedDate": accepted[0]["submissionTime"] if accepted else to_iso(self._clock()),
        }

    def _weakest_topics(self, topic_progress: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        candidates = [tp for tp in topic_progress if tp["totalProblems"] > MIN_TOPIC_SIZE]
        candidates.sort(key=lambda tp: tp["progressPercentage"])

        weakest = []
        for entry in candidates[:3]:
            problems = self._by_topic.get(entry["topicName"], [])
            weakest.append(
                {
                    "topicName": entry["topicName"],
                    "progressPercentage": entry["progressPercentage"],
                    "problemsToImprove": [p for p in problems if p["difficulty"] == "Easy"][:5],
                    "suggestedOrder": [p["id"] for p in sorted(problems, key=lambda p: p["acRate"])[:10]],
                }
            )
        return weakest

    @staticmethod
    def _strongest_topics(topic_progress: List[Dict[str, Any]]) -> List[str]:
        candidates = [tp for tp in topic_progress if tp["totalProblems"] > MIN_TOPIC_SIZE]
        candidates.sort(key=lambda tp: tp["progressPercentage"], reverse=True)
        return [tp["topicName"] for tp in candidates[:5]]
