"""
Leaderboard data models for team and per-category rankings.

Provides immutable data transfer objects produced by the leaderboard ranker and
archived as monthly results.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Generic, List, Optional, TypeVar

from tcbot.data_models.summary import TeamSummary, UserSummary
from tcbot.database.models import Category

E = TypeVar("E")


@dataclass(frozen=True)
class LeaderboardEntry(Generic[E]):
    """Single leaderboard row wrapping a team or user summary."""
    summary: E
    rank: int
    diff_to_leader: int
    diff_to_next: int
    team_name: Optional[str] = None

    @property
    def multiplied_points(self) -> int:
        return self.summary.multiplied_points

    def to_dict(self) -> dict:
        return {
            "summary": self.summary.to_dict(),
            "rank": self.rank,
            "diff_to_leader": self.diff_to_leader,
            "diff_to_next": self.diff_to_next,
            "team_name": self.team_name,
        }

    @classmethod
    def from_dict(cls, data: dict, summary_type) -> "LeaderboardEntry":
        return cls(
            summary=summary_type.from_dict(data["summary"]),
            rank=data["rank"],
            diff_to_leader=data["diff_to_leader"],
            diff_to_next=data["diff_to_next"],
            team_name=data.get("team_name"),
        )


@dataclass(frozen=True)
class MonthlyResult:
    """Leaderboards captured at the end of a competition month."""
    team_leaderboard: List[LeaderboardEntry] = field(default_factory=list)
    user_category_leaderboard: Dict[Category, List[LeaderboardEntry]] = field(default_factory=dict)
    utc_timestamp: Optional[datetime] = None

    @classmethod
    def empty(cls) -> "MonthlyResult":
        return cls()

    def has_no_stats(self) -> bool:
        """True when no team and no user scored any points this month."""
        teams_have_stats = any(entry.multiplied_points > 0 for entry in self.team_leaderboard)
        users_have_stats = any(
            entry.multiplied_points > 0
            for entries in self.user_category_leaderboard.values()
            for entry in entries
        )
        return not teams_have_stats and not users_have_stats

    def to_json(self) -> str:
        return json.dumps({
            "team_leaderboard": [entry.to_dict() for entry in self.team_leaderboard],
            "user_category_leaderboard": {
                category.name: [entry.to_dict() for entry in entries]
                for category, entries in self.user_category_leaderboard.items()
            },
            "utc_timestamp": self.utc_timestamp.isoformat() if self.utc_timestamp else None,
        })

    @classmethod
    def from_json(cls, raw: str) -> "MonthlyResult":
        data = json.loads(raw)
        timestamp = data.get("utc_timestamp")
        return cls(
            team_leaderboard=[
                LeaderboardEntry.from_dict(entry, TeamSummary) for entry in data.get("team_leaderboard", [])
            ],
            user_category_leaderboard={
                Category.get(name): [LeaderboardEntry.from_dict(entry, UserSummary) for entry in entries]
                for name, entries in data.get("user_category_leaderboard", {}).items()
            },
            utc_timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
        )
