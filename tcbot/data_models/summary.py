"""
Competition summary data models.

Read-only aggregate views built fresh on every summary computation and only
cached for performance.
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from tcbot.data_models.stats import CompetitionStats, RetiredUserStats
from tcbot.database.models import Category
from tcbot.utils.ranking import RankingUtility


@dataclass(frozen=True)
class UserSummary:
    """Active user's stats within a team."""
    user_id: int
    display_name: str
    folding_user_name: str
    hardware_name: str
    multiplier: float
    category: Category
    points: int
    multiplied_points: int
    units: int
    rank_in_team: int = 0
    profile_link: Optional[str] = None
    live_stats_link: Optional[str] = None
    is_captain: bool = False

    @classmethod
    def from_user(cls, user, stats: CompetitionStats) -> "UserSummary":
        return cls(
            user_id=user.id,
            display_name=user.display_name,
            folding_user_name=user.folding_user_name,
            hardware_name=user.hardware.display_name,
            multiplier=user.hardware.multiplier,
            category=user.category,
            points=stats.points,
            multiplied_points=stats.multiplied_points,
            units=stats.units,
            profile_link=user.profile_link,
            live_stats_link=user.live_stats_link,
            is_captain=bool(user.is_captain),
        )

    def with_rank(self, rank: int) -> "UserSummary":
        return replace(self, rank_in_team=rank)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "display_name": self.display_name,
            "folding_user_name": self.folding_user_name,
            "hardware_name": self.hardware_name,
            "multiplier": self.multiplier,
            "category": self.category.name,
            "points": self.points,
            "multiplied_points": self.multiplied_points,
            "units": self.units,
            "rank_in_team": self.rank_in_team,
            "profile_link": self.profile_link,
            "live_stats_link": self.live_stats_link,
            "is_captain": self.is_captain,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserSummary":
        return cls(**{**data, "category": Category.get(data.get("category"))})


@dataclass(frozen=True)
class RetiredUserSummary:
    """Retired user's frozen stats, still counted for their former team."""
    retired_user_id: int
    display_name: str
    points: int
    multiplied_points: int
    units: int
    rank_in_team: int = 0

    @classmethod
    def from_retired(cls, retired: RetiredUserStats) -> "RetiredUserSummary":
        return cls(
            retired_user_id=retired.retired_user_id,
            display_name=retired.display_name,
            points=retired.stats.points,
            multiplied_points=retired.stats.multiplied_points,
            units=retired.stats.units,
        )

    def with_rank(self, rank: int) -> "RetiredUserSummary":
        return replace(self, rank_in_team=rank)

    def to_dict(self) -> dict:
        return {
            "retired_user_id": self.retired_user_id,
            "display_name": self.display_name,
            "points": self.points,
            "multiplied_points": self.multiplied_points,
            "units": self.units,
            "rank_in_team": self.rank_in_team,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RetiredUserSummary":
        return cls(**data)


@dataclass(frozen=True)
class TeamSummary:
    team_id: int
    team_name: str
    forum_link: Optional[str]
    captain_name: Optional[str]
    active_users: Tuple[UserSummary, ...] = ()
    retired_users: Tuple[RetiredUserSummary, ...] = ()
    rank: int = 0

    @classmethod
    def create(cls, team_id: int, team_name: str, forum_link: Optional[str], captain_name: Optional[str],
               active_users, retired_users) -> "TeamSummary":
        """Build a team summary, ranking active and retired users together by multiplied points."""
        ranked = RankingUtility.competition_ranks(
            list(active_users) + list(retired_users),
            lambda summary: summary.multiplied_points,
        )
        ranked_active = tuple(s.with_rank(r) for r, s in ranked if isinstance(s, UserSummary))
        ranked_retired = tuple(s.with_rank(r) for r, s in ranked if isinstance(s, RetiredUserSummary))
        return cls(team_id, team_name, forum_link, captain_name, ranked_active, ranked_retired)

    @property
    def points(self) -> int:
        return sum(u.points for u in self.active_users) + sum(u.points for u in self.retired_users)

    @property
    def multiplied_points(self) -> int:
        return (sum(u.multiplied_points for u in self.active_users)
                + sum(u.multiplied_points for u in self.retired_users))

    @property
    def units(self) -> int:
        return sum(u.units for u in self.active_users) + sum(u.units for u in self.retired_users)

    def with_rank(self, rank: int) -> "TeamSummary":
        return replace(self, rank=rank)

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "forum_link": self.forum_link,
            "captain_name": self.captain_name,
            "active_users": [u.to_dict() for u in self.active_users],
            "retired_users": [u.to_dict() for u in self.retired_users],
            "rank": self.rank,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TeamSummary":
        return cls(
            team_id=data["team_id"],
            team_name=data["team_name"],
            forum_link=data.get("forum_link"),
            captain_name=data.get("captain_name"),
            active_users=tuple(UserSummary.from_dict(u) for u in data.get("active_users", [])),
            retired_users=tuple(RetiredUserSummary.from_dict(u) for u in data.get("retired_users", [])),
            rank=data.get("rank", 0),
        )


@dataclass(frozen=True)
class CompetitionSummary:
    teams: Tuple[TeamSummary, ...] = ()

    @classmethod
    def create(cls, teams) -> "CompetitionSummary":
        ranked = RankingUtility.competition_ranks(list(teams), lambda team: team.multiplied_points)
        return cls(tuple(team.with_rank(rank) for rank, team in ranked))

    @classmethod
    def empty(cls) -> "CompetitionSummary":
        return cls()

    @property
    def points(self) -> int:
        return sum(team.points for team in self.teams)

    @property
    def multiplied_points(self) -> int:
        return sum(team.multiplied_points for team in self.teams)

    @property
    def units(self) -> int:
        return sum(team.units for team in self.teams)
