"""
Immutable stats value types for the Team Competition.

Every transformation returns a new instance; nothing here is mutated in place.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from tcbot.utils.exceptions import InvalidStatsOffsetError


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class StatsOffset:
    """Manual correction applied on top of a user's reconciled stats."""
    points_offset: int = 0
    multiplied_points_offset: int = 0
    units_offset: int = 0

    @classmethod
    def create(cls, points_offset: int = 0, multiplied_points_offset: int = 0, units_offset: int = 0) -> "StatsOffset":
        return cls(points_offset, multiplied_points_offset, units_offset)

    @classmethod
    def empty(cls) -> "StatsOffset":
        return cls()

    @classmethod
    def from_competition_stats(cls, stats: "CompetitionStats") -> "StatsOffset":
        """Offset carrying a user's current stats forward, used when their stats are restarted."""
        return cls(stats.points, stats.multiplied_points, stats.units)

    def is_empty(self) -> bool:
        return self.points_offset == 0 and self.multiplied_points_offset == 0 and self.units_offset == 0

    def is_missing_points_or_multiplied_points(self) -> bool:
        """True when exactly one of points/multiplied points is set."""
        return (self.points_offset == 0) != (self.multiplied_points_offset == 0)

    def update_with_hardware_multiplier(self, multiplier: float) -> "StatsOffset":
        """
        Derive whichever of points/multiplied points is missing using the hardware multiplier.

        An empty offset, or one with both halves already set, is returned unchanged.

        Raises:
            InvalidStatsOffsetError: If a derivation is needed and the multiplier is not positive
        """
        if self.is_empty() or not self.is_missing_points_or_multiplied_points():
            return self

        if multiplier <= 0:
            raise InvalidStatsOffsetError(multiplier)

        if self.points_offset == 0:
            return replace(self, points_offset=round_half_up(self.multiplied_points_offset / multiplier))
        return replace(self, multiplied_points_offset=round_half_up(self.points_offset * multiplier))

    def add(self, other: "StatsOffset") -> "StatsOffset":
        return StatsOffset(
            self.points_offset + other.points_offset,
            self.multiplied_points_offset + other.multiplied_points_offset,
            self.units_offset + other.units_offset,
        )


@dataclass(frozen=True)
class UserStats:
    """Raw cumulative points/units for a user, as reported by Folding@Home (no multiplier)."""
    user_id: int
    timestamp: Optional[datetime]
    points: int = 0
    units: int = 0

    @classmethod
    def empty(cls, user_id: int) -> "UserStats":
        return cls(user_id, None, 0, 0)

    def is_empty(self) -> bool:
        return self.points == 0 and self.units == 0


@dataclass(frozen=True)
class CompetitionStats:
    """A user's Team Competition stats at a point in time."""
    user_id: int
    timestamp: Optional[datetime]
    points: int = 0
    multiplied_points: int = 0
    units: int = 0

    @classmethod
    def create(cls, user_id: int, timestamp: Optional[datetime], points: int,
               multiplied_points: int, units: int) -> "CompetitionStats":
        return cls(user_id, timestamp, points, multiplied_points, units)

    @classmethod
    def create_with_multiplier(cls, raw_stats: UserStats, multiplier: float) -> "CompetitionStats":
        return cls(
            raw_stats.user_id,
            raw_stats.timestamp,
            raw_stats.points,
            round_half_up(raw_stats.points * multiplier),
            raw_stats.units,
        )

    @classmethod
    def empty(cls, user_id: int) -> "CompetitionStats":
        return cls(user_id, None, 0, 0, 0)

    def is_empty(self) -> bool:
        return self.points == 0 and self.multiplied_points == 0 and self.units == 0

    def update_with_offsets(self, offset: StatsOffset, multiplier: float) -> "CompetitionStats":
        """
        Apply a manual offset, clamping every value at zero.

        The offset is first completed with `update_with_hardware_multiplier`,
        then only its multiplied points half is applied: multiplied points
        gain `multiplied_points_offset` and points are recalculated from the
        offset multiplied points, so both stay consistent with the hardware
        multiplier. The offset's `points_offset` is not added directly.
        """
        if offset.is_empty():
            return self
        if multiplier <= 0:
            raise InvalidStatsOffsetError(multiplier)

        derived = offset.update_with_hardware_multiplier(multiplier)
        multiplied_points = max(self.multiplied_points + derived.multiplied_points_offset, 0)
        points = max(round_half_up(multiplied_points / multiplier), 0)
        units = max(self.units + derived.units_offset, 0)
        return replace(self, points=points, multiplied_points=multiplied_points, units=units)

    def add(self, other: "CompetitionStats") -> "CompetitionStats":
        return replace(
            self,
            points=self.points + other.points,
            multiplied_points=self.multiplied_points + other.multiplied_points,
            units=self.units + other.units,
        )


@dataclass(frozen=True)
class RetiredUserStats:
    """Frozen stats of a user who left a team, still counted for that team."""
    retired_user_id: int
    team_id: int
    display_name: str
    stats: CompetitionStats

    EMPTY_RETIRED_USER_ID = 0

    @classmethod
    def create_without_id(cls, team_id: int, display_name: str, stats: CompetitionStats) -> "RetiredUserStats":
        if not display_name or not display_name.strip():
            raise ValueError("Retired user display name cannot be blank")
        return cls(cls.EMPTY_RETIRED_USER_ID, team_id, display_name, stats)

    def update_with_id(self, retired_user_id: int) -> "RetiredUserStats":
        return replace(self, retired_user_id=retired_user_id)

    @property
    def has_id(self) -> bool:
        return self.retired_user_id != self.EMPTY_RETIRED_USER_ID
