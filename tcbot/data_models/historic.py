"""
Historic rollup data models for hourly, daily and monthly stats.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, List


@dataclass(frozen=True)
class HistoricStats:
    """Stats gained during one period (hour, day or month) starting at `period_start`."""
    period_start: datetime
    points: int = 0
    multiplied_points: int = 0
    units: int = 0

    def add(self, other: "HistoricStats") -> "HistoricStats":
        return replace(
            self,
            points=self.points + other.points,
            multiplied_points=self.multiplied_points + other.multiplied_points,
            units=self.units + other.units,
        )

    @staticmethod
    def combine(first: Iterable["HistoricStats"], second: Iterable["HistoricStats"]) -> List["HistoricStats"]:
        """Sum two rollups period by period, keeping periods that only appear in one of them."""
        combined = {}
        for stats in list(first) + list(second):
            existing = combined.get(stats.period_start)
            combined[stats.period_start] = existing.add(stats) if existing else stats
        return [combined[period] for period in sorted(combined)]
