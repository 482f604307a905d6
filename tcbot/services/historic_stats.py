"""
Historic hourly, daily and monthly stats rollups.

Hourly TC stats are cumulative within a month, so the stats gained during a
period are the last cumulative value in that period minus the last value
of the period before it.
"""

import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Optional

from tcbot.data_models.historic import HistoricStats
from tcbot.data_models.stats import CompetitionStats
from tcbot.services.base import BaseService
from tcbot.utils.date_utils import (
    start_of_day, end_of_day, start_of_month, start_of_next_month
)

logger = logging.getLogger(__name__)


def _latest_per_period(rows: List[CompetitionStats], period_of: Callable[[datetime], datetime]) -> Dict[datetime, CompetitionStats]:
    """Last cumulative stats of each period, rows must be ordered oldest first"""
    latest = {}
    for row in rows:
        latest[period_of(row.timestamp)] = row
    return latest


def _diff(period: datetime, current: Optional[CompetitionStats], previous: Optional[CompetitionStats]) -> HistoricStats:
    if current is None:
        return HistoricStats(period)
    if previous is None:
        return HistoricStats(period, current.points, current.multiplied_points, current.units)
    return HistoricStats(
        period,
        max(current.points - previous.points, 0),
        max(current.multiplied_points - previous.multiplied_points, 0),
        max(current.units - previous.units, 0),
    )


class HistoricStatsService(BaseService):
    """Read-only rollups over the stored hourly TC stats."""
    
    async def get_hourly_stats(self, user_id: int, day: date) -> List[HistoricStats]:
        """Stats gained in each hour of a day that has data"""
        day_start = start_of_day(day)
        rows = await self.stats.get_hourly_tc_stats_between(user_id, day_start, end_of_day(day))
        logger.debug(f"Found {len(rows)} hourly TC stats rows for user {user_id} on {day}")
        previous = await self._previous_in_month(user_id, day_start)
        
        per_hour = _latest_per_period(rows, lambda ts: ts.replace(minute=0, second=0, microsecond=0))
        return self._diff_periods(per_hour, previous)
    
    async def get_daily_stats(self, user_id: int, month: int, year: int) -> List[HistoricStats]:
        """Stats gained on each day of a month that has data"""
        rows = await self.stats.get_hourly_tc_stats_between(
            user_id, start_of_month(year, month), start_of_next_month(year, month)
        )
        per_day = _latest_per_period(rows, lambda ts: datetime(ts.year, ts.month, ts.day))
        # Each month starts from zero, so the first day has no previous value
        return self._diff_periods(per_day, None)
    
    async def get_monthly_stats(self, user_id: int, year: int) -> List[HistoricStats]:
        """Total stats of each month of a year that has data"""
        rows = await self.stats.get_hourly_tc_stats_between(user_id, datetime(year, 1, 1), datetime(year + 1, 1, 1))
        per_month = _latest_per_period(rows, lambda ts: datetime(ts.year, ts.month, 1))
        return [_diff(period, per_month[period], None) for period in sorted(per_month)]
    
    async def get_team_monthly_stats(self, team_id: int, year: int) -> List[HistoricStats]:
        """Monthly stats of every user currently on a team, combined"""
        combined: List[HistoricStats] = []
        for user in await self.db.get_users_on_team(team_id):
            combined = HistoricStats.combine(combined, await self.get_monthly_stats(user.id, year))
        return combined
    
    async def _previous_in_month(self, user_id: int, before: datetime) -> Optional[CompetitionStats]:
        """Last stats earlier in the same month, if any"""
        if before.day == 1 and before.hour == 0:
            return None
        previous = await self.stats.get_last_hourly_tc_stats_before(user_id, before)
        if previous and (previous.timestamp.year, previous.timestamp.month) == (before.year, before.month):
            return previous
        return None
    
    @staticmethod
    def _diff_periods(per_period: Dict[datetime, CompetitionStats], previous: Optional[CompetitionStats]) -> List[HistoricStats]:
        results = []
        for period in sorted(per_period):
            current = per_period[period]
            results.append(_diff(period, current, previous))
            previous = current
        return results
