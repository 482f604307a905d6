"""
Stats storage operations for the Team Competition.

Persists and reads the stats tables (initial, total, offset, hourly TC,
retired and monthly results), converting between ORM rows and the immutable
stats value types. Callers never see ORM rows for stats.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, delete

from tcbot.data_models.leaderboard import MonthlyResult
from tcbot.data_models.stats import CompetitionStats, RetiredUserStats, StatsOffset, UserStats
from tcbot.database.models import (
    UserInitialStats, UserTotalStats, UserOffsetTcStats, UserTcStatsHourly,
    RetiredUserStatsRecord, MonthlyResultRecord
)
from tcbot.utils.date_utils import utc_now
from tcbot.utils.logger import setup_logger

logger = setup_logger(__name__)


class StatsOperations:
    """Storage collaborator for every stats table."""
    
    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger
    
    # Initial stats
    async def create_initial_stats(self, stats: UserStats) -> UserStats:
        await self._create_user_stats(UserInitialStats, stats)
        self.logger.debug(f"Created initial stats for user {stats.user_id}: {stats}")
        return stats
    
    async def get_initial_stats(self, user_id: int) -> Optional[UserStats]:
        return await self._get_latest_user_stats(UserInitialStats, user_id)
    
    # Total stats
    async def create_total_stats(self, stats: UserStats) -> UserStats:
        await self._create_user_stats(UserTotalStats, stats)
        return stats
    
    async def get_total_stats(self, user_id: int) -> Optional[UserStats]:
        return await self._get_latest_user_stats(UserTotalStats, user_id)
    
    async def _create_user_stats(self, table, stats: UserStats):
        async with self.db.get_session() as session:
            session.add(table(
                user_id=stats.user_id,
                utc_timestamp=stats.timestamp or utc_now(),
                points=stats.points,
                units=stats.units
            ))
            await session.commit()
    
    async def _get_latest_user_stats(self, table, user_id: int) -> Optional[UserStats]:
        async with self.db.get_session() as session:
            result = await session.execute(
                select(table)
                .where(table.user_id == user_id)
                .order_by(table.utc_timestamp.desc(), table.id.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            if not row:
                return None
            return UserStats(row.user_id, row.utc_timestamp, row.points, row.units)
    
    # Offsets
    async def get_offset_stats(self, user_id: int) -> StatsOffset:
        """Get a user's offset, or an empty offset if none is stored"""
        async with self.db.get_session() as session:
            row = await session.get(UserOffsetTcStats, user_id)
            if not row:
                return StatsOffset.empty()
            return StatsOffset(row.offset_points, row.offset_multiplied_points, row.offset_units)
    
    async def add_offset_stats(self, user_id: int, offset: StatsOffset) -> StatsOffset:
        """Add an offset onto any existing offset for the user, returning the stored total"""
        async with self.db.get_session() as session:
            row = await session.get(UserOffsetTcStats, user_id)
            if row:
                combined = StatsOffset(row.offset_points, row.offset_multiplied_points, row.offset_units).add(offset)
                row.offset_points = combined.points_offset
                row.offset_multiplied_points = combined.multiplied_points_offset
                row.offset_units = combined.units_offset
                row.utc_timestamp = utc_now()
            else:
                combined = offset
                session.add(UserOffsetTcStats(
                    user_id=user_id,
                    utc_timestamp=utc_now(),
                    offset_points=offset.points_offset,
                    offset_multiplied_points=offset.multiplied_points_offset,
                    offset_units=offset.units_offset
                ))
            await session.commit()
        self.logger.debug(f"Offset for user {user_id} is now {combined}")
        return combined
    
    async def delete_offset_stats(self, user_id: int):
        async with self.db.get_session() as session:
            await session.execute(delete(UserOffsetTcStats).where(UserOffsetTcStats.user_id == user_id))
            await session.commit()
    
    async def delete_all_offset_stats(self):
        async with self.db.get_session() as session:
            await session.execute(delete(UserOffsetTcStats))
            await session.commit()
    
    # Hourly TC stats
    async def create_hourly_tc_stats(self, stats: CompetitionStats) -> CompetitionStats:
        async with self.db.get_session() as session:
            session.add(UserTcStatsHourly(
                user_id=stats.user_id,
                utc_timestamp=stats.timestamp or utc_now(),
                points=stats.points,
                multiplied_points=stats.multiplied_points,
                units=stats.units
            ))
            await session.commit()
        return stats
    
    async def get_hourly_tc_stats(self, user_id: int) -> Optional[CompetitionStats]:
        """Get the most recent hourly TC stats for a user"""
        async with self.db.get_session() as session:
            result = await session.execute(
                select(UserTcStatsHourly)
                .where(UserTcStatsHourly.user_id == user_id)
                .order_by(UserTcStatsHourly.utc_timestamp.desc(), UserTcStatsHourly.id.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return self._to_competition_stats(row) if row else None
    
    async def get_hourly_tc_stats_between(self, user_id: int, start: datetime, end: datetime) -> List[CompetitionStats]:
        """Get hourly TC stats rows with start <= timestamp < end, oldest first"""
        async with self.db.get_session() as session:
            result = await session.execute(
                select(UserTcStatsHourly)
                .where(
                    UserTcStatsHourly.user_id == user_id,
                    UserTcStatsHourly.utc_timestamp >= start,
                    UserTcStatsHourly.utc_timestamp < end
                )
                .order_by(UserTcStatsHourly.utc_timestamp, UserTcStatsHourly.id)
            )
            return [self._to_competition_stats(row) for row in result.scalars().all()]
    
    async def get_last_hourly_tc_stats_before(self, user_id: int, before: datetime) -> Optional[CompetitionStats]:
        async with self.db.get_session() as session:
            result = await session.execute(
                select(UserTcStatsHourly)
                .where(UserTcStatsHourly.user_id == user_id, UserTcStatsHourly.utc_timestamp < before)
                .order_by(UserTcStatsHourly.utc_timestamp.desc(), UserTcStatsHourly.id.desc())
                .limit(1)
            )
            row = result.scalar_one_or_none()
            return self._to_competition_stats(row) if row else None
    
    @staticmethod
    def _to_competition_stats(row: UserTcStatsHourly) -> CompetitionStats:
        return CompetitionStats.create(row.user_id, row.utc_timestamp, row.points, row.multiplied_points, row.units)
    
    # Retired users
    async def create_retired_stats(self, retired: RetiredUserStats) -> RetiredUserStats:
        """Persist a retired user, returning it with its assigned ID"""
        async with self.db.get_session() as session:
            record = RetiredUserStatsRecord(
                team_id=retired.team_id,
                display_name=retired.display_name,
                utc_timestamp=retired.stats.timestamp or utc_now(),
                points=retired.stats.points,
                multiplied_points=retired.stats.multiplied_points,
                units=retired.stats.units
            )
            session.add(record)
            await session.commit()
            retired_user_id = record.id
        return retired.update_with_id(retired_user_id)
    
    async def get_retired_stats_for_team(self, team_id: int) -> List[RetiredUserStats]:
        async with self.db.get_session() as session:
            result = await session.execute(
                select(RetiredUserStatsRecord)
                .where(RetiredUserStatsRecord.team_id == team_id)
                .order_by(RetiredUserStatsRecord.id)
            )
            return [self._to_retired_stats(row) for row in result.scalars().all()]
    
    async def get_all_retired_stats(self) -> List[RetiredUserStats]:
        async with self.db.get_session() as session:
            result = await session.execute(select(RetiredUserStatsRecord).order_by(RetiredUserStatsRecord.id))
            return [self._to_retired_stats(row) for row in result.scalars().all()]
    
    async def delete_all_retired_stats(self):
        async with self.db.get_session() as session:
            await session.execute(delete(RetiredUserStatsRecord))
            await session.commit()
    
    @staticmethod
    def _to_retired_stats(row: RetiredUserStatsRecord) -> RetiredUserStats:
        stats = CompetitionStats.create(
            RetiredUserStats.EMPTY_RETIRED_USER_ID, row.utc_timestamp, row.points, row.multiplied_points, row.units
        )
        return RetiredUserStats(row.id, row.team_id, row.display_name, stats)
    
    # Monthly results
    async def create_monthly_result(self, result: MonthlyResult) -> MonthlyResult:
        """Store a monthly result, replacing any result already stored for that month"""
        timestamp = result.utc_timestamp or utc_now()
        async with self.db.get_session() as session:
            await session.execute(
                delete(MonthlyResultRecord).where(
                    MonthlyResultRecord.year == timestamp.year,
                    MonthlyResultRecord.month == timestamp.month
                )
            )
            session.add(MonthlyResultRecord(
                utc_timestamp=timestamp,
                year=timestamp.year,
                month=timestamp.month,
                result_json=result.to_json()
            ))
            await session.commit()
        return result
    
    async def get_monthly_result(self, month: int, year: int) -> Optional[MonthlyResult]:
        async with self.db.get_session() as session:
            result = await session.execute(
                select(MonthlyResultRecord).where(
                    MonthlyResultRecord.year == year,
                    MonthlyResultRecord.month == month
                )
            )
            row = result.scalar_one_or_none()
            return MonthlyResult.from_json(row.result_json) if row else None
