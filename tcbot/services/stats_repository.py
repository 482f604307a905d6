"""
Cached access to the stats tables.

Reads go through the StatsCaches regions before falling back to storage, and
every write keeps the matching cache region consistent.
"""

import logging
from datetime import datetime
from typing import List, Optional

from tcbot.data_models.leaderboard import MonthlyResult
from tcbot.data_models.stats import CompetitionStats, RetiredUserStats, StatsOffset, UserStats
from tcbot.database.stats_operations import StatsOperations
from tcbot.services.cache import StatsCaches

logger = logging.getLogger(__name__)


class StatsRepository:
    """Stats storage with write-through caching."""
    
    def __init__(self, stats_operations: StatsOperations, caches: StatsCaches):
        self.storage = stats_operations
        self.caches = caches
    
    async def create_initial_stats(self, stats: UserStats) -> UserStats:
        """Store a new baseline; the user's reconciled stats must be recalculated against it."""
        await self.storage.create_initial_stats(stats)
        await self.caches.initial_stats.put(stats.user_id, stats)
        await self.caches.tc_stats.invalidate(stats.user_id)
        return stats
    
    async def get_initial_stats(self, user_id: int) -> Optional[UserStats]:
        cached = await self.caches.initial_stats.get(user_id)
        if cached is not None:
            return cached
        stats = await self.storage.get_initial_stats(user_id)
        if stats is not None:
            await self.caches.initial_stats.put(user_id, stats)
        return stats
    
    async def create_total_stats(self, stats: UserStats) -> UserStats:
        await self.storage.create_total_stats(stats)
        await self.caches.total_stats.put(stats.user_id, stats)
        return stats
    
    async def get_total_stats(self, user_id: int) -> Optional[UserStats]:
        cached = await self.caches.total_stats.get(user_id)
        if cached is not None:
            return cached
        stats = await self.storage.get_total_stats(user_id)
        if stats is not None:
            await self.caches.total_stats.put(user_id, stats)
        return stats
    
    async def get_offset_stats(self, user_id: int) -> StatsOffset:
        cached = await self.caches.offset_stats.get(user_id)
        if cached is not None:
            return cached
        offset = await self.storage.get_offset_stats(user_id)
        await self.caches.offset_stats.put(user_id, offset)
        return offset
    
    async def add_offset_stats(self, user_id: int, offset: StatsOffset) -> StatsOffset:
        combined = await self.storage.add_offset_stats(user_id, offset)
        await self.caches.offset_stats.put(user_id, combined)
        await self.caches.tc_stats.invalidate(user_id)
        return combined
    
    async def delete_offset_stats(self, user_id: int):
        await self.storage.delete_offset_stats(user_id)
        await self.caches.offset_stats.invalidate(user_id)
        await self.caches.tc_stats.invalidate(user_id)
    
    async def delete_all_offset_stats(self):
        await self.storage.delete_all_offset_stats()
        await self.caches.offset_stats.invalidate_all()
        logger.info("Cleared all offset stats")
    
    async def create_hourly_tc_stats(self, stats: CompetitionStats) -> CompetitionStats:
        await self.storage.create_hourly_tc_stats(stats)
        await self.caches.tc_stats.put(stats.user_id, stats)
        return stats
    
    async def get_cached_tc_stats(self, user_id: int) -> Optional[CompetitionStats]:
        return await self.caches.tc_stats.get(user_id)
    
    async def cache_tc_stats(self, stats: CompetitionStats):
        await self.caches.tc_stats.put(stats.user_id, stats)
    
    async def get_hourly_tc_stats(self, user_id: int) -> Optional[CompetitionStats]:
        return await self.storage.get_hourly_tc_stats(user_id)
    
    async def get_hourly_tc_stats_between(self, user_id: int, start: datetime, end: datetime) -> List[CompetitionStats]:
        return await self.storage.get_hourly_tc_stats_between(user_id, start, end)
    
    async def get_last_hourly_tc_stats_before(self, user_id: int, before: datetime) -> Optional[CompetitionStats]:
        return await self.storage.get_last_hourly_tc_stats_before(user_id, before)
    
    async def create_retired_user_stats(self, retired: RetiredUserStats) -> RetiredUserStats:
        created = await self.storage.create_retired_stats(retired)
        await self.caches.competition_summary.invalidate_all()
        return created
    
    async def get_retired_user_stats_for_team(self, team_id: int) -> List[RetiredUserStats]:
        return await self.storage.get_retired_stats_for_team(team_id)
    
    async def get_all_retired_user_stats(self) -> List[RetiredUserStats]:
        return await self.storage.get_all_retired_stats()
    
    async def delete_all_retired_user_stats(self):
        await self.storage.delete_all_retired_stats()
        await self.caches.competition_summary.invalidate_all()
        logger.info("Deleted all retired user stats")
    
    async def create_monthly_result(self, result: MonthlyResult) -> MonthlyResult:
        return await self.storage.create_monthly_result(result)
    
    async def get_monthly_result(self, month: int, year: int) -> Optional[MonthlyResult]:
        return await self.storage.get_monthly_result(month, year)
