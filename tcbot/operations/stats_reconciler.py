"""
Stats reconciliation for the Team Competition.

Turns a user's raw cumulative stats into their competition stats for the
current period: subtract the initial baseline, apply the hardware multiplier,
then apply any manual offset.
"""

import logging
from typing import Optional

from tcbot.data_models.stats import CompetitionStats, StatsOffset, UserStats

logger = logging.getLogger(__name__)


class StatsReconciler:
    """Produces the authoritative current competition stats for a user."""
    
    def __init__(self, stats_repository):
        self.stats = stats_repository
    
    @staticmethod
    def reconcile(total_stats: UserStats, initial_stats: Optional[UserStats], multiplier: float,
                  offset: StatsOffset) -> CompetitionStats:
        """
        Calculate competition stats from raw stats.
        
        A missing baseline counts as the total itself, so a first observation
        yields zero. A total below its baseline contributes zero, never a
        negative amount.
        
        Args:
            total_stats: Latest raw cumulative stats
            initial_stats: Baseline from the start of the period, if any
            multiplier: Multiplier of the user's hardware
            offset: Manual offset for the user
            
        Returns:
            CompetitionStats for the user, timestamped like total_stats
        """
        baseline = initial_stats or total_stats
        period_stats = UserStats(
            total_stats.user_id,
            total_stats.timestamp,
            max(total_stats.points - baseline.points, 0),
            max(total_stats.units - baseline.units, 0),
        )
        competition_stats = CompetitionStats.create_with_multiplier(period_stats, multiplier)
        return competition_stats.update_with_offsets(offset, multiplier)
    
    async def reconcile_user(self, user, total_stats: UserStats) -> CompetitionStats:
        """Reconcile freshly pulled total stats against the user's stored baseline and offset."""
        initial_stats = await self.stats.get_initial_stats(user.id)
        offset = await self.stats.get_offset_stats(user.id)
        return self.reconcile(total_stats, initial_stats, user.hardware.multiplier, offset)
    
    async def get_current_stats(self, user) -> CompetitionStats:
        """
        Get a user's current competition stats without contacting Folding@Home.
        
        Uses the cached stats, then recalculates from the last stored total
        stats, then falls back to the last stored hourly stats. A user with no
        stats at all gets empty stats.
        """
        cached = await self.stats.get_cached_tc_stats(user.id)
        if cached is not None:
            return cached
        
        total_stats = await self.stats.get_total_stats(user.id)
        if total_stats is not None:
            stats = await self.reconcile_user(user, total_stats)
            await self.stats.cache_tc_stats(stats)
            return stats
        
        stored = await self.stats.get_hourly_tc_stats(user.id)
        if stored is not None:
            logger.debug(f"No total stats for user '{user.display_name}', using last hourly stats")
            return stored
        
        logger.debug(f"No stats found for user '{user.display_name}' (ID: {user.id}), using empty stats")
        return CompetitionStats.empty(user.id)
