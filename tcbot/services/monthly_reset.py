"""
Monthly reset of the Team Competition stats.

At the start of each month every user's current total stats become their new
baseline, and offsets, retired users and caches are cleared so the new month
starts from zero.
"""

import asyncio
import logging

from tcbot.data_models.stats import CompetitionStats, UserStats
from tcbot.services.base import BaseService
from tcbot.services.cache import StatsCaches
from tcbot.services.stats_parser import UserStatsParser
from tcbot.services.system_state import SystemState, SystemStateManager
from tcbot.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class MonthlyResetCoordinator(BaseService):
    """Runs the reset as an ordered sequence of steps, aborting on the first failure."""
    
    def __init__(self, database, stats_repository, stats_parser: UserStatsParser, caches: StatsCaches,
                 state_manager: SystemStateManager):
        super().__init__(database, stats_repository)
        self.stats_parser = stats_parser
        self.caches = caches
        self.state_manager = state_manager
        self._reset_lock = asyncio.Lock()
    
    async def reset_stats(self) -> bool:
        """
        Reset all TC stats for a new month.
        
        Steps:
        1. Final stats pull for every user, awaited
        2. Current total stats become each user's initial stats
        3. Clear all offsets
        4. Delete all retired users
        5. Invalidate all caches
        6. Second stats pull, awaited, giving everyone zero stats
        
        A failing step is logged and the remaining steps are skipped; completed
        steps are not rolled back and the reset must be re-run manually.
        
        Returns:
            True if every step completed
        """
        if self._reset_lock.locked():
            logger.warning("Monthly reset already in progress, ignoring request")
            return False
        
        # No other parsing pass may start until the reset has finished
        async with self._reset_lock, self.stats_parser.exclusive_parsing() as parse_users:
            logger.info("Resetting TC stats for new month")
            await self.state_manager.transition(SystemState.RESETTING_STATS)
            try:
                await self._run_reset_steps(parse_users)
            except Exception as e:
                logger.warning(f"Monthly reset failed, remaining steps skipped (manual re-run required): {e}", exc_info=True)
                return False
            finally:
                await self.state_manager.transition(SystemState.WRITE_EXECUTED)
        
        logger.info("TC stats reset complete")
        return True
    
    async def _run_reset_steps(self, parse_users):
        users = await self.db.get_all_users()
        if not users:
            logger.error("No TC users configured, no user stats to reset")
        else:
            logger.info("Pulling final stats before reset")
            await parse_users(users)
            await self._reset_baselines(users)
        
        await self.stats.delete_all_offset_stats()
        await self.stats.delete_all_retired_user_stats()
        await self.caches.invalidate_all()
        
        if users:
            logger.info("Pulling stats after reset")
            await parse_users(users)
    
    async def _reset_baselines(self, users):
        reset_time = utc_now()
        for user in users:
            total_stats = await self.stats.get_total_stats(user.id)
            if total_stats is None:
                logger.warning(f"No total stats for user '{user.display_name}' (ID: {user.id}), baseline not reset")
                continue
            
            await self.stats.create_initial_stats(UserStats(user.id, reset_time, total_stats.points, total_stats.units))
            await self.stats.create_hourly_tc_stats(CompetitionStats.create(user.id, reset_time, 0, 0, 0))
        logger.info(f"Reset baseline stats for {len(users)} users")
