"""
Team Competition stats parsing.

Pulls each user's cumulative stats from Folding@Home, reconciles them into
competition stats and stores the result as the user's hourly stats.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Iterable, List, Optional

from tcbot.constants import StatsConstants
from tcbot.operations.stats_reconciler import StatsReconciler
from tcbot.services.base import BaseService
from tcbot.services.system_state import SystemState, SystemStateManager
from tcbot.utils.exceptions import ExternalConnectionError

logger = logging.getLogger(__name__)


class UserStatsParser(BaseService):
    """Parses TC stats for users, either in the background or awaited."""
    
    def __init__(self, database, stats_repository, reconciler: StatsReconciler, stats_client,
                 state_manager: SystemStateManager):
        super().__init__(database, stats_repository)
        self.reconciler = reconciler
        self.stats_client = stats_client
        self.state_manager = state_manager
        self._parse_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(StatsConstants.MAX_CONCURRENT_USER_PARSES)
        # Background task tracking for proper lifecycle management
        self._background_tasks: set = set()
    
    @property
    def is_parsing(self) -> bool:
        return self._parse_lock.locked()
    
    def parse_tc_stats_for_users(self, users: Iterable) -> Optional[asyncio.Task]:
        """
        Start parsing in the background and return immediately.
        
        A pass that starts while another is still running is skipped.
        
        Returns:
            The background task, or None if the pass was skipped
        """
        if self.is_parsing:
            logger.info("Stats parsing already in progress, skipping this pass")
            return None
        
        task = asyncio.create_task(self.parse_tc_stats_for_users_and_wait(list(users)))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task
    
    async def parse_tc_stats_for_users_and_wait(self, users: Iterable) -> int:
        """
        Parse stats for every user and wait until all of them are done.
        
        The system state moves through UPDATING_STATS -> WRITE_EXECUTED.
            
        Returns:
            Number of users whose stats were updated
        """
        users = list(users)
        async with self._parse_lock:
            await self.state_manager.transition(SystemState.UPDATING_STATS)
            try:
                return await self._parse_users(users)
            finally:
                await self.state_manager.transition(SystemState.WRITE_EXECUTED)
    
    @asynccontextmanager
    async def exclusive_parsing(self):
        """
        Hold off every other parsing pass until the block exits.
        
        Yields a parse function that runs without taking the lock again and
        leaves the system state to the caller (e.g. a monthly reset).
        """
        async with self._parse_lock:
            yield self._parse_users
    
    async def parse_tc_stats_for_user(self, user) -> bool:
        """Parse stats for a single user and wait for the result."""
        return await self.parse_tc_stats_for_users_and_wait([user]) == 1
    
    async def _parse_users(self, users: List) -> int:
        logger.info(f"Parsing TC stats for {len(users)} users")
        results = await asyncio.gather(*(self._parse_user_safely(user) for user in users))
        parsed = sum(1 for result in results if result)
        logger.info(f"Parsed TC stats for {parsed}/{len(users)} users")
        return parsed
    
    async def _parse_user_safely(self, user) -> bool:
        async with self._semaphore:
            try:
                return await self._parse_user(user)
            except Exception as e:
                logger.error(f"Unexpected error parsing TC stats for user '{user.display_name}' (ID: {user.id}): {e}", exc_info=True)
                return False
    
    async def _parse_user(self, user) -> bool:
        if not user.passkey or not user.passkey.strip():
            logger.warning(f"Not parsing TC stats for user '{user.display_name}' (ID: {user.id}) with no passkey")
            return False
        
        try:
            total_stats = await self.stats_client.get_total_stats(user)
        except ExternalConnectionError as e:
            logger.warning(f"Unable to get stats for user '{user.display_name}' (ID: {user.id}), keeping last stats: {e}")
            return False
        
        if await self.stats.get_initial_stats(user.id) is None:
            await self.execute_with_retry(lambda: self.stats.create_initial_stats(total_stats))
            logger.info(f"No initial stats for user '{user.display_name}' (ID: {user.id}), using current total stats as baseline")
        
        await self.execute_with_retry(lambda: self.stats.create_total_stats(total_stats))
        tc_stats = await self.reconciler.reconcile_user(user, total_stats)
        await self.execute_with_retry(lambda: self.stats.create_hourly_tc_stats(tc_stats))
        logger.debug(f"Updated TC stats for user '{user.display_name}' (ID: {user.id}): {tc_stats}")
        return True
