"""
User and hardware lifecycle with Team Competition stats handling.

Creating, updating and deleting users (and changing hardware multipliers)
must keep the competition stats consistent:
- a deleted user is retired, keeping their stats for their team
- a user moving team is retired from the old team and restarts from zero
- a user whose hardware, username or passkey changes keeps the stats earned
  so far as an offset, and restarts collection from their new details
"""

import logging
from typing import Optional

from tcbot.data_models.stats import CompetitionStats, RetiredUserStats, StatsOffset, UserStats
from tcbot.database.models import Hardware, User
from tcbot.operations.stats_reconciler import StatsReconciler
from tcbot.services.base import BaseService
from tcbot.services.cache import StatsCaches
from tcbot.services.stats_parser import UserStatsParser
from tcbot.services.system_state import ParsingState, SystemStateManager
from tcbot.utils.date_utils import utc_now
from tcbot.utils.exceptions import (
    ExternalConnectionError, HardwareNotFoundError, SystemStateError, UserNotFoundError
)

logger = logging.getLogger(__name__)

STATE_CHANGE_FIELDS = ('hardware_id', 'folding_user_name', 'passkey')


class UserLifecycleService(BaseService):
    
    def __init__(self, database, stats_repository, reconciler: StatsReconciler, stats_parser: UserStatsParser,
                 stats_client, caches: StatsCaches, state_manager: SystemStateManager):
        super().__init__(database, stats_repository)
        self.reconciler = reconciler
        self.stats_parser = stats_parser
        self.stats_client = stats_client
        self.caches = caches
        self.state_manager = state_manager
    
    def _require_writable(self):
        state = self.state_manager.current()
        if state.is_write_blocked():
            raise SystemStateError(state, "write")
    
    async def _require_user(self, user_id: int) -> User:
        user = await self.db.get_user(user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return user
    
    async def create_user(self, **fields) -> User:
        """Create a user and take their current total stats as their baseline."""
        self._require_writable()
        user = await self.db.create_user(**fields)
        
        try:
            total_stats = await self.stats_client.get_total_stats(user)
        except ExternalConnectionError as e:
            logger.error(f"Error retrieving initial stats for user '{user.display_name}' (ID: {user.id}): {e}")
        else:
            await self.stats.create_initial_stats(total_stats)
            logger.info(f"User '{user.display_name}' (ID: {user.id}) created with initial stats: {total_stats}")
            await self.stats_parser.parse_tc_stats_for_user(user)
        
        await self.caches.competition_summary.invalidate_all()
        return user
    
    async def delete_user(self, user_id: int) -> Optional[RetiredUserStats]:
        """
        Delete a user, retiring their stats against their team.
        
        Returns:
            The persisted retired stats, or None if the user had no stats
            
        Raises:
            UserNotFoundError: If the user does not exist
        """
        self._require_writable()
        user = await self._require_user(user_id)
        last_stats = await self.reconciler.get_current_stats(user)
        
        await self.db.delete_user(user_id)
        await self.caches.invalidate_user(user_id)
        
        if last_stats.is_empty():
            logger.warning(f"User '{user.display_name}' (ID: {user.id}) has no stats, not saving any retired stats")
            return None
        
        retired = await self.stats.create_retired_user_stats(
            RetiredUserStats.create_without_id(user.team_id, user.display_name, last_stats)
        )
        logger.info(f"User '{user.display_name}' (ID: {user.id}) retired with retired stats ID: {retired.retired_user_id}")
        return retired
    
    async def update_user(self, user_id: int, **changes) -> User:
        """Update a user, handling team and stats-affecting changes."""
        self._require_writable()
        existing = await self._require_user(user_id)
        
        is_team_change = 'team_id' in changes and changes['team_id'] != existing.team_id
        is_state_change = self._is_user_state_change(existing, changes)
        previous_stats = await self.reconciler.get_current_stats(existing) if is_state_change else None
        
        if is_team_change:
            await self._handle_team_change(existing)
        
        updated = await self.db.update_user(user_id, **changes)
        
        if is_state_change:
            # After a team change the user restarts from zero, so nothing is carried over
            carried = None if is_team_change else previous_stats
            await self._handle_state_change(updated, carried)
        
        await self.caches.competition_summary.invalidate_all()
        return updated
    
    async def update_hardware(self, hardware_id: int, **changes) -> Hardware:
        """Update hardware; a multiplier change restarts stats collection for its users."""
        existing = await self.db.get_hardware(hardware_id)
        if not existing:
            raise HardwareNotFoundError(hardware_id)
        
        is_multiplier_change = 'multiplier' in changes and changes['multiplier'] != existing.multiplier
        previous_stats = {}
        if is_multiplier_change:
            logger.debug(f"Hardware '{existing.name}' (ID: {existing.id}) multiplier change: {existing.multiplier} -> {changes['multiplier']}")
            for user in await self.db.get_users_with_hardware(hardware_id):
                previous_stats[user.id] = await self.reconciler.get_current_stats(user)
        
        updated = await self.db.update_hardware(hardware_id, **changes)
        
        if is_multiplier_change:
            for user in await self.db.get_users_with_hardware(hardware_id):
                await self._handle_state_change(user, previous_stats.get(user.id))
            await self.caches.competition_summary.invalidate_all()
        return updated
    
    async def apply_offset(self, user_id: int, offset: StatsOffset) -> StatsOffset:
        """
        Add a manual offset to a user's stats and refresh their stats.
        
        Returns:
            The user's combined stored offset
        """
        self._require_writable()
        user = await self._require_user(user_id)
        derived = offset.update_with_hardware_multiplier(user.hardware.multiplier)
        stored = await self.stats.add_offset_stats(user.id, derived)
        logger.info(f"Updated user '{user.display_name}' (ID: {user.id}) with offset: {derived}")
        
        await self.stats_parser.parse_tc_stats_for_user(user)
        return stored
    
    @staticmethod
    def _is_user_state_change(existing: User, changes: dict) -> bool:
        if 'hardware_id' in changes and changes['hardware_id'] != existing.hardware_id:
            return True
        for field_name in ('folding_user_name', 'passkey'):
            if field_name in changes and changes[field_name].lower() != getattr(existing, field_name).lower():
                logger.debug(f"User '{existing.display_name}' (ID: {existing.id}) had state change to {field_name}")
                return True
        return False
    
    async def _handle_team_change(self, user: User):
        if self.state_manager.parsing_state() == ParsingState.DISABLED:
            logger.info(f"Received a team change for user '{user.display_name}' (ID: {user.id}), but stats are not being parsed")
            return
        
        current_stats = await self.reconciler.get_current_stats(user)
        if not current_stats.is_empty():
            retired = await self.stats.create_retired_user_stats(
                RetiredUserStats.create_without_id(user.team_id, user.display_name, current_stats)
            )
            logger.info(f"User '{user.display_name}' (ID: {user.id}) moved team and retired with retired stats ID: {retired.retired_user_id}")
        
        total_stats = await self.stats.get_total_stats(user.id)
        if total_stats is not None:
            await self.stats.create_initial_stats(UserStats(user.id, utc_now(), total_stats.points, total_stats.units))
        await self.stats.delete_offset_stats(user.id)
        logger.info(f"Handled team change for user '{user.display_name}' (ID: {user.id})")
    
    async def _handle_state_change(self, user: User, carried_stats: Optional[CompetitionStats]):
        if self.state_manager.parsing_state() == ParsingState.DISABLED:
            logger.info(f"Received a state change for user '{user.display_name}' (ID: {user.id}), but stats are not being parsed")
            return
        
        try:
            total_stats = await self.stats_client.get_total_stats(user)
        except ExternalConnectionError as e:
            logger.error(f"Unable to update the state of user '{user.display_name}' (ID: {user.id}): {e}")
            return
        
        await self.stats.create_total_stats(total_stats)
        await self.stats.create_initial_stats(total_stats)
        if carried_stats is not None and not carried_stats.is_empty():
            offset = await self.stats.add_offset_stats(user.id, StatsOffset.from_competition_stats(carried_stats))
            logger.debug(f"Added offset stats of: {offset}")
        logger.info(f"Handled state change for user '{user.display_name}' (ID: {user.id})")
