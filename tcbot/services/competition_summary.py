"""
Competition summary builder.

Aggregates every team's active and retired users into the competition-wide
summary that all leaderboards are derived from.
"""

import logging

from tcbot.data_models.summary import CompetitionSummary, RetiredUserSummary, TeamSummary, UserSummary
from tcbot.operations.stats_reconciler import StatsReconciler
from tcbot.services.base import BaseService
from tcbot.services.cache import StatsCaches
from tcbot.services.system_state import SystemState, SystemStateManager

logger = logging.getLogger(__name__)


class CompetitionSummaryBuilder(BaseService):
    """Serves the cached competition summary, recomputing it after stats writes."""
    
    def __init__(self, database, stats_repository, reconciler: StatsReconciler, caches: StatsCaches,
                 state_manager: SystemStateManager):
        super().__init__(database, stats_repository)
        self.reconciler = reconciler
        self.caches = caches
        self.state_manager = state_manager
    
    async def get_competition_summary(self) -> CompetitionSummary:
        """
        Get the competition summary.
        
        The cached summary is returned unless stats were written since it was
        built (state WRITE_EXECUTED) or nothing is cached. A recompute stores
        the new summary in the cache before the state moves to AVAILABLE.
        
        If another write completes while the summary is being built, the
        summary is returned but not cached and the state stays WRITE_EXECUTED,
        so the next read builds again.
        """
        if self.state_manager.current() != SystemState.WRITE_EXECUTED:
            cached = await self.caches.competition_summary.get(StatsCaches.COMPETITION_SUMMARY_KEY)
            if cached is not None:
                return cached
        
        write_generation = self.state_manager.write_generation()
        summary = await self._build_summary()
        if write_generation != self.state_manager.write_generation():
            logger.debug("Stats written while building competition summary, not caching it")
            return summary
        
        await self.caches.competition_summary.put(StatsCaches.COMPETITION_SUMMARY_KEY, summary)
        # In-progress states belong to whoever started the update or reset
        if not await self.state_manager.mark_available_if_unchanged(write_generation):
            await self.caches.competition_summary.invalidate(StatsCaches.COMPETITION_SUMMARY_KEY)
        return summary
    
    async def _build_summary(self) -> CompetitionSummary:
        logger.debug("Calculating latest competition summary")
        teams = await self.db.get_all_teams()
        users = await self.db.get_all_users()
        retired_users = await self.stats.get_all_retired_user_stats()
        
        team_summaries = []
        for team in teams:
            team_summaries.append(await self._build_team_summary(
                team,
                [user for user in users if user.team_id == team.id],
                [retired for retired in retired_users if retired.team_id == team.id],
            ))
        return CompetitionSummary.create(team_summaries)
    
    async def _build_team_summary(self, team, active_users, retired_users) -> TeamSummary:
        user_summaries = []
        for user in active_users:
            stats = await self.reconciler.get_current_stats(user)
            user_summaries.append(UserSummary.from_user(user, stats))
        
        retired_summaries = [RetiredUserSummary.from_retired(retired) for retired in retired_users]
        
        captain_name = next((user.display_name for user in active_users if user.is_captain), None)
        if captain_name is None:
            logger.warning(f"No captain found for team '{team.name}' (ID: {team.id})")
        
        return TeamSummary.create(team.id, team.name, team.forum_link, captain_name, user_summaries, retired_summaries)
