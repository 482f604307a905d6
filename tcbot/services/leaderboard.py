"""
Leaderboard service for the team and per-category leaderboards.

Both leaderboards are derived from the competition summary, so they always
agree with it.
"""

import logging
from typing import Dict, List

from tcbot.data_models.leaderboard import LeaderboardEntry
from tcbot.database.models import Category
from tcbot.operations.leaderboard_ranker import LeaderboardRanker
from tcbot.services.competition_summary import CompetitionSummaryBuilder

logger = logging.getLogger(__name__)


class LeaderboardService:
    """Ranks teams and users by multiplied points."""
    
    def __init__(self, summary_builder: CompetitionSummaryBuilder):
        self.summary_builder = summary_builder
        self.ranker = LeaderboardRanker()
    
    async def get_team_leaderboard(self) -> List[LeaderboardEntry]:
        summary = await self.summary_builder.get_competition_summary()
        return self.ranker.rank(summary.teams)
    
    async def get_category_leaderboard(self) -> Dict[Category, List[LeaderboardEntry]]:
        """
        Rank users within each category independently.
        
        Every valid category is present, with an empty list when nobody
        competes in it. Each entry carries the user's team name.
        """
        summary = await self.summary_builder.get_competition_summary()
        
        users_by_category = {category: [] for category in Category.valid()}
        team_name_by_folding_user = {}
        for team in summary.teams:
            for user in team.active_users:
                team_name_by_folding_user[user.folding_user_name] = team.team_name
                if user.category in users_by_category:
                    users_by_category[user.category].append(user)
                else:
                    logger.warning(f"User '{user.display_name}' has invalid category {user.category}, not ranked")
        
        return {
            category: self.ranker.rank(users, lambda user: team_name_by_folding_user.get(user.folding_user_name))
            for category, users in users_by_category.items()
        }
