"""
End-of-month storage of the Team Competition result.
"""

import logging

from tcbot.data_models.leaderboard import MonthlyResult
from tcbot.services.leaderboard import LeaderboardService
from tcbot.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class MonthlyResultService:
    """Archives the team and category leaderboards at the end of each month."""
    
    def __init__(self, stats_repository, leaderboard_service: LeaderboardService):
        self.stats = stats_repository
        self.leaderboard_service = leaderboard_service
    
    async def store_monthly_result(self) -> bool:
        """
        Store the current leaderboards as this month's result.
        
        Returns:
            False if the leaderboards had no stats and nothing was stored
        """
        result = MonthlyResult(
            team_leaderboard=await self.leaderboard_service.get_team_leaderboard(),
            user_category_leaderboard=await self.leaderboard_service.get_category_leaderboard(),
            utc_timestamp=utc_now(),
        )
        
        if result.has_no_stats():
            logger.warning("No TC stats for this month, not storing monthly result")
            return False
        
        await self.stats.create_monthly_result(result)
        logger.info(f"Stored TC monthly result for {result.utc_timestamp:%B %Y}")
        return True
    
    async def get_monthly_result(self, month: int, year: int) -> MonthlyResult:
        """Get the stored result for a month, or an empty result if none was stored."""
        result = await self.stats.get_monthly_result(month, year)
        if result is None:
            logger.debug(f"No monthly result stored for {month}/{year}")
            return MonthlyResult.empty()
        return result
