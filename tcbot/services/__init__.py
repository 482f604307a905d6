"""
Services package for the Team Competition stats bot.

Stateful collaborators: caches, system state, HTTP clients, stats parsing,
summaries, the monthly reset and the user/hardware lifecycle.
"""

from .base import BaseService
from .cache import StatsCaches, TtlCache
from .competition_summary import CompetitionSummaryBuilder
from .folding_stats_client import FoldingStatsClient
from .historic_stats import HistoricStatsService
from .lars_client import LarsClient
from .lars_updater import LarsHardwareUpdater
from .leaderboard import LeaderboardService
from .monthly_reset import MonthlyResetCoordinator
from .monthly_result import MonthlyResultService
from .stats_parser import UserStatsParser
from .stats_repository import StatsRepository
from .system_state import ParsingState, SystemState, SystemStateManager
from .user_lifecycle import UserLifecycleService

__all__ = [
    'BaseService', 'StatsCaches', 'TtlCache', 'CompetitionSummaryBuilder', 'FoldingStatsClient',
    'HistoricStatsService', 'LarsClient', 'LarsHardwareUpdater', 'LeaderboardService',
    'MonthlyResetCoordinator', 'MonthlyResultService', 'UserStatsParser', 'StatsRepository',
    'ParsingState', 'SystemState', 'SystemStateManager', 'UserLifecycleService',
]
