"""
Operations Layer

Pure competition logic with no I/O of its own: reconciling raw Folding@Home
stats into competition stats, ranking leaderboards and splitting LARS hardware
against the stored hardware.

Architecture:
- Database layer: Pure data access and CRUD operations
- Operations layer: Stats arithmetic and ranking
- Services layer: Caching, scheduling workflows and external APIs
"""

from .hardware_splitter import HardwareSplitter
from .leaderboard_ranker import LeaderboardRanker
from .stats_reconciler import StatsReconciler

__all__ = ['HardwareSplitter', 'LeaderboardRanker', 'StatsReconciler']
