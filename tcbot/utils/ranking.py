"""
Shared ranking utilities for summaries and leaderboards.
"""

from typing import Callable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


class RankingUtility:
    """Shared ranking logic so summaries and leaderboards agree on ordering."""
    
    @staticmethod
    def sort_descending(items: Sequence[T], score: Callable[[T], int]) -> List[T]:
        """Stable descending sort: equal scores keep their input order."""
        return sorted(items, key=score, reverse=True)
    
    @staticmethod
    def competition_ranks(items: Sequence[T], score: Callable[[T], int]) -> List[Tuple[int, T]]:
        """
        Rank items with shared ranks for ties ("1, 1, 3").
        
        Args:
            items: Items to rank, in any order
            score: Function extracting the score to rank on, higher is better
            
        Returns:
            (rank, item) pairs ordered best first
        """
        ranked = []
        previous_score = None
        current_rank = 0
        for index, item in enumerate(RankingUtility.sort_descending(items, score), start=1):
            item_score = score(item)
            if item_score != previous_score:
                current_rank = index
                previous_score = item_score
            ranked.append((current_rank, item))
        return ranked
