"""
Generic leaderboard ranking shared by the team and per-category leaderboards.
"""

from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from tcbot.data_models.leaderboard import LeaderboardEntry
from tcbot.utils.ranking import RankingUtility

E = TypeVar("E")


class LeaderboardRanker(Generic[E]):
    """Ranks scored entities and annotates each with its rank and point gaps."""
    
    def __init__(self, score: Optional[Callable[[E], int]] = None):
        self.score = score or (lambda entity: entity.multiplied_points)
    
    def rank(self, entities: Sequence[E], team_names: Optional[Callable[[E], Optional[str]]] = None) -> List[LeaderboardEntry]:
        """
        Rank entities by descending score.
        
        Ties keep their input order. The leader has rank 1 and zero diffs; every
        later entry records its gap to the leader and to the entry just above it.
        
        Args:
            entities: Entities to rank
            team_names: Optional lookup for the team name shown beside each entry
            
        Returns:
            Leaderboard entries, best first
        """
        if not entities:
            return []
        
        ordered = RankingUtility.sort_descending(entities, self.score)
        leader_score = self.score(ordered[0])
        entries = []
        previous_score = leader_score
        for index, entity in enumerate(ordered):
            entity_score = self.score(entity)
            entries.append(LeaderboardEntry(
                summary=entity,
                rank=index + 1,
                diff_to_leader=leader_score - entity_score,
                diff_to_next=previous_score - entity_score,
                team_name=team_names(entity) if team_names else None,
            ))
            previous_score = entity_score
        return entries
