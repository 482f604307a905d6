"""Unit tests for LeaderboardRanker and the shared ranking utility."""

from dataclasses import dataclass

from tcbot.operations.leaderboard_ranker import LeaderboardRanker
from tcbot.utils.ranking import RankingUtility


@dataclass(frozen=True)
class Scored:
    name: str
    multiplied_points: int


class TestLeaderboardRanker:
    """Tests for LeaderboardRanker.rank."""

    def test_two_teams(self) -> None:
        entries = LeaderboardRanker().rank([Scored("Beta", 40), Scored("Alpha", 100)])

        alpha, beta = entries
        assert (alpha.summary.name, alpha.rank, alpha.diff_to_leader, alpha.diff_to_next) == ("Alpha", 1, 0, 0)
        assert (beta.summary.name, beta.rank, beta.diff_to_leader, beta.diff_to_next) == ("Beta", 2, 60, 60)

    def test_diffs_against_leader_and_entry_above(self) -> None:
        entries = LeaderboardRanker().rank([Scored("A", 100), Scored("B", 70), Scored("C", 20)])

        assert [e.diff_to_leader for e in entries] == [0, 30, 80]
        assert [e.diff_to_next for e in entries] == [0, 30, 50]

    def test_ties_keep_input_order(self) -> None:
        entries = LeaderboardRanker().rank([Scored("First", 50), Scored("Second", 50), Scored("Top", 90)])

        assert [e.summary.name for e in entries] == ["Top", "First", "Second"]
        assert [e.rank for e in entries] == [1, 2, 3]
        assert entries[2].diff_to_next == 0

    def test_empty_input(self) -> None:
        assert LeaderboardRanker().rank([]) == []

    def test_team_names_attached(self) -> None:
        entries = LeaderboardRanker().rank([Scored("alice", 10)], lambda entity: "Alpha")

        assert entries[0].team_name == "Alpha"

    def test_custom_score(self) -> None:
        ranker = LeaderboardRanker(score=lambda entity: len(entity.name))

        entries = ranker.rank([Scored("ab", 0), Scored("abcd", 0)])

        assert entries[0].summary.name == "abcd"
        assert entries[1].diff_to_leader == 2


class TestCompetitionRanks:
    """Tests for RankingUtility.competition_ranks."""

    def test_ties_share_rank_and_next_rank_skips(self) -> None:
        ranked = RankingUtility.competition_ranks(
            [Scored("a", 10), Scored("b", 30), Scored("c", 30), Scored("d", 5)],
            lambda item: item.multiplied_points,
        )

        assert [(rank, item.name) for rank, item in ranked] == [(1, "b"), (1, "c"), (3, "a"), (4, "d")]
