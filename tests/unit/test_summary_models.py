"""Unit tests for the competition summary and leaderboard models."""

from datetime import datetime

from tcbot.data_models.leaderboard import LeaderboardEntry, MonthlyResult
from tcbot.data_models.summary import CompetitionSummary, RetiredUserSummary, TeamSummary, UserSummary
from tcbot.database.models import Category


def make_user(user_id: int, name: str, multiplied_points: int, category: Category = Category.NVIDIA_GPU) -> UserSummary:
    return UserSummary(
        user_id=user_id,
        display_name=name,
        folding_user_name=name.lower(),
        hardware_name="RTX 4090",
        multiplier=1.0,
        category=category,
        points=multiplied_points,
        multiplied_points=multiplied_points,
        units=1,
    )


def make_retired(retired_id: int, name: str, multiplied_points: int) -> RetiredUserSummary:
    return RetiredUserSummary(retired_id, name, multiplied_points, multiplied_points, 2)


class TestTeamSummary:
    """Tests for TeamSummary."""

    def test_totals_include_retired_users(self) -> None:
        team = TeamSummary.create(1, "Alpha", None, "Alice", [make_user(1, "Alice", 100)], [make_retired(1, "Old", 50)])

        assert team.multiplied_points == 150
        assert team.points == 150
        assert team.units == 3

    def test_active_and_retired_ranked_together(self) -> None:
        team = TeamSummary.create(
            1, "Alpha", None, "Alice",
            [make_user(1, "Alice", 100), make_user(2, "Arthur", 20)],
            [make_retired(1, "Old", 50)],
        )

        ranks = {u.display_name: u.rank_in_team for u in team.active_users + team.retired_users}
        assert ranks == {"Alice": 1, "Old": 2, "Arthur": 3}

    def test_tied_users_share_rank(self) -> None:
        team = TeamSummary.create(
            1, "Alpha", None, None,
            [make_user(1, "A", 10), make_user(2, "B", 10), make_user(3, "C", 5)],
            [],
        )

        assert [u.rank_in_team for u in team.active_users] == [1, 1, 3]


class TestCompetitionSummary:
    """Tests for CompetitionSummary."""

    def test_teams_ranked_by_multiplied_points(self) -> None:
        beta = TeamSummary.create(2, "Beta", None, None, [make_user(2, "Bob", 40)], [])
        alpha = TeamSummary.create(1, "Alpha", None, None, [make_user(1, "Alice", 100)], [])

        summary = CompetitionSummary.create([beta, alpha])

        assert [(t.team_name, t.rank) for t in summary.teams] == [("Alpha", 1), ("Beta", 2)]
        assert summary.multiplied_points == 140

    def test_empty_summary(self) -> None:
        summary = CompetitionSummary.empty()

        assert summary.teams == ()
        assert summary.multiplied_points == 0


class TestMonthlyResult:
    """Tests for MonthlyResult."""

    def test_empty_result_has_no_stats(self) -> None:
        assert MonthlyResult.empty().has_no_stats()

    def test_zero_point_entries_have_no_stats(self) -> None:
        team = TeamSummary.create(1, "Alpha", None, None, [make_user(1, "Alice", 0)], [])
        result = MonthlyResult(
            team_leaderboard=[LeaderboardEntry(team, 1, 0, 0)],
            user_category_leaderboard={Category.NVIDIA_GPU: [], Category.AMD_GPU: []},
        )

        assert result.has_no_stats()

    def test_json_preserves_leaderboards(self) -> None:
        alice = make_user(1, "Alice", 100)
        team = TeamSummary.create(1, "Alpha", "https://forum.example.com/alpha", "Alice", [alice], [make_retired(3, "Old", 5)])
        result = MonthlyResult(
            team_leaderboard=[LeaderboardEntry(team.with_rank(1), 1, 0, 0)],
            user_category_leaderboard={
                Category.NVIDIA_GPU: [LeaderboardEntry(team.active_users[0], 1, 0, 0, "Alpha")],
                Category.AMD_GPU: [],
            },
            utc_timestamp=datetime(2024, 5, 31, 23, 57),
        )

        restored = MonthlyResult.from_json(result.to_json())

        assert restored == result
        assert not restored.has_no_stats()
