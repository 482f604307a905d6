"""Store-backed tests for MonthlyResultService."""

import pytest

from tcbot.database.models import Category
from tcbot.utils.date_utils import utc_now
from tests.integration.helpers import BASELINE, LATER, parse_two_rounds

pytestmark = pytest.mark.anyio


class TestMonthlyResult:
    """Tests for storing and retrieving monthly results."""

    async def test_month_without_stats_not_stored(self, services, seeded) -> None:
        now = utc_now()

        assert not await services.monthly_result.store_monthly_result()

        result = await services.monthly_result.get_monthly_result(now.month, now.year)
        assert result.team_leaderboard == []
        assert result.user_category_leaderboard == {}

    async def test_result_stored_for_current_month(self, services, seeded) -> None:
        await parse_two_rounds(services, seeded, BASELINE, LATER)
        now = utc_now()

        assert await services.monthly_result.store_monthly_result()

        result = await services.monthly_result.get_monthly_result(now.month, now.year)
        assert [entry.summary.team_name for entry in result.team_leaderboard] == ["Alpha", "Beta"]
        assert [entry.rank for entry in result.team_leaderboard] == [1, 2]
        assert result.team_leaderboard[0].multiplied_points == 501_000
        nvidia = result.user_category_leaderboard[Category.NVIDIA_GPU]
        assert [entry.summary.display_name for entry in nvidia] == ["Alice", "Bob"]

    async def test_storing_again_replaces_month(self, services, seeded) -> None:
        await parse_two_rounds(services, seeded, BASELINE, LATER)
        await services.monthly_result.store_monthly_result()
        services.stats_client.set_total("bob", 1_000_000, 40)
        await services.parser.parse_tc_stats_for_user(seeded.bob)
        now = utc_now()

        await services.monthly_result.store_monthly_result()

        result = await services.monthly_result.get_monthly_result(now.month, now.year)
        assert [entry.summary.team_name for entry in result.team_leaderboard] == ["Beta", "Alpha"]

    async def test_other_month_is_empty(self, services, seeded) -> None:
        await parse_two_rounds(services, seeded, BASELINE, LATER)
        await services.monthly_result.store_monthly_result()

        result = await services.monthly_result.get_monthly_result(1, 2000)

        assert result.has_no_stats()
