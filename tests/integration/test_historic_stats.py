"""Store-backed tests for HistoricStatsService."""

from datetime import date, datetime

import pytest

from tcbot.data_models.stats import CompetitionStats

pytestmark = pytest.mark.anyio


async def _store(services, user, timestamp: datetime, multiplied_points: int) -> None:
    await services.repository.create_hourly_tc_stats(
        CompetitionStats.create(user.id, timestamp, multiplied_points, multiplied_points, 0)
    )


@pytest.fixture
async def history(services, seeded):
    """Cumulative hourly stats for Alice across the end of April and early May 2024."""
    for timestamp, multiplied_points in (
        (datetime(2024, 4, 30, 23, 55), 900),
        (datetime(2024, 5, 1, 3, 0), 20),
        (datetime(2024, 5, 9, 23, 55), 50),
        (datetime(2024, 5, 10, 10, 55), 100),
        (datetime(2024, 5, 10, 11, 20), 150),
        (datetime(2024, 5, 10, 11, 55), 180),
        (datetime(2024, 5, 11, 0, 55), 250),
    ):
        await _store(services, seeded.alice, timestamp, multiplied_points)
    return seeded


class TestHistoricStats:
    """Tests for hourly, daily and monthly rollups."""

    async def test_hourly_uses_last_value_of_previous_hour(self, services, history) -> None:
        hourly = await services.historic_stats.get_hourly_stats(history.alice.id, date(2024, 5, 10))

        assert [(h.period_start.hour, h.multiplied_points) for h in hourly] == [(10, 50), (11, 80)]

    async def test_first_hour_of_month_not_reduced_by_previous_month(self, services, history) -> None:
        hourly = await services.historic_stats.get_hourly_stats(history.alice.id, date(2024, 5, 1))

        assert [(h.period_start.hour, h.multiplied_points) for h in hourly] == [(3, 20)]

    async def test_daily_gains(self, services, history) -> None:
        daily = await services.historic_stats.get_daily_stats(history.alice.id, 5, 2024)

        assert [(d.period_start.day, d.multiplied_points) for d in daily] == [(1, 20), (9, 30), (10, 130), (11, 70)]

    async def test_monthly_totals(self, services, history) -> None:
        monthly = await services.historic_stats.get_monthly_stats(history.alice.id, 2024)

        assert [(m.period_start.month, m.multiplied_points) for m in monthly] == [(4, 900), (5, 250)]

    async def test_day_without_data(self, services, history) -> None:
        assert await services.historic_stats.get_hourly_stats(history.alice.id, date(2024, 6, 1)) == []

    async def test_team_monthly_combines_users(self, services, history) -> None:
        await _store(services, history.arthur, datetime(2024, 5, 20, 12, 0), 40)

        monthly = await services.historic_stats.get_team_monthly_stats(history.alpha.id, 2024)

        assert [(m.period_start.month, m.multiplied_points) for m in monthly] == [(4, 900), (5, 290)]
