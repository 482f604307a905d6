"""Store-backed tests for MonthlyResetCoordinator."""

import asyncio
import logging

import pytest

from tcbot.data_models.stats import StatsOffset
from tcbot.services.system_state import SystemState
from tests.integration.helpers import BASELINE, LATER, parse_two_rounds

pytestmark = pytest.mark.anyio


class TestMonthlyReset:
    """Tests for the monthly reset."""

    async def test_full_reset_gives_clean_baseline(self, services, seeded) -> None:
        await parse_two_rounds(services, seeded, BASELINE, LATER)
        await services.user_lifecycle.apply_offset(seeded.alice.id, StatsOffset.create(points_offset=250))
        await services.user_lifecycle.delete_user(seeded.bob.id)
        assert await services.repository.get_all_retired_user_stats()

        assert await services.monthly_reset.reset_stats()

        for user in await services.db.get_all_users():
            stats = await services.reconciler.get_current_stats(user)
            assert (stats.multiplied_points, stats.units) == (0, 0)
            assert (await services.repository.get_offset_stats(user.id)).is_empty()
        assert await services.repository.get_all_retired_user_stats() == []
        assert services.state_manager.current() == SystemState.WRITE_EXECUTED

        summary = await services.summary_builder.get_competition_summary()
        assert summary.multiplied_points == 0

    async def test_baseline_is_total_at_reset(self, services, seeded) -> None:
        await parse_two_rounds(services, seeded, BASELINE, LATER)

        await services.monthly_reset.reset_stats()

        initial = await services.repository.get_initial_stats(seeded.alice.id)
        assert (initial.points, initial.units) == LATER["alice"]

    async def test_stats_after_reset_count_from_new_baseline(self, services, seeded) -> None:
        await parse_two_rounds(services, seeded, BASELINE, LATER)
        await services.monthly_reset.reset_stats()
        services.stats_client.set_total("alice", 1_600_000, 135)

        await services.parser.parse_tc_stats_for_user(seeded.alice)

        stats = await services.reconciler.get_current_stats(seeded.alice)
        assert (stats.multiplied_points, stats.units) == (100_000, 5)

    async def test_reset_with_no_users(self, services, database, caplog) -> None:
        with caplog.at_level(logging.ERROR):
            assert await services.monthly_reset.reset_stats()

        assert "No TC users configured" in caplog.text
        assert services.state_manager.current() == SystemState.WRITE_EXECUTED

    async def test_failed_step_aborts_remaining_steps(self, services, seeded, monkeypatch) -> None:
        await parse_two_rounds(services, seeded, BASELINE, LATER)
        await services.user_lifecycle.delete_user(seeded.bob.id)

        async def failing_delete():
            raise RuntimeError("database is locked")

        monkeypatch.setattr(services.repository, "delete_all_offset_stats", failing_delete)

        assert not await services.monthly_reset.reset_stats()
        assert len(await services.repository.get_all_retired_user_stats()) == 1
        assert services.state_manager.current() == SystemState.WRITE_EXECUTED

    async def test_state_blocks_reads_during_reset(self, services, seeded, monkeypatch) -> None:
        observed = []
        original = services.repository.delete_all_offset_stats

        async def observing_delete():
            observed.append(services.state_manager.current())
            await original()

        monkeypatch.setattr(services.repository, "delete_all_offset_stats", observing_delete)

        await services.monthly_reset.reset_stats()

        assert observed == [SystemState.RESETTING_STATS]
        assert observed[0].is_read_blocked()

    async def test_scheduled_parse_skipped_during_reset(self, services, seeded, monkeypatch) -> None:
        users = await services.db.get_all_users()
        observed = []
        original = services.repository.delete_all_offset_stats

        async def delete_with_scheduled_parse():
            observed.append(services.parser.parse_tc_stats_for_users(users))
            observed.append(services.state_manager.current())
            await original()

        monkeypatch.setattr(services.repository, "delete_all_offset_stats", delete_with_scheduled_parse)

        assert await services.monthly_reset.reset_stats()

        assert observed == [None, SystemState.RESETTING_STATS]

    async def test_waiting_parse_runs_after_reset(self, services, seeded, monkeypatch) -> None:
        users = await services.db.get_all_users()
        queued = []
        original = services.repository.delete_all_retired_user_stats

        async def delete_with_queued_parse():
            queued.append(asyncio.create_task(services.parser.parse_tc_stats_for_users_and_wait(users)))
            await asyncio.sleep(0)
            queued.append(services.state_manager.current())
            await original()

        monkeypatch.setattr(services.repository, "delete_all_retired_user_stats", delete_with_queued_parse)

        assert await services.monthly_reset.reset_stats()

        task, state_during_reset = queued
        assert state_during_reset == SystemState.RESETTING_STATS
        assert await task == 3
        assert services.state_manager.current() == SystemState.WRITE_EXECUTED
