"""Unit tests for the system state gates."""

import pytest

from tcbot.services.system_state import ParsingState, SystemState, SystemStateManager


class TestSystemState:
    """Tests for the read/write gates of each state."""

    @pytest.mark.parametrize(
        "state,read_blocked,write_blocked",
        [
            (SystemState.AVAILABLE, False, False),
            (SystemState.WRITE_EXECUTED, False, False),
            (SystemState.UPDATING_STATS, False, True),
            (SystemState.RESETTING_STATS, True, True),
            (SystemState.STARTING, True, True),
        ],
    )
    def test_gates(self, state: SystemState, read_blocked: bool, write_blocked: bool) -> None:
        assert state.is_read_blocked() is read_blocked
        assert state.is_write_blocked() is write_blocked


class TestSystemStateManager:
    """Tests for SystemStateManager."""

    def test_defaults(self) -> None:
        manager = SystemStateManager()

        assert manager.current() == SystemState.STARTING
        assert manager.parsing_state() == ParsingState.ENABLED

    @pytest.mark.anyio
    async def test_transition(self) -> None:
        manager = SystemStateManager()

        await manager.transition(SystemState.AVAILABLE)
        await manager.set_parsing_state(ParsingState.DISABLED)

        assert manager.current() == SystemState.AVAILABLE
        assert manager.parsing_state() == ParsingState.DISABLED

    @pytest.mark.anyio
    async def test_each_write_starts_new_generation(self) -> None:
        manager = SystemStateManager(initial_state=SystemState.AVAILABLE)
        start = manager.write_generation()

        await manager.transition(SystemState.UPDATING_STATS)
        assert manager.write_generation() == start

        await manager.transition(SystemState.WRITE_EXECUTED)
        assert manager.write_generation() == start + 1

    @pytest.mark.anyio
    async def test_available_only_if_no_later_write(self) -> None:
        manager = SystemStateManager(initial_state=SystemState.WRITE_EXECUTED)
        generation = manager.write_generation()

        await manager.transition(SystemState.WRITE_EXECUTED)

        assert not await manager.mark_available_if_unchanged(generation)
        assert manager.current() == SystemState.WRITE_EXECUTED

        assert await manager.mark_available_if_unchanged(manager.write_generation())
        assert manager.current() == SystemState.AVAILABLE

    @pytest.mark.anyio
    async def test_in_progress_state_kept_when_unchanged(self) -> None:
        manager = SystemStateManager(initial_state=SystemState.UPDATING_STATS)

        assert await manager.mark_available_if_unchanged(manager.write_generation())
        assert manager.current() == SystemState.UPDATING_STATS
