"""
Process-wide system state for the Team Competition.

The state gates reads and writes while stats are being updated or reset. A
single SystemStateManager is created by the bot and passed to every service
that needs it.
"""

import asyncio
from enum import Enum

from tcbot.utils.logger import setup_logger

logger = setup_logger(__name__)


class SystemState(Enum):
    AVAILABLE = "available"
    RESETTING_STATS = "resetting_stats"
    STARTING = "starting"
    UPDATING_STATS = "updating_stats"
    WRITE_EXECUTED = "write_executed"

    def is_read_blocked(self) -> bool:
        return self not in _READ_ALLOWED

    def is_write_blocked(self) -> bool:
        return self not in _WRITE_ALLOWED


_READ_ALLOWED = frozenset({SystemState.AVAILABLE, SystemState.UPDATING_STATS, SystemState.WRITE_EXECUTED})
_WRITE_ALLOWED = frozenset({SystemState.AVAILABLE, SystemState.WRITE_EXECUTED})


class ParsingState(Enum):
    """Whether stats are currently collected for the Team Competition (off between month end and reset)."""
    ENABLED = "enabled"
    DISABLED = "disabled"


class SystemStateManager:
    """
    Holder for the current system and parsing state.
    
    Every entry into WRITE_EXECUTED starts a new write generation, letting a
    reader tell whether stats were written while it was building from them.
    """
    
    def __init__(self, initial_state: SystemState = SystemState.STARTING,
                 parsing_state: ParsingState = ParsingState.ENABLED):
        self._state = initial_state
        self._parsing_state = parsing_state
        self._write_generation = 0
        self._lock = asyncio.Lock()
    
    def current(self) -> SystemState:
        return self._state
    
    def write_generation(self) -> int:
        return self._write_generation
    
    async def transition(self, next_state: SystemState):
        async with self._lock:
            if next_state != self._state:
                logger.debug(f"Changing system state: {self._state.name} -> {next_state.name}")
            if next_state == SystemState.WRITE_EXECUTED:
                self._write_generation += 1
            self._state = next_state
    
    async def mark_available_if_unchanged(self, write_generation: int) -> bool:
        """
        Move WRITE_EXECUTED to AVAILABLE, unless another write completed after
        `write_generation` was read.
        
        Returns:
            False if the write generation has moved on, leaving the state as is
        """
        async with self._lock:
            if write_generation != self._write_generation:
                return False
            if self._state == SystemState.WRITE_EXECUTED:
                logger.debug(f"Changing system state: {self._state.name} -> {SystemState.AVAILABLE.name}")
                self._state = SystemState.AVAILABLE
            return True
    
    def parsing_state(self) -> ParsingState:
        return self._parsing_state
    
    async def set_parsing_state(self, parsing_state: ParsingState):
        async with self._lock:
            if parsing_state != self._parsing_state:
                logger.info(f"Changing parsing state: {self._parsing_state.name} -> {parsing_state.name}")
            self._parsing_state = parsing_state
