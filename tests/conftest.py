"""Shared pytest fixtures for the Team Competition stats bot tests."""

from types import SimpleNamespace
from typing import Dict, Set, Tuple

import pytest

from tcbot.data_models.stats import UserStats
from tcbot.database.database import Database
from tcbot.database.models import Category, HardwareMake, HardwareType
from tcbot.database.stats_operations import StatsOperations
from tcbot.operations.stats_reconciler import StatsReconciler
from tcbot.services.cache import StatsCaches
from tcbot.services.competition_summary import CompetitionSummaryBuilder
from tcbot.services.historic_stats import HistoricStatsService
from tcbot.services.leaderboard import LeaderboardService
from tcbot.services.monthly_reset import MonthlyResetCoordinator
from tcbot.services.monthly_result import MonthlyResultService
from tcbot.services.stats_parser import UserStatsParser
from tcbot.services.stats_repository import StatsRepository
from tcbot.services.system_state import SystemState, SystemStateManager
from tcbot.services.user_lifecycle import UserLifecycleService
from tcbot.utils.date_utils import utc_now
from tcbot.utils.exceptions import ExternalConnectionError


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


class FakeStatsClient:
    """Stands in for FoldingStatsClient, serving configurable cumulative totals."""

    def __init__(self) -> None:
        self.totals: Dict[str, Tuple[int, int]] = {}
        self.failing: Set[str] = set()
        self.requested = []

    def set_total(self, folding_user_name: str, points: int, units: int) -> None:
        self.totals[folding_user_name] = (points, units)

    async def get_total_stats(self, user) -> UserStats:
        self.requested.append(user.folding_user_name)
        if user.folding_user_name in self.failing:
            raise ExternalConnectionError("https://stats.example.com", "connection refused")
        points, units = self.totals.get(user.folding_user_name, (0, 0))
        return UserStats(user.id, utc_now(), points, units)


@pytest.fixture
def stats_client() -> FakeStatsClient:
    return FakeStatsClient()


@pytest.fixture
async def database(anyio_backend, tmp_path):
    """File-backed aiosqlite database, created fresh for each test."""
    db = Database(f"sqlite:///{tmp_path / 'tc_stats_test.db'}")
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
async def services(database, stats_client):
    """Every stats service wired together the way the bot wires them."""
    caches = StatsCaches(ttl=3600)
    state_manager = SystemStateManager(initial_state=SystemState.AVAILABLE)
    repository = StatsRepository(StatsOperations(database), caches)
    reconciler = StatsReconciler(repository)
    parser = UserStatsParser(database, repository, reconciler, stats_client, state_manager)
    summary_builder = CompetitionSummaryBuilder(database, repository, reconciler, caches, state_manager)
    leaderboard_service = LeaderboardService(summary_builder)
    return SimpleNamespace(
        db=database,
        caches=caches,
        state_manager=state_manager,
        repository=repository,
        reconciler=reconciler,
        parser=parser,
        summary_builder=summary_builder,
        leaderboard_service=leaderboard_service,
        monthly_reset=MonthlyResetCoordinator(database, repository, parser, caches, state_manager),
        monthly_result=MonthlyResultService(repository, leaderboard_service),
        historic_stats=HistoricStatsService(database, repository),
        user_lifecycle=UserLifecycleService(
            database, repository, reconciler, parser, stats_client, caches, state_manager
        ),
        stats_client=stats_client,
    )


@pytest.fixture
async def seeded(database):
    """Two teams on two GPUs: Alpha has two users, Beta has one."""
    nvidia = await database.create_hardware(
        name="NVIDIA GeForce RTX 4090", display_name="RTX 4090",
        make=HardwareMake.NVIDIA, hardware_type=HardwareType.GPU, multiplier=1.0, average_ppd=30_000_000,
    )
    amd = await database.create_hardware(
        name="AMD Radeon RX 7900 XTX", display_name="RX 7900 XTX",
        make=HardwareMake.AMD, hardware_type=HardwareType.GPU, multiplier=2.0, average_ppd=15_000_000,
    )
    alpha = await database.create_team(name="Alpha", description="Team Alpha")
    beta = await database.create_team(name="Beta", description="Team Beta")

    alice = await database.create_user(
        folding_user_name="alice", display_name="Alice", passkey="a" * 32,
        category=Category.NVIDIA_GPU, hardware_id=nvidia.id, team_id=alpha.id, is_captain=True,
    )
    arthur = await database.create_user(
        folding_user_name="arthur", display_name="Arthur", passkey="b" * 32,
        category=Category.AMD_GPU, hardware_id=amd.id, team_id=alpha.id,
    )
    bob = await database.create_user(
        folding_user_name="bob", display_name="Bob", passkey="c" * 32,
        category=Category.NVIDIA_GPU, hardware_id=nvidia.id, team_id=beta.id, is_captain=True,
    )
    return SimpleNamespace(nvidia=nvidia, amd=amd, alpha=alpha, beta=beta, alice=alice, arthur=arthur, bob=bob)
