"""Store-backed tests for LarsHardwareUpdater."""

import pytest

from tcbot.database.models import HardwareMake, HardwareType
from tcbot.services.lars_client import HardwareCandidate
from tcbot.services.lars_updater import LarsHardwareUpdater

pytestmark = pytest.mark.anyio


class FakeLarsClient:
    def __init__(self, gpus) -> None:
        self.gpus = gpus

    async def get_gpus(self):
        return list(self.gpus)


def _gpu(name: str, make: HardwareMake, multiplier: float, average_ppd: int) -> HardwareCandidate:
    return HardwareCandidate(name, name.split(" ", 1)[1], make, HardwareType.GPU, multiplier, average_ppd)


@pytest.fixture
async def unused_hardware(database, seeded):
    return await database.create_hardware(
        name="Intel Arc A770", display_name="Arc A770",
        make=HardwareMake.INTEL, hardware_type=HardwareType.GPU, multiplier=4.0, average_ppd=4_000_000,
    )


class TestLarsHardwareUpdater:
    """Tests for synchronising hardware with LARS."""

    async def test_hardware_created_updated_and_deleted(self, services, seeded, unused_hardware) -> None:
        lars = FakeLarsClient([
            _gpu("NVIDIA GeForce RTX 4090", HardwareMake.NVIDIA, 1.0, 32_000_000),
            _gpu("NVIDIA GeForce RTX 4080", HardwareMake.NVIDIA, 1.4, 22_000_000),
        ])
        updater = LarsHardwareUpdater(services.db, lars, services.user_lifecycle)

        await updater.retrieve_hardware_and_persist()

        hardware = {h.name: h for h in await services.db.get_all_hardware()}
        assert hardware["NVIDIA GeForce RTX 4090"].average_ppd == 32_000_000
        assert hardware["NVIDIA GeForce RTX 4080"].multiplier == 1.4
        assert "Intel Arc A770" not in hardware
        # Still used by Arthur
        assert "AMD Radeon RX 7900 XTX" in hardware

    async def test_empty_lars_response_changes_nothing(self, services, seeded, unused_hardware) -> None:
        updater = LarsHardwareUpdater(services.db, FakeLarsClient([]), services.user_lifecycle)

        await updater.retrieve_hardware_and_persist()

        assert len(await services.db.get_all_hardware()) == 3

    async def test_failed_update_does_not_stop_creates(self, services, seeded, monkeypatch) -> None:
        async def failing_update(hardware_id, **changes):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(services.user_lifecycle, "update_hardware", failing_update)
        lars = FakeLarsClient([
            _gpu("NVIDIA GeForce RTX 4090", HardwareMake.NVIDIA, 1.1, 30_000_000),
            _gpu("AMD Radeon RX 7900 XTX", HardwareMake.AMD, 2.0, 15_000_000),
            _gpu("AMD Radeon RX 7800 XT", HardwareMake.AMD, 2.6, 11_000_000),
        ])
        updater = LarsHardwareUpdater(services.db, lars, services.user_lifecycle)

        await updater.retrieve_hardware_and_persist()

        hardware = {h.name: h for h in await services.db.get_all_hardware()}
        assert hardware["NVIDIA GeForce RTX 4090"].multiplier == 1.0
        assert hardware["AMD Radeon RX 7800 XT"].multiplier == 2.6
