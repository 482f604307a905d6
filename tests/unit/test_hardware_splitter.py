"""Unit tests for HardwareSplitter."""

from dataclasses import dataclass

from tcbot.operations.hardware_splitter import HardwareSplitter


@dataclass
class Item:
    name: str
    multiplier: float = 1.0
    average_ppd: int = 1_000
    id: int = 0


class TestHardwareSplitter:
    """Tests for splitting LARS hardware against stored hardware."""

    def test_to_create_only_new_names(self) -> None:
        lars = [Item("RTX 4090"), Item("RX 7900 XTX")]
        existing = [Item("rtx 4090", id=1)]

        created = HardwareSplitter.to_create(lars, existing)

        assert [item.name for item in created] == ["RX 7900 XTX"]

    def test_to_delete_only_missing_from_lars(self) -> None:
        lars = [Item("RTX 4090")]
        existing = [Item("RTX 4090", id=1), Item("GTX 1080", id=2)]

        deleted = HardwareSplitter.to_delete(lars, existing)

        assert [item.id for item in deleted] == [2]

    def test_to_update_only_changed_values(self) -> None:
        lars = [Item("RTX 4090", multiplier=1.2), Item("RX 7900 XTX", multiplier=2.0), Item("Arc A770", average_ppd=5)]
        existing = [
            Item("RTX 4090", multiplier=1.0, id=1),
            Item("RX 7900 XTX", multiplier=2.0, id=2),
            Item("ARC A770", average_ppd=4, id=3),
        ]

        updated = HardwareSplitter.to_update(lars, existing)

        assert [(new.name, stored.id) for new, stored in updated] == [("RTX 4090", 1), ("Arc A770", 3)]

    def test_empty_lars_deletes_everything(self) -> None:
        existing = [Item("RTX 4090", id=1)]

        assert HardwareSplitter.to_delete([], existing) == existing
        assert HardwareSplitter.to_create([], existing) == []
        assert HardwareSplitter.to_update([], existing) == []
