"""
Splits hardware retrieved from LARS against the stored hardware.

Names are matched case-insensitively.
"""

from typing import Dict, List, Sequence, Tuple


def _by_name(hardware: Sequence) -> Dict[str, object]:
    return {item.name.lower(): item for item in hardware}


class HardwareSplitter:
    
    @staticmethod
    def to_create(lars_hardware: Sequence, existing_hardware: Sequence) -> List:
        """LARS hardware with no stored hardware of the same name"""
        existing = _by_name(existing_hardware)
        return [item for item in lars_hardware if item.name.lower() not in existing]
    
    @staticmethod
    def to_delete(lars_hardware: Sequence, existing_hardware: Sequence) -> List:
        """Stored hardware that LARS no longer reports"""
        lars = _by_name(lars_hardware)
        return [item for item in existing_hardware if item.name.lower() not in lars]
    
    @staticmethod
    def to_update(lars_hardware: Sequence, existing_hardware: Sequence) -> List[Tuple[object, object]]:
        """
        (lars, existing) pairs whose multiplier or average PPD changed.
        
        Matching hardware with identical values is left alone.
        """
        existing = _by_name(existing_hardware)
        updates = []
        for item in lars_hardware:
            stored = existing.get(item.name.lower())
            if stored is None:
                continue
            if stored.multiplier != item.multiplier or stored.average_ppd != item.average_ppd:
                updates.append((item, stored))
        return updates
