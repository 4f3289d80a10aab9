"""
Inventory Index
Per-type cache of stored volume. Every credit/debit is paired with the unit
mutation that justifies it; rebuild() and verify() tie the cache back to the
unit store.
"""
from typing import Dict, Iterable

from ..models import UnitStatus
from .errors import LedgerInvariantError
from .unit_store import UnitStore


class InventoryIndex:
    def __init__(self, blood_types: Iterable[str]):
        self._totals: Dict[str, int] = {bt: 0 for bt in blood_types}

    def credit(self, blood_type: str, volume: int) -> int:
        if volume <= 0:
            raise LedgerInvariantError(f"Credit of {volume} ml to {blood_type}")
        self._totals[blood_type] = self._totals.get(blood_type, 0) + volume
        return self._totals[blood_type]

    def debit(self, blood_type: str, volume: int) -> int:
        current = self._totals.get(blood_type, 0)
        if volume <= 0 or volume > current:
            raise LedgerInvariantError(
                f"Debit of {volume} ml from {blood_type} with {current} ml cached"
            )
        self._totals[blood_type] = current - volume
        return self._totals[blood_type]

    def available(self, blood_type: str) -> int:
        return self._totals.get(blood_type, 0)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._totals)

    @staticmethod
    def compute(store: UnitStore, blood_types: Iterable[str]) -> Dict[str, int]:
        """Full scan of the store: stored volume per type."""
        totals = {bt: 0 for bt in blood_types}
        for unit in store:
            if unit.status == UnitStatus.STORED:
                totals[unit.blood_type] = totals.get(unit.blood_type, 0) + unit.volume
        return totals

    def rebuild(self, store: UnitStore) -> None:
        self._totals = self.compute(store, self._totals.keys())

    def verify(self, store: UnitStore) -> None:
        expected = self.compute(store, self._totals.keys())
        if expected != self._totals:
            diverged = sorted(
                bt for bt in set(expected) | set(self._totals)
                if expected.get(bt, 0) != self._totals.get(bt, 0)
            )
            raise LedgerInvariantError(f"Inventory cache diverged for {', '.join(diverged)}")
