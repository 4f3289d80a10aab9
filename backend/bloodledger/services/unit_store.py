"""
Unit Store
Ordered, append-only collection of blood units. Creation order is the
allocation priority, so the store never reorders or deletes.
"""
from typing import Callable, Dict, Iterator, List, Optional

from ..models import BloodUnit, UnitStatus, ALLOWED_TRANSITIONS
from .errors import NotFound, LedgerInvariantError

# Fields that identify a unit's provenance and never change after creation
IMMUTABLE_FIELDS = ("id", "sequence", "donor_id", "blood_type", "collected_at", "split_from")


class UnitStore:
    def __init__(self, units: Optional[List[BloodUnit]] = None):
        self._units: List[BloodUnit] = []
        self._index: Dict[str, int] = {}
        self._next_sequence = 1
        for unit in units or []:
            self._insert(unit)

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[BloodUnit]:
        return iter(list(self._units))

    def __contains__(self, unit_id: str) -> bool:
        return unit_id in self._index

    def next_id(self) -> str:
        return f"BU-{self._next_sequence:06d}"

    def append(self, unit: BloodUnit) -> str:
        """Store a new unit at the end of creation order and return its id."""
        unit = unit.model_copy(deep=True)
        unit.sequence = self._next_sequence
        if not unit.id:
            unit.id = self.next_id()
        return self._insert(unit)

    def _insert(self, unit: BloodUnit) -> str:
        if unit.id in self._index:
            raise LedgerInvariantError(f"Duplicate unit id {unit.id}")
        self._index[unit.id] = len(self._units)
        self._units.append(unit)
        self._next_sequence = max(self._next_sequence, unit.sequence + 1)
        return unit.id

    def get(self, unit_id: str) -> BloodUnit:
        position = self._index.get(unit_id)
        if position is None:
            raise NotFound(f"Blood unit {unit_id} not found")
        return self._units[position]

    def mutate(self, unit_id: str, fn: Callable[[BloodUnit], None]) -> BloodUnit:
        """
        Apply fn to a copy of the unit and store the result.

        fn may only reduce volume (keeping it positive) or advance status out of
        stored. Anything else is a caller defect and raises LedgerInvariantError
        without touching the stored unit.
        """
        current = self.get(unit_id)
        updated = current.model_copy(deep=True)
        fn(updated)
        self._check_transition(current, updated)
        self._units[self._index[unit_id]] = updated
        return updated

    @staticmethod
    def _check_transition(before: BloodUnit, after: BloodUnit) -> None:
        for field in IMMUTABLE_FIELDS:
            if getattr(before, field) != getattr(after, field):
                raise LedgerInvariantError(f"Unit {before.id}: {field} is immutable")
        if after.volume <= 0:
            raise LedgerInvariantError(f"Unit {before.id}: volume must stay positive")
        if after.volume > before.volume:
            raise LedgerInvariantError(f"Unit {before.id}: volume can only decrease")
        if after.status != before.status:
            if after.status not in ALLOWED_TRANSITIONS[before.status]:
                raise LedgerInvariantError(
                    f"Unit {before.id}: illegal transition {before.status.value} -> {after.status.value}"
                )
        elif after.volume != before.volume and before.status != UnitStatus.STORED:
            raise LedgerInvariantError(f"Unit {before.id}: only stored units can be drawn down")

    def all(self) -> List[BloodUnit]:
        return list(self._units)

    def list_by_donor(self, donor_id: str) -> List[BloodUnit]:
        return [u for u in self._units if u.donor_id == donor_id]

    def list_by_type_and_status(self, blood_type: str, status: UnitStatus) -> List[BloodUnit]:
        return [u for u in self._units if u.blood_type == blood_type and u.status == status]
