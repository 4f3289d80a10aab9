"""
Journey Reader
Read-only views over the unit store: a donor's unit history, inventory
snapshots and units close to expiry.
"""
from datetime import datetime, timedelta
from typing import Dict, List

from ..models import BloodUnit, UnitStatus
from .identity import normalize_donor_id
from .inventory_index import InventoryIndex
from .type_catalog import TypeCatalog
from .unit_store import UnitStore


class JourneyReader:
    def __init__(self, store: UnitStore, index: InventoryIndex, catalog: TypeCatalog):
        self.store = store
        self.index = index
        self.catalog = catalog

    def journey(self, donor_id: str, ordered: bool = True) -> List[BloodUnit]:
        """
        Every unit traced to a donor, split portions included.

        With ordered=True the units are sorted by collection time; sorted() is
        stable, so units collected at the same instant keep creation order.
        """
        units = self.store.list_by_donor(normalize_donor_id(donor_id))
        if ordered:
            units = sorted(units, key=lambda u: u.collected_at)
        return [u.model_copy(deep=True) for u in units]

    def inventory_snapshot(self, recompute: bool = False) -> Dict[str, int]:
        if recompute:
            return InventoryIndex.compute(self.store, self.catalog.types)
        return self.index.snapshot()

    def units_near_expiry(self, within_days: float, now: datetime) -> List[BloodUnit]:
        cutoff = now + timedelta(days=within_days)
        units = [
            u for u in self.store.all()
            if u.status == UnitStatus.STORED and u.expiry_time is not None and u.expiry_time <= cutoff
        ]
        units.sort(key=lambda u: (u.expiry_time, u.sequence))
        return [u.model_copy(deep=True) for u in units]
