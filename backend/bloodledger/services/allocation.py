"""
Allocation Engine
Greedy matcher that fills a volume request from stored units, splitting the
last unit when it holds more than is still needed.

The stock check runs before any unit is touched. Since the inventory cache
always equals the stored volume of the type, a request that passes the check
is guaranteed to be filled, so the scan never stops half way.
"""
import logging
from datetime import datetime
from typing import List, Optional

from ..config import Settings
from ..models import (
    AllocationPolicy, AllocationResult, BloodRequest, BloodUnit, Dispatch, UnitStatus
)
from .errors import InsufficientStock, LedgerInvariantError, ValidationError
from .identity import require_volume
from .inventory_index import InventoryIndex
from .type_catalog import TypeCatalog
from .unit_store import UnitStore

logger = logging.getLogger(__name__)


def _expiry_key(unit: BloodUnit):
    # Units without an expiry go last; creation order breaks ties.
    if unit.expiry_time is None:
        return (1, 0.0, unit.sequence)
    return (0, unit.expiry_time.timestamp(), unit.sequence)


class AllocationEngine:
    def __init__(
        self,
        store: UnitStore,
        index: InventoryIndex,
        catalog: TypeCatalog,
        settings: Settings,
        requests: Optional[List[BloodRequest]] = None,
    ):
        self.store = store
        self.index = index
        self.catalog = catalog
        self.policy = AllocationPolicy(settings.allocation_policy)
        self._requests: List[BloodRequest] = list(requests or [])

    def requests(self) -> List[BloodRequest]:
        return list(self._requests)

    def next_request_id(self) -> str:
        return f"REQ-{len(self._requests) + 1:06d}"

    def candidates(self, blood_type: str) -> List[BloodUnit]:
        units = self.store.all()
        if self.policy == AllocationPolicy.EXPIRY:
            units = sorted(
                (u for u in units if u.status == UnitStatus.STORED and u.blood_type == blood_type),
                key=_expiry_key,
            )
        return units

    def request_blood(
        self,
        hospital: str,
        blood_type: str,
        required_volume: int,
        now: datetime,
        requested_by: Optional[str] = None,
    ) -> AllocationResult:
        hospital = (hospital or "").strip()
        if not hospital:
            raise ValidationError("hospital_required", "Requesting hospital is required")
        require_volume(required_volume, "Requested volume")
        blood_type = self.catalog.require(blood_type)

        available = self.index.available(blood_type)
        if required_volume > available:
            logger.warning(
                f"[Ledger] {hospital} requested {required_volume} ml {blood_type}, only {available} ml stored"
            )
            raise InsufficientStock(blood_type, required_volume, available)

        request_id = self.next_request_id()
        remaining = required_volume
        dispatched: List[Dispatch] = []

        for unit in self.candidates(blood_type):
            if remaining == 0:
                break
            if unit.status != UnitStatus.STORED or unit.blood_type != blood_type:
                continue

            if unit.volume <= remaining:
                taken = unit.volume

                def dispatch_whole(u: BloodUnit):
                    u.status = UnitStatus.DISPATCHED
                    u.hospital = hospital
                    u.dispatched_at = now
                    u.request_id = request_id

                self.store.mutate(unit.id, dispatch_whole)
                dispatched.append(Dispatch(unit_id=unit.id, volume=taken))
            else:
                taken = remaining

                def draw_down(u: BloodUnit):
                    u.volume -= taken

                self.store.mutate(unit.id, draw_down)
                portion = unit.model_copy(deep=True, update={
                    "id": "",
                    "volume": taken,
                    "status": UnitStatus.DISPATCHED,
                    "hospital": hospital,
                    "dispatched_at": now,
                    "request_id": request_id,
                    "split_from": unit.id,
                })
                portion_id = self.store.append(portion)
                dispatched.append(Dispatch(unit_id=portion_id, volume=taken))
                logger.info(f"[Ledger] Split {unit.id}: {taken} ml dispatched as {portion_id}")

            self.index.debit(blood_type, taken)
            remaining -= taken

        if remaining != 0:
            raise LedgerInvariantError(
                f"{remaining} ml of {blood_type} unallocated after stock check passed"
            )

        request = BloodRequest(
            id=request_id,
            requester_hospital=hospital,
            blood_type=blood_type,
            required_volume=required_volume,
            fulfilled=remaining == 0,
            dispatched=dispatched,
            requested_by=requested_by,
            requested_at=now,
        )
        self._requests.append(request)
        logger.info(
            f"[Ledger] Request {request_id}: {required_volume} ml {blood_type} to {hospital} "
            f"from {len(dispatched)} unit(s)"
        )
        return AllocationResult(
            request_id=request_id,
            fulfilled=request.fulfilled,
            dispatched=[d.model_copy() for d in dispatched],
        )
