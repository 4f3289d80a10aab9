"""
Blood Ledger
Entry point for every ledger operation. Each mutating call is authorized,
then runs under one lock together with its audit entry, so readers only
ever see whole transactions.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..config import Settings, settings as default_settings
from ..database import LedgerState
from ..models import (
    AllocationResult, AuditAction, AuditLog, AuditModule, BloodRequest, BloodUnit,
    Caller, DonationKind, DonationRecord, DonorProfile, Operation, UnitStatus, UserRole
)
from .allocation import AllocationEngine
from .audit_service import AuditService
from .authorization import Authorizer, RoleAuthorizer
from .donation_registry import DonationRegistry
from .errors import NotAuthorized, ValidationError
from .identity import normalize_donor_id
from .inventory_index import InventoryIndex
from .journey import JourneyReader
from .type_catalog import TypeCatalog
from .unit_store import UnitStore
from .verification import DonorRegistry

logger = logging.getLogger(__name__)


OPERATION_MODULES = {
    Operation.REGISTER_DONOR: AuditModule.DONORS,
    Operation.PROPOSE_BLOOD_GROUP: AuditModule.DONORS,
    Operation.CONFIRM_BLOOD_GROUP: AuditModule.DONORS,
    Operation.DONATE: AuditModule.DONATIONS,
    Operation.REQUEST_BLOOD: AuditModule.REQUESTS,
    Operation.MARK_SPOILED: AuditModule.BLOOD_UNITS,
    Operation.EXPIRE_UNITS: AuditModule.BLOOD_UNITS,
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    # Naive datetimes are taken to be UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class BloodLedger:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        authorizer: Optional[Authorizer] = None,
        clock: Callable[[], datetime] = utc_now,
        state: Optional[LedgerState] = None,
    ):
        self.settings = settings or default_settings
        self.authorizer = authorizer or RoleAuthorizer()
        self.clock = clock
        self._lock = threading.RLock()

        state = state or LedgerState()
        self.catalog = TypeCatalog(self.settings.extra_blood_types)
        self.store = UnitStore(state.units)
        self.index = InventoryIndex(self.catalog.types)
        self.index.rebuild(self.store)
        self.donors = DonorRegistry(self.catalog, state.donors)
        self.donations = DonationRegistry(
            self.store, self.index, self.catalog, self.donors, self.settings, state.donations
        )
        self.allocator = AllocationEngine(
            self.store, self.index, self.catalog, self.settings, state.requests
        )
        self.reader = JourneyReader(self.store, self.index, self.catalog)
        self.audit = AuditService(state.audit_logs)

    # ---------------------------------------------------------------- helpers

    def authorize(self, caller: Caller, operation: Operation) -> None:
        if not self.authorizer(caller, operation):
            self._deny(caller, operation, f"{caller.role.value} may not {operation.value.replace('_', ' ')}")

    def _deny(self, caller: Caller, operation: Operation, message: str) -> None:
        logger.warning(f"[Ledger] {caller.role.value} {caller.id} denied {operation.value}")
        with self._lock:
            self.audit.log(
                AuditAction.PERMISSION_DENIED, OPERATION_MODULES[operation], caller,
                description=message, metadata={"operation": operation.value},
            )
        raise NotAuthorized(message)

    def _after_mutation(self) -> None:
        if self.settings.strict_invariants:
            self.index.verify(self.store)

    def check_invariants(self) -> None:
        """Raise LedgerInvariantError if the inventory cache disagrees with the units."""
        with self._lock:
            self.index.verify(self.store)

    # ---------------------------------------------------- donor verification

    def register_donor(self, caller: Caller, donor_id: str, weight: Optional[float] = None) -> DonorProfile:
        self.authorize(caller, Operation.REGISTER_DONOR)
        with self._lock:
            donor = self.donors.register(donor_id, weight=weight, now=self.clock())
            self.audit.create(
                AuditModule.DONORS, caller, donor.donor_id, "donor",
                {"weight": donor.weight},
            )
            return donor.model_copy(deep=True)

    def propose_blood_group(self, caller: Caller, donor_id: str, blood_group: str) -> DonorProfile:
        self.authorize(caller, Operation.PROPOSE_BLOOD_GROUP)
        if caller.role == UserRole.DONOR and caller.id != normalize_donor_id(donor_id):
            self._deny(caller, Operation.PROPOSE_BLOOD_GROUP, "Donors may only propose their own blood group")
        with self._lock:
            donor = self.donors.propose_blood_group(donor_id, blood_group)
            self.audit.update(
                AuditAction.PROPOSE, AuditModule.DONORS, caller, donor.donor_id, "donor",
                {"verification_state": "unverified"},
                {"verification_state": donor.verification_state.value,
                 "pending_blood_group": donor.pending_blood_group},
            )
            return donor.model_copy(deep=True)

    def confirm_blood_group(self, caller: Caller, donor_id: str) -> DonorProfile:
        self.authorize(caller, Operation.CONFIRM_BLOOD_GROUP)
        with self._lock:
            donor = self.donors.confirm_blood_group(donor_id, verified_by=caller.id, now=self.clock())
            self.audit.update(
                AuditAction.VERIFY, AuditModule.DONORS, caller, donor.donor_id, "donor",
                {"verification_state": "pending_verification"},
                {"verification_state": donor.verification_state.value,
                 "blood_group": donor.blood_group},
            )
            return donor.model_copy(deep=True)

    # -------------------------------------------------------------- mutations

    def donate(
        self,
        caller: Caller,
        donor_id: str,
        volume: int,
        location: str = "",
        blood_type: Optional[str] = None,
        weight: Optional[float] = None,
        expiry_days: Optional[int] = None,
        storage_temp: Optional[float] = None,
        kind: DonationKind = DonationKind.VOLUNTARY,
        metadata: Optional[dict] = None,
    ) -> str:
        """Record a donation and return the id of the stored unit."""
        self.authorize(caller, Operation.DONATE)
        with self._lock:
            unit = self.donations.donate(
                donor_id, volume, location, self.clock(),
                blood_type=blood_type, weight=weight, expiry_days=expiry_days,
                storage_temp=storage_temp, kind=kind, metadata=metadata,
            )
            self.audit.create(
                AuditModule.DONATIONS, caller, unit.id, "blood_unit",
                {"donor_id": unit.donor_id, "blood_type": unit.blood_type,
                 "volume": unit.volume, "kind": kind.value, "location": unit.location},
            )
            self._after_mutation()
            return unit.id

    def request_blood(self, caller: Caller, hospital: str, blood_type: str, volume: int) -> AllocationResult:
        self.authorize(caller, Operation.REQUEST_BLOOD)
        with self._lock:
            result = self.allocator.request_blood(
                hospital, blood_type, volume, self.clock(), requested_by=caller.id
            )
            for dispatch in result.dispatched:
                unit = self.store.get(dispatch.unit_id)
                action = AuditAction.SPLIT if unit.split_from else AuditAction.DISPATCH
                self.audit.update(
                    action, AuditModule.BLOOD_UNITS, caller, unit.id, "blood_unit",
                    {"status": UnitStatus.STORED.value, "unit_id": unit.split_from or unit.id},
                    {"status": unit.status.value, "volume": dispatch.volume, "hospital": unit.hospital},
                    metadata={"request_id": result.request_id},
                )
            self.audit.log(
                AuditAction.FULFILL, AuditModule.REQUESTS, caller,
                record_id=result.request_id, record_type="request",
                description=f"Dispatched {volume} ml to {hospital}",
                new_values={"fulfilled": result.fulfilled, "units": len(result.dispatched)},
            )
            self._after_mutation()
            return result

    def mark_spoiled(self, caller: Caller, unit_id: str, reason: str = "") -> BloodUnit:
        self.authorize(caller, Operation.MARK_SPOILED)
        with self._lock:
            unit = self._retire(caller, unit_id, UnitStatus.SPOILED, reason or "spoiled", AuditAction.SPOIL)
            self._after_mutation()
            return unit

    def expire_units(self, caller: Caller, now: Optional[datetime] = None) -> List[str]:
        """Move every stored unit past its expiry time to expired."""
        self.authorize(caller, Operation.EXPIRE_UNITS)
        with self._lock:
            now = as_utc(now) if now is not None else self.clock()
            due = [
                u.id for u in self.store.all()
                if u.status == UnitStatus.STORED and u.expiry_time is not None and u.expiry_time <= now
            ]
            for unit_id in due:
                self._retire(caller, unit_id, UnitStatus.EXPIRED, "expired", AuditAction.EXPIRE)
            if due:
                logger.info(f"[Ledger] Expired {len(due)} unit(s)")
            self._after_mutation()
            return due

    def _retire(self, caller: Caller, unit_id: str, status: UnitStatus, reason: str, action: AuditAction) -> BloodUnit:
        unit = self.store.get(unit_id)
        if unit.status != UnitStatus.STORED:
            raise ValidationError("unit_not_stored", f"Unit {unit_id} is {unit.status.value}, not stored")

        def retire(u: BloodUnit):
            u.status = status
            u.status_reason = reason

        updated = self.store.mutate(unit_id, retire)
        self.index.debit(updated.blood_type, updated.volume)
        self.audit.update(
            action, AuditModule.BLOOD_UNITS, caller, unit_id, "blood_unit",
            {"status": UnitStatus.STORED.value}, {"status": status.value, "reason": reason},
        )
        logger.info(f"[Ledger] Unit {unit_id} {status.value}: {reason}")
        return updated.model_copy(deep=True)

    # ------------------------------------------------------------------ reads

    def get_unit(self, unit_id: str) -> BloodUnit:
        with self._lock:
            return self.store.get(unit_id).model_copy(deep=True)

    def get_units_by_donor(self, donor_id: str) -> List[BloodUnit]:
        with self._lock:
            return self.reader.journey(donor_id, ordered=False)

    def get_journey(self, donor_id: str, ordered: bool = True) -> List[BloodUnit]:
        with self._lock:
            return self.reader.journey(donor_id, ordered=ordered)

    def get_inventory(self, recompute: bool = False) -> Dict[str, int]:
        with self._lock:
            return self.reader.inventory_snapshot(recompute=recompute)

    def available(self, blood_type: str) -> int:
        blood_type = self.catalog.require(blood_type)
        with self._lock:
            return self.index.available(blood_type)

    def get_units_near_expiry(self, within_days: float) -> List[BloodUnit]:
        if within_days < 0:
            raise ValidationError("within_days_non_negative", "within_days must not be negative")
        with self._lock:
            return self.reader.units_near_expiry(within_days, self.clock())

    def get_requests(self) -> List[BloodRequest]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self.allocator.requests()]

    def get_donations(self, donor_id: str) -> List[DonationRecord]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self.donations.history(donor_id)]

    def get_donor(self, donor_id: str) -> DonorProfile:
        with self._lock:
            return self.donors.get(donor_id).model_copy(deep=True)

    def get_audit_logs(self, record_id: Optional[str] = None) -> List[AuditLog]:
        with self._lock:
            return self.audit.entries(record_id)

    # ------------------------------------------------------------ persistence

    def export_state(self) -> LedgerState:
        with self._lock:
            return LedgerState(
                units=[u.model_copy(deep=True) for u in self.store.all()],
                requests=[r.model_copy(deep=True) for r in self.allocator.requests()],
                donations=[r.model_copy(deep=True) for r in self.donations.records()],
                donors=[d.model_copy(deep=True) for d in self.donors.all()],
                audit_logs=self.audit.entries(),
                saved_at=self.clock(),
            )
