"""
Donation Registry
Validates a donation, creates its stored unit, credits the inventory and
keeps per-donor donation history.
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ..config import Settings
from ..models import BloodUnit, DonationRecord, DonationKind, UnitStatus
from .errors import ValidationError, NotVerified, NotFound
from .identity import normalize_donor_id, require_volume
from .inventory_index import InventoryIndex
from .type_catalog import TypeCatalog
from .unit_store import UnitStore
from .verification import DonorRegistry

logger = logging.getLogger(__name__)


class DonationRegistry:
    def __init__(
        self,
        store: UnitStore,
        index: InventoryIndex,
        catalog: TypeCatalog,
        donors: DonorRegistry,
        settings: Settings,
        records: Optional[List[DonationRecord]] = None,
    ):
        self.store = store
        self.index = index
        self.catalog = catalog
        self.donors = donors
        self.settings = settings
        self._records: List[DonationRecord] = list(records or [])

    def records(self) -> List[DonationRecord]:
        return list(self._records)

    def history(self, donor_id: str) -> List[DonationRecord]:
        donor_id = normalize_donor_id(donor_id)
        return [r for r in self._records if r.donor_id == donor_id]

    def next_record_id(self) -> str:
        return f"DON-{len(self._records) + 1:06d}"

    def validate(
        self,
        volume: int,
        weight: Optional[float] = None,
        expiry_days: Optional[int] = None,
        storage_temp: Optional[float] = None,
    ) -> None:
        require_volume(volume, "Donation volume")
        if weight is not None:
            if weight <= 0:
                raise ValidationError("weight_positive", "Donor weight must be positive")
            cap = weight * self.settings.max_ml_per_kg
            if volume > cap:
                raise ValidationError(
                    "volume_weight_cap",
                    f"Volume {volume} ml exceeds {self.settings.max_ml_per_kg} ml/kg cap ({cap:g} ml)",
                )
        if expiry_days is not None:
            if expiry_days <= 0 or expiry_days > self.settings.max_expiry_days:
                raise ValidationError(
                    "expiry_days_range",
                    f"Expiry must be between 1 and {self.settings.max_expiry_days} days",
                )
        if storage_temp is not None:
            low, high = self.settings.min_storage_temp, self.settings.max_storage_temp
            if not low <= storage_temp <= high:
                raise ValidationError(
                    "storage_temp_range",
                    f"Storage temperature must be between {low:g} and {high:g} C",
                )

    def donate(
        self,
        donor_id: str,
        volume: int,
        location: str,
        now: datetime,
        blood_type: Optional[str] = None,
        weight: Optional[float] = None,
        expiry_days: Optional[int] = None,
        storage_temp: Optional[float] = None,
        kind: DonationKind = DonationKind.VOLUNTARY,
        metadata: Optional[dict] = None,
    ) -> BloodUnit:
        """Record a donation and return the stored unit it created."""
        donor_id = normalize_donor_id(donor_id)
        try:
            donor = self.donors.lookup(donor_id)
        except NotFound:
            raise NotVerified(f"Donor {donor_id} is not registered")
        if not donor.is_verified:
            raise NotVerified(f"Donor {donor_id} has not completed blood group verification")

        if blood_type is None or not blood_type.strip():
            blood_type = donor.blood_group
        blood_type = self.catalog.require(blood_type)
        if donor.blood_group and blood_type != donor.blood_group:
            raise ValidationError(
                "blood_group_mismatch",
                f"Blood type {blood_type} does not match confirmed group {donor.blood_group}",
            )

        if weight is None:
            weight = donor.weight
        self.validate(volume, weight=weight, expiry_days=expiry_days, storage_temp=storage_temp)

        unit = BloodUnit(
            donor_id=donor_id,
            blood_type=blood_type,
            volume=volume,
            status=UnitStatus.STORED,
            collected_at=now,
            expiry_time=now + timedelta(days=expiry_days) if expiry_days else None,
            storage_temp=storage_temp,
            location=location or "",
            metadata=dict(metadata or {}),
        )
        unit_id = self.store.append(unit)
        self.index.credit(blood_type, volume)

        self._records.append(DonationRecord(
            id=self.next_record_id(),
            donor_id=donor_id,
            unit_id=unit_id,
            blood_type=blood_type,
            volume=volume,
            location=location or "",
            kind=kind,
            timestamp=now,
        ))

        profile = self.donors.get(donor_id)
        profile.total_donations += 1
        if kind == DonationKind.VOLUNTARY:
            profile.voluntary_donations += 1
        profile.last_donation_date = now

        logger.info(f"[Ledger] Donation {unit_id}: {volume} ml {blood_type} from {donor_id}")
        return self.store.get(unit_id)
