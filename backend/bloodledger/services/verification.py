"""
Donor Registry
Per-donor blood-group verification: unverified -> pending_verification -> verified.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from ..models import DonorProfile, DonorLookup, VerificationState
from .errors import (
    ValidationError, NotFound, AlreadyVerified, AlreadyPending, NoPendingValue
)
from .identity import normalize_donor_id
from .type_catalog import TypeCatalog

logger = logging.getLogger(__name__)


class DonorRegistry:
    def __init__(self, catalog: TypeCatalog, donors: Optional[List[DonorProfile]] = None):
        self.catalog = catalog
        self._donors: Dict[str, DonorProfile] = {d.donor_id: d for d in donors or []}

    def __contains__(self, donor_id: str) -> bool:
        return donor_id in self._donors

    def all(self) -> List[DonorProfile]:
        return list(self._donors.values())

    def get(self, donor_id: str) -> DonorProfile:
        donor = self._donors.get(normalize_donor_id(donor_id))
        if donor is None:
            raise NotFound(f"Donor {donor_id} not found")
        return donor

    def register(self, donor_id: str, weight: Optional[float] = None, now: Optional[datetime] = None) -> DonorProfile:
        donor_id = normalize_donor_id(donor_id)
        if donor_id in self._donors:
            raise ValidationError("donor_exists", f"Donor {donor_id} is already registered")
        if weight is not None and weight <= 0:
            raise ValidationError("weight_positive", "Weight must be positive")
        profile = DonorProfile(donor_id=donor_id, weight=weight)
        if now is not None:
            profile.created_at = now
        self._donors[donor_id] = profile
        logger.info(f"[Donors] Registered {donor_id}")
        return profile

    def propose_blood_group(self, donor_id: str, blood_group: str) -> DonorProfile:
        donor = self.get(donor_id)
        if donor.verification_state == VerificationState.VERIFIED:
            raise AlreadyVerified(f"Donor {donor.donor_id} is already verified")
        if donor.verification_state == VerificationState.PENDING_VERIFICATION:
            raise AlreadyPending(f"Donor {donor.donor_id} already has a pending blood group")
        donor.pending_blood_group = self.catalog.require(blood_group)
        donor.verification_state = VerificationState.PENDING_VERIFICATION
        return donor

    def confirm_blood_group(self, donor_id: str, verified_by: str, now: datetime) -> DonorProfile:
        donor = self.get(donor_id)
        if donor.verification_state == VerificationState.VERIFIED:
            raise AlreadyVerified(f"Donor {donor.donor_id} is already verified")
        if donor.verification_state != VerificationState.PENDING_VERIFICATION or not donor.pending_blood_group:
            raise NoPendingValue(f"Donor {donor.donor_id} has no pending blood group")
        donor.blood_group = donor.pending_blood_group
        donor.pending_blood_group = None
        donor.verification_state = VerificationState.VERIFIED
        donor.verified_by = verified_by
        donor.verified_at = now
        logger.info(f"[Donors] Verified {donor.donor_id} as {donor.blood_group}")
        return donor

    def lookup(self, donor_id: str) -> DonorLookup:
        donor = self.get(donor_id)
        return DonorLookup(
            weight=donor.weight,
            is_verified=donor.is_verified,
            blood_group=donor.blood_group,
        )
