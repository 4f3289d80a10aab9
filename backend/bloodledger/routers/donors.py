from fastapi import APIRouter, Depends
from typing import List

from ..middleware import LedgerAccess
from ..models import BloodGroupProposal, BloodUnit, DonationRecord, DonorCreate, DonorProfile

router = APIRouter(prefix="/donors", tags=["Donors"])

@router.post("")
def register_donor(data: DonorCreate, access: LedgerAccess = Depends()):
    donor = access.ledger.register_donor(access.user, data.donor_id, weight=data.weight)
    return {"status": "success", "donor_id": donor.donor_id}

@router.get("/{donor_id}", response_model=DonorProfile)
def get_donor(donor_id: str, access: LedgerAccess = Depends()):
    return access.ledger.get_donor(donor_id)

@router.put("/{donor_id}/blood-group")
def propose_blood_group(donor_id: str, data: BloodGroupProposal, access: LedgerAccess = Depends()):
    donor = access.ledger.propose_blood_group(access.user, donor_id, data.blood_group)
    return {
        "status": "success",
        "verification_state": donor.verification_state.value,
        "pending_blood_group": donor.pending_blood_group,
    }

@router.put("/{donor_id}/verify")
def confirm_blood_group(donor_id: str, access: LedgerAccess = Depends()):
    donor = access.ledger.confirm_blood_group(access.user, donor_id)
    return {
        "status": "success",
        "verification_state": donor.verification_state.value,
        "blood_group": donor.blood_group,
    }

@router.get("/{donor_id}/donations", response_model=List[DonationRecord])
def get_donations(donor_id: str, access: LedgerAccess = Depends()):
    return access.ledger.get_donations(donor_id)

@router.get("/{donor_id}/units", response_model=List[BloodUnit])
def get_units_by_donor(donor_id: str, access: LedgerAccess = Depends()):
    return access.ledger.get_units_by_donor(donor_id)

@router.get("/{donor_id}/journey", response_model=List[BloodUnit])
def get_journey(donor_id: str, ordered: bool = True, access: LedgerAccess = Depends()):
    return access.ledger.get_journey(donor_id, ordered=ordered)
