from fastapi import APIRouter, Depends

from ..middleware import LedgerAccess
from ..models import DonationCreate

router = APIRouter(prefix="/donations", tags=["Donations"])

@router.post("")
def create_donation(data: DonationCreate, access: LedgerAccess = Depends()):
    unit_id = access.ledger.donate(
        access.user,
        data.donor_id,
        data.volume,
        location=data.location,
        blood_type=data.blood_type,
        weight=data.weight,
        expiry_days=data.expiry_days,
        storage_temp=data.storage_temp,
        kind=data.kind,
        metadata=data.metadata,
    )
    return {"status": "success", "unit_id": unit_id}
