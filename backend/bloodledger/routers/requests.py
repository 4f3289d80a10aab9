from fastapi import APIRouter, Depends
from typing import List, Optional

from ..middleware import LedgerAccess
from ..models import AllocationResult, BloodRequest, BloodRequestCreate

router = APIRouter(prefix="/requests", tags=["Blood Requests"])

@router.post("", response_model=AllocationResult)
def request_blood(request_data: BloodRequestCreate, access: LedgerAccess = Depends()):
    return access.ledger.request_blood(
        access.user, request_data.hospital, request_data.blood_type, request_data.volume
    )

@router.get("", response_model=List[BloodRequest])
def get_blood_requests(
    hospital: Optional[str] = None,
    blood_type: Optional[str] = None,
    access: LedgerAccess = Depends()
):
    requests = access.ledger.get_requests()
    if hospital:
        requests = [r for r in requests if r.requester_hospital == hospital]
    if blood_type:
        blood_type = access.ledger.catalog.require(blood_type)
        requests = [r for r in requests if r.blood_type == blood_type]
    return requests
