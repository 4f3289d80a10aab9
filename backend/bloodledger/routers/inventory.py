"""
Inventory API
Stock levels, unit lookup, near-expiry listing and unit retirement.
"""
from fastapi import APIRouter, Depends, Query
from typing import Dict, List, Optional

from ..middleware import LedgerAccess
from ..models import AuditLog, BloodUnit

router = APIRouter(prefix="/inventory", tags=["Inventory"])

@router.get("", response_model=Dict[str, int])
def get_inventory(recompute: bool = False, access: LedgerAccess = Depends()):
    """Stored volume (ml) per blood type"""
    return access.ledger.get_inventory(recompute=recompute)

@router.get("/near-expiry", response_model=List[BloodUnit])
def get_units_near_expiry(
    within_days: float = Query(7, ge=0),
    access: LedgerAccess = Depends()
):
    return access.ledger.get_units_near_expiry(within_days)

@router.get("/units/{unit_id}", response_model=BloodUnit)
def get_unit(unit_id: str, access: LedgerAccess = Depends()):
    return access.ledger.get_unit(unit_id)

@router.put("/units/{unit_id}/spoil")
def mark_spoiled(unit_id: str, reason: str = "", access: LedgerAccess = Depends()):
    unit = access.ledger.mark_spoiled(access.user, unit_id, reason)
    return {"status": "success", "unit_id": unit.id, "unit_status": unit.status.value}

@router.post("/expire")
def expire_units(access: LedgerAccess = Depends()):
    expired = access.ledger.expire_units(access.user)
    return {"status": "success", "expired": expired}

@router.get("/audit", response_model=List[AuditLog])
def get_audit_logs(record_id: Optional[str] = None, access: LedgerAccess = Depends()):
    return access.ledger.get_audit_logs(record_id)
