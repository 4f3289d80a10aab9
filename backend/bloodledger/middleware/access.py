"""
Request-scoped access helpers.
Callers identify themselves with X-User-Id / X-User-Role headers; the
ledger's authorizer decides what each role may do.
"""
from fastapi import Depends, Header, HTTPException, Request
from typing import Optional

from ..models import Caller, UserRole
from ..services import BloodLedger


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Caller:
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Missing caller identity headers")
    try:
        role = UserRole(x_user_role.strip().lower())
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role: {x_user_role}")
    return Caller(id=x_user_id.strip(), role=role)


def get_ledger(request: Request) -> BloodLedger:
    return request.app.state.ledger


class LedgerAccess:
    """Bundles the caller and the ledger for a route."""

    def __init__(
        self,
        current_user: Caller = Depends(get_current_user),
        ledger: BloodLedger = Depends(get_ledger),
    ):
        self.user = current_user
        self.ledger = ledger
