"""
JSON snapshot persistence for the ledger.
The inventory cache is not stored: it is rebuilt from the units on load.
"""
import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import AuditLog, BloodRequest, BloodUnit, DonationRecord, DonorProfile

logger = logging.getLogger(__name__)

STATE_VERSION = 1


class LedgerState(BaseModel):
    version: int = STATE_VERSION
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    units: List[BloodUnit] = []
    requests: List[BloodRequest] = []
    donations: List[DonationRecord] = []
    donors: List[DonorProfile] = []
    audit_logs: List[AuditLog] = []


def save_state(state: LedgerState, path: str) -> None:
    """Write the snapshot atomically: temp file first, then rename over the target."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(state.model_dump_json(indent=2))
    os.replace(tmp_path, path)
    logger.info(f"[Ledger] Saved {len(state.units)} units to {path}")


def load_state(path: str) -> Optional[LedgerState]:
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        state = LedgerState.model_validate_json(f.read())
    if state.version != STATE_VERSION:
        raise ValueError(f"Unsupported ledger state version {state.version} in {path}")
    logger.info(f"[Ledger] Loaded {len(state.units)} units from {path}")
    return state
