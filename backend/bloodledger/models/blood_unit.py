from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime, timezone
from .enums import UnitStatus

# Status a unit may move to from each status; anything else is a reversal.
ALLOWED_TRANSITIONS = {
    UnitStatus.STORED: {UnitStatus.DISPATCHED, UnitStatus.SPOILED, UnitStatus.EXPIRED},
    UnitStatus.DISPATCHED: set(),
    UnitStatus.SPOILED: set(),
    UnitStatus.EXPIRED: set(),
}

class BloodUnit(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str = ""
    sequence: int = 0
    donor_id: str
    blood_type: str
    volume: int = Field(gt=0)
    status: UnitStatus = UnitStatus.STORED
    collected_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    expiry_time: Optional[datetime] = None
    storage_temp: Optional[float] = None
    location: str = ""
    hospital: Optional[str] = None
    dispatched_at: Optional[datetime] = None
    request_id: Optional[str] = None
    split_from: Optional[str] = None
    status_reason: Optional[str] = None
    metadata: dict = Field(default_factory=dict)


class Dispatch(BaseModel):
    """One (unit, volume) pair handed to a hospital."""
    unit_id: str
    volume: int
