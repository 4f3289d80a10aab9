from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime, timezone
from .enums import DonationKind

class DonationRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str = ""
    donor_id: str
    unit_id: str
    blood_type: str
    volume: int
    location: str = ""
    kind: DonationKind = DonationKind.VOLUNTARY
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class DonationCreate(BaseModel):
    donor_id: str
    volume: int
    location: str = ""
    blood_type: Optional[str] = None
    weight: Optional[float] = None
    expiry_days: Optional[int] = None
    storage_temp: Optional[float] = None
    kind: DonationKind = DonationKind.VOLUNTARY
    metadata: dict = {}
