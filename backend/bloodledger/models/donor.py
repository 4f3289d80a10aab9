from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime, timezone
from .enums import VerificationState

class DonorProfile(BaseModel):
    model_config = ConfigDict(extra="ignore")
    donor_id: str
    weight: Optional[float] = None
    verification_state: VerificationState = VerificationState.UNVERIFIED
    pending_blood_group: Optional[str] = None
    blood_group: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    total_donations: int = 0
    voluntary_donations: int = 0
    last_donation_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_verified(self) -> bool:
        return self.verification_state == VerificationState.VERIFIED

class DonorCreate(BaseModel):
    donor_id: str
    weight: Optional[float] = None

class BloodGroupProposal(BaseModel):
    blood_group: str

class DonorLookup(BaseModel):
    """What donation validation needs to know about a donor."""
    weight: Optional[float] = None
    is_verified: bool = False
    blood_group: Optional[str] = None
