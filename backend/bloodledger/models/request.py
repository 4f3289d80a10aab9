from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime, timezone
from .blood_unit import Dispatch

class BloodRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    id: str = ""
    requester_hospital: str
    blood_type: str
    required_volume: int
    fulfilled: bool = False
    dispatched: List[Dispatch] = []
    requested_by: Optional[str] = None
    requested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class BloodRequestCreate(BaseModel):
    hospital: str
    blood_type: str
    volume: int

class AllocationResult(BaseModel):
    request_id: str
    fulfilled: bool
    dispatched: List[Dispatch] = []

    @property
    def dispatched_volume(self) -> int:
        return sum(d.volume for d in self.dispatched)
