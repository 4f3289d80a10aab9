"""
Audit Log Models
Audit trail entries for every ledger mutation.
"""
from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional
from enum import Enum
import uuid


class AuditAction(str, Enum):
    CREATE = "create"

    # Verification workflow
    PROPOSE = "propose"
    VERIFY = "verify"

    # Unit lifecycle
    DISPATCH = "dispatch"
    SPLIT = "split"
    SPOIL = "spoil"
    EXPIRE = "expire"
    FULFILL = "fulfill"

    PERMISSION_DENIED = "permission_denied"


class AuditModule(str, Enum):
    DONORS = "donors"
    DONATIONS = "donations"
    BLOOD_UNITS = "blood_units"
    REQUESTS = "requests"


class AuditLog(BaseModel):
    """Audit log entry for tracking ledger actions."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))

    # Who
    user_id: Optional[str] = None
    user_role: Optional[str] = None

    # Action details
    action: AuditAction
    module: AuditModule
    record_id: Optional[str] = None
    record_type: Optional[str] = None  # e.g., "donor", "blood_unit", "request"
    description: Optional[str] = None

    # Data changes
    old_values: Optional[dict] = None
    new_values: Optional[dict] = None

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Optional[dict] = None
