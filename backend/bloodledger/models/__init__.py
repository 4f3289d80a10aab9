from .enums import (
    UserRole, BloodGroup, DonationKind, UnitStatus, VerificationState,
    AllocationPolicy, Operation
)
from .user import Caller
from .blood_unit import BloodUnit, Dispatch, ALLOWED_TRANSITIONS
from .donation import DonationRecord, DonationCreate
from .donor import DonorProfile, DonorCreate, DonorLookup, BloodGroupProposal
from .request import BloodRequest, BloodRequestCreate, AllocationResult
from .audit import AuditLog, AuditAction, AuditModule
