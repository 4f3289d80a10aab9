"""
Ledger services: the unit store, inventory cache and the engines that write to them.
"""
from .errors import (
    LedgerError, ValidationError, InvalidBloodType, InsufficientStock, NotFound,
    NotAuthorized, NotVerified, AlreadyVerified, AlreadyPending, NoPendingValue,
    LedgerInvariantError
)
from .type_catalog import TypeCatalog, canonicalize
from .unit_store import UnitStore
from .inventory_index import InventoryIndex
from .verification import DonorRegistry
from .donation_registry import DonationRegistry
from .allocation import AllocationEngine
from .journey import JourneyReader
from .authorization import RoleAuthorizer, DEFAULT_ROLE_PERMISSIONS
from .audit_service import AuditService
from .ledger import BloodLedger

__all__ = [
    'LedgerError',
    'ValidationError',
    'InvalidBloodType',
    'InsufficientStock',
    'NotFound',
    'NotAuthorized',
    'NotVerified',
    'AlreadyVerified',
    'AlreadyPending',
    'NoPendingValue',
    'LedgerInvariantError',
    'TypeCatalog',
    'canonicalize',
    'UnitStore',
    'InventoryIndex',
    'DonorRegistry',
    'DonationRegistry',
    'AllocationEngine',
    'JourneyReader',
    'RoleAuthorizer',
    'DEFAULT_ROLE_PERMISSIONS',
    'AuditService',
    'BloodLedger'
]
