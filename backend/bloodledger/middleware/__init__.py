"""
Middleware package for the Blood Ledger API.
"""
from .access import (
    get_current_user,
    get_ledger,
    LedgerAccess
)

__all__ = [
    'get_current_user',
    'get_ledger',
    'LedgerAccess'
]
