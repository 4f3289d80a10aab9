"""
Ledger error taxonomy.
Every error is raised before any state is written; the API layer maps
status_code straight onto the HTTP response.
"""
from typing import Optional


class LedgerError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Bad input shape or range. `rule` names the violated rule."""
    status_code = 422

    def __init__(self, rule: str, message: Optional[str] = None):
        super().__init__(message or rule)
        self.rule = rule


class InvalidBloodType(LedgerError):
    status_code = 422

    def __init__(self, label: str):
        super().__init__(f"Unknown blood type: {label!r}")
        self.label = label


class InsufficientStock(LedgerError):
    status_code = 409

    def __init__(self, blood_type: str, required: int, available: int):
        super().__init__(
            f"Insufficient {blood_type} stock: required {required} ml, available {available} ml"
        )
        self.blood_type = blood_type
        self.required = required
        self.available = available


class NotFound(LedgerError):
    status_code = 404


class NotAuthorized(LedgerError):
    status_code = 403


class NotVerified(LedgerError):
    status_code = 409


class AlreadyVerified(LedgerError):
    status_code = 409


class AlreadyPending(LedgerError):
    status_code = 409


class NoPendingValue(LedgerError):
    status_code = 409


class LedgerInvariantError(AssertionError):
    """Internal bookkeeping defect. Never caught by the ledger."""
