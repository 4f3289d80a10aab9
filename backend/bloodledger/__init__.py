"""
Blood Unit Ledger & Allocation Engine.
Tracks blood units from donation through dispatch and matches hospital requests against stock.
"""
from .services.ledger import BloodLedger

__all__ = ["BloodLedger"]
