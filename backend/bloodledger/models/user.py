from pydantic import BaseModel
from .enums import UserRole

class Caller(BaseModel):
    """Identity of whoever invokes a ledger operation."""
    id: str
    role: UserRole
