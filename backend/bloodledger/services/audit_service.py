"""
Audit Logging Service
Keeps the ledger's audit trail: one entry per successful mutation.
"""
from typing import Optional, List

from ..models import Caller
from ..models.audit import AuditLog, AuditAction, AuditModule


class AuditService:
    """Append-only store of audit log entries."""

    def __init__(self, entries: Optional[List[AuditLog]] = None):
        self._entries: List[AuditLog] = list(entries or [])

    def log(
        self,
        action: AuditAction,
        module: AuditModule,
        caller: Optional[Caller] = None,
        record_id: Optional[str] = None,
        record_type: Optional[str] = None,
        description: Optional[str] = None,
        old_values: Optional[dict] = None,
        new_values: Optional[dict] = None,
        metadata: Optional[dict] = None
    ) -> str:
        """
        Create an audit log entry.

        Args:
            action: The action being performed
            module: The module where action occurred
            caller: Who invoked the operation
            record_id: ID of the affected record
            record_type: Type of record (e.g., "donor", "blood_unit")
            description: Human-readable description
            old_values: Previous values (for updates)
            new_values: New values (for creates/updates)
            metadata: Additional metadata

        Returns:
            ID of created audit log
        """
        entry = AuditLog(
            user_id=caller.id if caller else None,
            user_role=caller.role.value if caller else None,
            action=action,
            module=module,
            record_id=record_id,
            record_type=record_type,
            description=description,
            old_values=AuditService._clean_sensitive_data(old_values),
            new_values=AuditService._clean_sensitive_data(new_values),
            metadata=AuditService._clean_sensitive_data(metadata),
        )
        self._entries.append(entry)
        return entry.id

    @staticmethod
    def _clean_sensitive_data(data: Optional[dict]) -> Optional[dict]:
        """Remove sensitive fields from audit data."""
        if not data:
            return None

        sensitive_fields = {
            "password", "password_hash", "token", "secret", "api_key", "national_id"
        }

        cleaned = {}
        for key, value in data.items():
            if key.lower() in sensitive_fields:
                cleaned[key] = "[REDACTED]"
            elif isinstance(value, dict):
                cleaned[key] = AuditService._clean_sensitive_data(value)
            else:
                cleaned[key] = value

        return cleaned

    def entries(self, record_id: Optional[str] = None) -> List[AuditLog]:
        if record_id is None:
            return [e.model_copy(deep=True) for e in self._entries]
        return [e.model_copy(deep=True) for e in self._entries if e.record_id == record_id]

    def create(self, module: AuditModule, caller: Caller, record_id: str, record_type: str, new_values: dict, **kwargs) -> str:
        """Log a CREATE action."""
        return self.log(
            AuditAction.CREATE, module, caller,
            record_id=record_id, record_type=record_type,
            new_values=new_values,
            description=f"Created {record_type} {record_id}",
            **kwargs
        )

    def update(self, action: AuditAction, module: AuditModule, caller: Caller, record_id: str, record_type: str, old_values: dict, new_values: dict, **kwargs) -> str:
        """Log a state change on an existing record."""
        return self.log(
            action, module, caller,
            record_id=record_id, record_type=record_type,
            old_values=old_values, new_values=new_values,
            description=kwargs.pop("description", None) or f"{action.value.title()} {record_type} {record_id}",
            **kwargs
        )
