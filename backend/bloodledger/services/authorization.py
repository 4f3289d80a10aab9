from typing import Callable, Dict, FrozenSet, Optional

from ..models import Caller, Operation, UserRole

Authorizer = Callable[[Caller, Operation], bool]

DEFAULT_ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[Operation]] = {
    UserRole.ADMIN: frozenset(Operation),
    UserRole.REGISTRATION: frozenset({Operation.REGISTER_DONOR, Operation.PROPOSE_BLOOD_GROUP}),
    UserRole.LAB_TECH: frozenset({Operation.CONFIRM_BLOOD_GROUP, Operation.MARK_SPOILED}),
    UserRole.PHLEBOTOMIST: frozenset({Operation.DONATE}),
    UserRole.INVENTORY: frozenset({Operation.MARK_SPOILED, Operation.EXPIRE_UNITS}),
    UserRole.DISTRIBUTION: frozenset({Operation.REQUEST_BLOOD}),
    UserRole.HOSPITAL: frozenset({Operation.REQUEST_BLOOD}),
    UserRole.DONOR: frozenset({Operation.PROPOSE_BLOOD_GROUP}),
}


class RoleAuthorizer:
    """Capability check keyed on the caller's role."""

    def __init__(self, permissions: Optional[Dict[UserRole, FrozenSet[Operation]]] = None):
        self.permissions = permissions or DEFAULT_ROLE_PERMISSIONS

    def __call__(self, caller: Caller, operation: Operation) -> bool:
        return operation in self.permissions.get(caller.role, frozenset())
