from enum import Enum

class UserRole(str, Enum):
    ADMIN = "admin"
    REGISTRATION = "registration"
    PHLEBOTOMIST = "phlebotomist"
    LAB_TECH = "lab_tech"
    INVENTORY = "inventory"
    DISTRIBUTION = "distribution"
    HOSPITAL = "hospital"
    DONOR = "donor"

class BloodGroup(str, Enum):
    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"

class DonationKind(str, Enum):
    VOLUNTARY = "voluntary"
    REPLACEMENT = "replacement"
    AUTOLOGOUS = "autologous"

class UnitStatus(str, Enum):
    STORED = "stored"
    DISPATCHED = "dispatched"
    SPOILED = "spoiled"
    EXPIRED = "expired"

class VerificationState(str, Enum):
    UNVERIFIED = "unverified"
    PENDING_VERIFICATION = "pending_verification"
    VERIFIED = "verified"

class AllocationPolicy(str, Enum):
    FIFO = "fifo"
    EXPIRY = "expiry"

class Operation(str, Enum):
    REGISTER_DONOR = "register_donor"
    PROPOSE_BLOOD_GROUP = "propose_blood_group"
    CONFIRM_BLOOD_GROUP = "confirm_blood_group"
    DONATE = "donate"
    REQUEST_BLOOD = "request_blood"
    MARK_SPOILED = "mark_spoiled"
    EXPIRE_UNITS = "expire_units"
