from datetime import datetime, timedelta, timezone

import pytest

from bloodledger.config import Settings
from bloodledger.models import Caller, UserRole
from bloodledger.services import BloodLedger

ADMIN = Caller(id="admin-1", role=UserRole.ADMIN)
HOSPITAL = Caller(id="st-marys", role=UserRole.HOSPITAL)
PHLEBOTOMIST = Caller(id="phleb-1", role=UserRole.PHLEBOTOMIST)


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings():
    s = Settings()
    s.extra_blood_types = []
    s.max_expiry_days = 45
    s.min_storage_temp = 4
    s.max_storage_temp = 8
    s.max_ml_per_kg = 9
    s.allocation_policy = "fifo"
    s.strict_invariants = True
    s.ledger_state_file = ""
    return s


@pytest.fixture
def ledger(settings, clock):
    return BloodLedger(settings=settings, clock=clock)


def make_verified_donor(ledger, donor_id, blood_group, weight=70.0):
    ledger.register_donor(ADMIN, donor_id, weight=weight)
    ledger.propose_blood_group(ADMIN, donor_id, blood_group)
    ledger.confirm_blood_group(ADMIN, donor_id)
    return donor_id


@pytest.fixture
def verified_donor(ledger):
    def _make(donor_id="donor-1", blood_group="O+", weight=70.0):
        return make_verified_donor(ledger, donor_id, blood_group, weight)
    return _make
