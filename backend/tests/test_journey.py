from datetime import timedelta

import pytest

from bloodledger.database import load_state, save_state
from bloodledger.models import AuditAction, UnitStatus
from bloodledger.services import BloodLedger, NotFound, ValidationError

from conftest import ADMIN, HOSPITAL, make_verified_donor


def test_journey_includes_split_portions_in_time_order(ledger, verified_donor, clock):
    verified_donor("donor-1", "O+")
    verified_donor("donor-2", "O+")
    first = ledger.donate(ADMIN, "donor-1", 500)
    clock.advance(days=1)
    ledger.donate(ADMIN, "donor-2", 300)
    clock.advance(days=1)
    second = ledger.donate(ADMIN, "donor-1", 200)
    ledger.request_blood(HOSPITAL, "General", "O+", 100)

    journey = ledger.get_journey("donor-1")
    assert [u.collected_at for u in journey] == sorted(u.collected_at for u in journey)
    # The split portion shares its parent's collection time and follows it.
    assert [u.id for u in journey] == [first, "BU-000004", second]
    assert journey[1].split_from == first
    assert journey[1].status == UnitStatus.DISPATCHED

    unordered = ledger.get_journey("donor-1", ordered=False)
    assert [u.id for u in unordered] == [first, second, "BU-000004"]
    assert ledger.get_units_by_donor("donor-1") == unordered


def test_journey_is_read_only(ledger, verified_donor):
    verified_donor("donor-1", "O+")
    unit_id = ledger.donate(ADMIN, "donor-1", 500)
    journey = ledger.get_journey("donor-1")
    journey[0].volume = 1
    journey[0].status = UnitStatus.DISPATCHED
    assert ledger.get_unit(unit_id).volume == 500
    assert ledger.available("O+") == 500


def test_unknown_donor_has_empty_journey(ledger):
    assert ledger.get_journey("nobody") == []


def test_inventory_reads_are_idempotent_and_match_recompute(ledger, verified_donor):
    verified_donor("donor-1", "A-")
    ledger.donate(ADMIN, "donor-1", 450)
    ledger.request_blood(HOSPITAL, "General", "A-", 120)

    first = ledger.get_inventory()
    second = ledger.get_inventory()
    assert first == second
    assert first == ledger.get_inventory(recompute=True)
    assert first["A-"] == 330
    assert set(first) == {"A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"}


def test_units_near_expiry(ledger, verified_donor, clock):
    verified_donor("donor-1", "O+")
    ledger.donate(ADMIN, "donor-1", 100, expiry_days=30)
    ledger.donate(ADMIN, "donor-1", 100, expiry_days=3)
    ledger.donate(ADMIN, "donor-1", 100)
    short = ledger.donate(ADMIN, "donor-1", 100, expiry_days=2)
    # FIFO dispatches the first two units; dispatched units no longer count
    ledger.request_blood(HOSPITAL, "General", "O+", 200)

    assert [u.id for u in ledger.get_units_near_expiry(7)] == [short]

    fresh = ledger.donate(ADMIN, "donor-1", 100, expiry_days=6)
    assert [u.id for u in ledger.get_units_near_expiry(7)] == [short, fresh]
    assert [u.id for u in ledger.get_units_near_expiry(1)] == []
    with pytest.raises(ValidationError):
        ledger.get_units_near_expiry(-1)


def test_expire_units_retires_and_debits(ledger, verified_donor, clock):
    verified_donor("donor-1", "O+")
    short = ledger.donate(ADMIN, "donor-1", 300, expiry_days=2)
    ledger.donate(ADMIN, "donor-1", 200, expiry_days=20)

    assert ledger.expire_units(ADMIN) == []
    clock.advance(days=2)
    assert ledger.expire_units(ADMIN) == [short]
    assert ledger.get_unit(short).status == UnitStatus.EXPIRED
    assert ledger.available("O+") == 200
    assert ledger.expire_units(ADMIN, now=clock.now + timedelta(days=30)) != []
    assert ledger.available("O+") == 0


def test_mark_spoiled(ledger, verified_donor):
    verified_donor("donor-1", "B+")
    unit_id = ledger.donate(ADMIN, "donor-1", 400)
    unit = ledger.mark_spoiled(ADMIN, unit_id, reason="bag leak")
    assert unit.status == UnitStatus.SPOILED
    assert unit.status_reason == "bag leak"
    assert ledger.available("B+") == 0

    with pytest.raises(ValidationError):
        ledger.mark_spoiled(ADMIN, unit_id)
    with pytest.raises(NotFound):
        ledger.mark_spoiled(ADMIN, "BU-999999")
    actions = [e.action for e in ledger.get_audit_logs(unit_id)]
    assert actions == [AuditAction.CREATE, AuditAction.SPOIL]


def test_request_audit_trail(ledger, verified_donor):
    verified_donor("donor-1", "O+")
    unit_id = ledger.donate(ADMIN, "donor-1", 500)
    result = ledger.request_blood(HOSPITAL, "General", "O+", 200)
    portion_id = result.dispatched[0].unit_id

    split_log = ledger.get_audit_logs(portion_id)
    assert [e.action for e in split_log] == [AuditAction.SPLIT]
    assert split_log[0].old_values["unit_id"] == unit_id
    assert split_log[0].user_id == HOSPITAL.id
    assert [e.action for e in ledger.get_audit_logs(result.request_id)] == [AuditAction.FULFILL]


def test_state_round_trip_rebuilds_inventory(ledger, verified_donor, settings, clock, tmp_path):
    verified_donor("donor-1", "O+")
    ledger.donate(ADMIN, "donor-1", 500, expiry_days=10)
    ledger.request_blood(HOSPITAL, "General", "O+", 120)

    path = str(tmp_path / "ledger.json")
    save_state(ledger.export_state(), path)
    restored = BloodLedger(settings=settings, clock=clock, state=load_state(path))

    assert restored.get_inventory() == ledger.get_inventory()
    assert [u.model_dump() for u in restored.get_journey("donor-1")] == \
        [u.model_dump() for u in ledger.get_journey("donor-1")]
    assert [r.model_dump() for r in restored.get_requests()] == \
        [r.model_dump() for r in ledger.get_requests()]
    assert restored.get_donor("donor-1").blood_group == "O+"
    restored.check_invariants()

    # Ids keep counting from where the saved ledger stopped.
    unit_id = restored.donate(ADMIN, "donor-1", 100)
    assert unit_id == "BU-000003"
    assert restored.request_blood(HOSPITAL, "General", "O+", 10).request_id == "REQ-000002"


def test_load_missing_state_file(tmp_path):
    assert load_state(str(tmp_path / "missing.json")) is None


def test_extra_blood_types_are_tracked(settings, clock):
    settings.extra_blood_types = ["BOMBAY"]
    ledger = BloodLedger(settings=settings, clock=clock)
    make_verified_donor(ledger, "donor-1", "bombay")
    ledger.donate(ADMIN, "donor-1", 300)
    assert ledger.get_inventory()["BOMBAY"] == 300


def test_expire_units_accepts_naive_now_as_utc(ledger, verified_donor, clock):
    verified_donor("donor-1", "O+")
    short = ledger.donate(ADMIN, "donor-1", 300, expiry_days=2)
    naive = (clock.now + timedelta(days=3)).replace(tzinfo=None)
    assert ledger.expire_units(ADMIN, now=naive) == [short]
    assert ledger.available("O+") == 0
