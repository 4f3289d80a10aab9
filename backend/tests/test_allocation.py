import random

import pytest

from bloodledger.models import UnitStatus
from bloodledger.services import (
    BloodLedger, InsufficientStock, InvalidBloodType, NotAuthorized, ValidationError
)

from conftest import ADMIN, HOSPITAL, PHLEBOTOMIST, make_verified_donor


def test_split_leaves_remainder_stored(ledger, verified_donor, clock):
    verified_donor("donor-1", "O+")
    original = ledger.donate(PHLEBOTOMIST, "donor-1", 500, location="Central", expiry_days=30)
    assert ledger.available("O+") == 500

    clock.advance(hours=2)
    result = ledger.request_blood(HOSPITAL, "St Mary's", "o+", 200)

    assert result.fulfilled
    assert len(result.dispatched) == 1
    portion_id = result.dispatched[0].unit_id
    assert portion_id != original
    assert result.dispatched[0].volume == 200

    remainder = ledger.get_unit(original)
    assert remainder.volume == 300
    assert remainder.status == UnitStatus.STORED
    assert remainder.hospital is None

    portion = ledger.get_unit(portion_id)
    assert portion.volume == 200
    assert portion.status == UnitStatus.DISPATCHED
    assert portion.hospital == "St Mary's"
    assert portion.dispatched_at == clock.now
    assert portion.split_from == original
    assert portion.donor_id == "donor-1"
    assert portion.collected_at == remainder.collected_at
    assert portion.expiry_time == remainder.expiry_time
    assert portion.location == "Central"
    assert ledger.available("O+") == 300


def test_fifo_dispatches_oldest_unit_first(ledger, verified_donor):
    verified_donor("donor-1", "O+")
    first = ledger.donate(ADMIN, "donor-1", 100)
    second = ledger.donate(ADMIN, "donor-1", 200)

    result = ledger.request_blood(HOSPITAL, "General", "O+", 150)

    assert result.dispatched[0].unit_id == first
    assert result.dispatched[0].volume == 100
    assert result.dispatched[1].volume == 50
    assert ledger.get_unit(first).status == UnitStatus.DISPATCHED
    assert ledger.get_unit(first).volume == 100
    assert ledger.get_unit(second).status == UnitStatus.STORED
    assert ledger.get_unit(second).volume == 150
    assert ledger.get_unit(result.dispatched[1].unit_id).split_from == second
    assert ledger.available("O+") == 150


def test_exact_match_dispatches_whole_units_without_split(ledger, verified_donor):
    verified_donor("donor-1", "A+")
    a = ledger.donate(ADMIN, "donor-1", 200)
    b = ledger.donate(ADMIN, "donor-1", 250)
    result = ledger.request_blood(HOSPITAL, "General", "A+", 450)
    assert [d.unit_id for d in result.dispatched] == [a, b]
    assert len(ledger.get_units_by_donor("donor-1")) == 2
    assert ledger.available("A+") == 0


def test_other_types_are_skipped(ledger):
    make_verified_donor(ledger, "donor-a", "A+")
    make_verified_donor(ledger, "donor-o", "O+")
    a_unit = ledger.donate(ADMIN, "donor-a", 300)
    o_unit = ledger.donate(ADMIN, "donor-o", 300)
    result = ledger.request_blood(HOSPITAL, "General", "O+", 300)
    assert [d.unit_id for d in result.dispatched] == [o_unit]
    assert ledger.get_unit(a_unit).status == UnitStatus.STORED
    assert ledger.get_inventory()["A+"] == 300


def test_insufficient_stock_changes_nothing(ledger, verified_donor):
    verified_donor("donor-1", "B-")
    ledger.donate(ADMIN, "donor-1", 300)
    ledger.request_blood(HOSPITAL, "General", "B-", 100)

    before = ledger.export_state().model_dump_json(exclude={"saved_at"})
    with pytest.raises(InsufficientStock) as err:
        ledger.request_blood(HOSPITAL, "General", "B-", 201)
    assert err.value.available == 200
    assert err.value.required == 201
    after = ledger.export_state().model_dump_json(exclude={"saved_at"})
    assert before == after
    assert len(ledger.get_requests()) == 1


def test_request_preconditions(ledger, verified_donor):
    verified_donor("donor-1", "O+")
    ledger.donate(ADMIN, "donor-1", 300)
    with pytest.raises(ValidationError):
        ledger.request_blood(HOSPITAL, "General", "O+", 0)
    with pytest.raises(ValidationError):
        ledger.request_blood(HOSPITAL, "  ", "O+", 10)
    with pytest.raises(InvalidBloodType):
        ledger.request_blood(HOSPITAL, "General", "Q+", 10)
    with pytest.raises(NotAuthorized):
        ledger.request_blood(PHLEBOTOMIST, "General", "O+", 10)
    assert ledger.get_requests() == []
    assert ledger.available("O+") == 300


def test_successful_request_is_recorded_fulfilled(ledger, verified_donor):
    verified_donor("donor-1", "O-")
    ledger.donate(ADMIN, "donor-1", 400)
    result = ledger.request_blood(HOSPITAL, "General", "O-", 250)

    requests = ledger.get_requests()
    assert len(requests) == 1
    assert requests[0].id == result.request_id
    assert requests[0].fulfilled
    assert requests[0].requester_hospital == "General"
    assert requests[0].requested_by == HOSPITAL.id
    assert sum(d.volume for d in requests[0].dispatched) == 250
    assert result.dispatched_volume == 250


def test_dispatched_units_are_never_reallocated(ledger, verified_donor):
    verified_donor("donor-1", "O+")
    ledger.donate(ADMIN, "donor-1", 300)
    ledger.request_blood(HOSPITAL, "General", "O+", 300)
    with pytest.raises(InsufficientStock):
        ledger.request_blood(HOSPITAL, "General", "O+", 1)


def test_expiry_policy_prefers_units_expiring_first(settings, clock):
    settings.allocation_policy = "expiry"
    ledger = BloodLedger(settings=settings, clock=clock)
    make_verified_donor(ledger, "donor-1", "O+")
    no_expiry = ledger.donate(ADMIN, "donor-1", 100)
    late = ledger.donate(ADMIN, "donor-1", 100, expiry_days=40)
    soon = ledger.donate(ADMIN, "donor-1", 100, expiry_days=5)

    result = ledger.request_blood(HOSPITAL, "General", "O+", 250)

    assert [d.unit_id for d in result.dispatched[:2]] == [soon, late]
    assert ledger.get_unit(no_expiry).volume == 50
    assert ledger.get_unit(no_expiry).status == UnitStatus.STORED


def test_random_sequences_conserve_volume(settings, clock):
    rng = random.Random(20240301)
    ledger = BloodLedger(settings=settings, clock=clock)
    groups = ["A+", "O+", "B-"]
    for n, group in enumerate(groups):
        make_verified_donor(ledger, f"donor-{n}", group, weight=80)

    donated = {g: 0 for g in groups}
    for _ in range(200):
        n = rng.randrange(len(groups))
        group = groups[n]
        if rng.random() < 0.55:
            volume = rng.randint(50, 700)
            ledger.donate(ADMIN, f"donor-{n}", volume)
            donated[group] += volume
        else:
            wanted = rng.randint(1, 900)
            try:
                ledger.request_blood(HOSPITAL, "General", group, wanted)
            except InsufficientStock:
                pass
        clock.advance(minutes=5)

        inventory = ledger.get_inventory()
        assert inventory == ledger.get_inventory(recompute=True)
        all_units = ledger.store.all()
        for g in groups:
            units = [u for u in all_units if u.blood_type == g]
            stored = sum(u.volume for u in units if u.status == UnitStatus.STORED)
            dispatched = sum(u.volume for u in units if u.status == UnitStatus.DISPATCHED)
            assert stored == inventory[g]
            assert stored + dispatched == donated[g]
    ledger.check_invariants()


@pytest.mark.parametrize("volume", [0.5, 100.0, True])
def test_non_integer_request_volume_changes_nothing(ledger, verified_donor, volume):
    verified_donor("donor-1", "O+")
    unit_id = ledger.donate(ADMIN, "donor-1", 100)

    before = ledger.export_state().model_dump_json(exclude={"saved_at"})
    with pytest.raises(ValidationError) as err:
        ledger.request_blood(HOSPITAL, "General", "O+", volume)
    assert err.value.rule == "volume_integer"
    assert ledger.export_state().model_dump_json(exclude={"saved_at"}) == before
    assert ledger.get_unit(unit_id).volume == 100
    assert ledger.get_requests() == []
    ledger.check_invariants()
