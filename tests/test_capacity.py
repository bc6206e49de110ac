import logging
from datetime import timedelta

import pytest

from staffing_api.common.errors import CapacityExceeded, NotFound, ValidationError
from staffing_api.models.assignment import Assignment
from staffing_api.services import capacity
from staffing_api.services import users as user_svc


def _d(n):
    return capacity.today() + timedelta(days=n)


def _assign(engineer, project, pct, start=-10, end=60, role="Developer"):
    return capacity.create_assignment(
        engineer_id=engineer.id,
        project_id=project.id,
        allocation_percentage=pct,
        start_date=_d(start),
        end_date=_d(end),
        role=role,
    )


def _raw_assignment(session, engineer, project, pct, start, end):
    """Insert bypassing the capacity check (legacy / over-booked data)."""
    a = Assignment(engineer_id=engineer.id, project_id=project.id, allocation_percentage=pct,
                   start_date=_d(start), end_date=_d(end), role="Developer")
    session.add(a)
    session.commit()
    return a


def test_available_capacity_scenario(make_user, make_project):
    eng = make_user(max_capacity=100)
    p1 = make_project("Apollo")
    p2 = make_project("Gemini")

    _assign(eng, p1, 60)
    assert capacity.compute_available_capacity(eng.id) == 40

    with pytest.raises(CapacityExceeded) as ex:
        _assign(eng, p2, 50)
    assert "40" in ex.value.message
    assert ex.value.available == 40
    assert ex.value.requested == 50
    # rejected create is not persisted
    assert len(capacity.list_assignments(engineer_id=eng.id)) == 1

    _assign(eng, p2, 40)
    assert capacity.compute_available_capacity(eng.id) == 0


def test_past_assignment_excluded_future_included(session, make_user, make_project):
    eng = make_user(max_capacity=100)
    p = make_project()

    _raw_assignment(session, eng, p, 70, start=-90, end=-1)   # already ended
    _raw_assignment(session, eng, p, 25, start=30, end=90)    # not started yet
    assert capacity.compute_available_capacity(eng.id) == 75


def test_assignment_ending_today_still_counts(session, make_user, make_project):
    eng = make_user()
    p = make_project()
    _raw_assignment(session, eng, p, 30, start=-5, end=0)
    assert capacity.compute_available_capacity(eng.id) == 70


def test_capacity_as_of_later_date(session, make_user, make_project):
    eng = make_user()
    p = make_project()
    _raw_assignment(session, eng, p, 30, start=-5, end=10)
    _raw_assignment(session, eng, p, 20, start=-5, end=40)
    assert capacity.compute_available_capacity(eng.id, as_of=_d(20)) == 80


def test_capacity_is_not_clamped(session, make_user, make_project):
    eng = make_user(max_capacity=50)
    p = make_project()
    _raw_assignment(session, eng, p, 80, start=-5, end=10)
    assert capacity.compute_available_capacity(eng.id) == -30


def test_capacity_unknown_engineer(app):
    with pytest.raises(NotFound):
        capacity.compute_available_capacity(9999)


def test_non_engineer_rejected_before_other_checks(make_user):
    mgr = make_user(role="manager", max_capacity=0)
    # project id does not exist either: role check must fire first
    with pytest.raises(ValidationError) as ex:
        capacity.create_assignment(mgr.id, 4242, 10, _d(0), _d(10), "Lead")
    assert "engineer" in ex.value.message


def test_create_unknown_project_and_engineer(make_user, make_project):
    eng = make_user()
    with pytest.raises(NotFound):
        capacity.create_assignment(eng.id, 4242, 10, _d(0), _d(10), "Dev")
    p = make_project()
    with pytest.raises(NotFound):
        capacity.create_assignment(9999, p.id, 10, _d(0), _d(10), "Dev")


def test_create_returns_resolved_relations(make_user, make_project):
    eng = make_user(name="Ada Lovelace")
    p = make_project("Engine")
    a = _assign(eng, p, 30)
    got = capacity.get_assignment(a.id)
    assert got.engineer.name == "Ada Lovelace"
    assert got.project.name == "Engine"


def test_update_excludes_the_assignment_itself(make_user, make_project):
    eng = make_user(max_capacity=100)
    p = make_project()
    a = _assign(eng, p, 60)
    _assign(eng, p, 30)

    # others = 30, so 70 fits exactly
    updated = capacity.update_assignment(a.id, {"allocation_percentage": 70})
    assert updated.allocation_percentage == 70
    assert capacity.compute_available_capacity(eng.id) == 0


def test_update_over_capacity_leaves_record_unchanged(make_user, make_project):
    eng = make_user(max_capacity=100)
    p = make_project()
    a = _assign(eng, p, 60)
    _assign(eng, p, 30)

    with pytest.raises(CapacityExceeded) as ex:
        capacity.update_assignment(a.id, {"allocation_percentage": 80, "role": "Tech Lead"})
    assert "Available: 70%" in ex.value.message
    assert ex.value.available == 70

    fresh = capacity.get_assignment(a.id)
    assert fresh.allocation_percentage == 60
    assert fresh.role == "Developer"


def test_update_to_zero_still_checks_capacity(make_user, make_project):
    eng = make_user(max_capacity=100)
    p = make_project()
    a_id = _assign(eng, p, 40).id
    b_id = _assign(eng, p, 60).id
    # capacity lowered after the fact: the others (40) already exceed 30
    user_svc.update_user(eng.id, {"max_capacity": 30})

    with pytest.raises(CapacityExceeded) as ex:
        capacity.update_assignment(b_id, {"allocation_percentage": 0})
    assert ex.value.available == -10
    assert capacity.get_assignment(b_id).allocation_percentage == 60

    # the same update with the other assignment gone succeeds
    capacity.remove_assignment(a_id)
    assert capacity.update_assignment(b_id, {"allocation_percentage": 0}).allocation_percentage == 0


def test_lowering_max_capacity_below_allocations_is_logged(make_user, make_project, caplog):
    eng = make_user(max_capacity=100)
    p = make_project()
    _assign(eng, p, 70)

    with caplog.at_level(logging.INFO, logger="staffing_api.services.users"):
        user_svc.update_user(eng.id, {"max_capacity": 80})
        assert "lowered below active allocations" not in caplog.text
        user_svc.update_user(eng.id, {"max_capacity": 50})
    assert "lowered below active allocations" in caplog.text
    assert "available=-20" in caplog.text
    assert capacity.compute_available_capacity(eng.id) == -20


def test_update_without_allocation_skips_check(session, make_user, make_project):
    eng = make_user(max_capacity=50)
    p = make_project()
    a = _raw_assignment(session, eng, p, 80, start=-5, end=10)  # over-booked data
    updated = capacity.update_assignment(a.id, {"role": "Reviewer", "end_date": _d(20)})
    assert updated.role == "Reviewer"
    assert updated.end_date == _d(20)


def test_extending_ended_assignment_rechecks_capacity(session, make_user, make_project):
    eng = make_user(max_capacity=100)
    p = make_project()
    old_id = _raw_assignment(session, eng, p, 80, start=-30, end=-1).id  # ended yesterday
    _assign(eng, p, 60)

    with pytest.raises(CapacityExceeded) as ex:
        capacity.update_assignment(old_id, {"end_date": _d(30)})
    assert ex.value.available == 40
    assert ex.value.requested == 80

    assert capacity.get_assignment(old_id).end_date == _d(-1)
    assert capacity.compute_available_capacity(eng.id) == 40


def test_extending_ended_assignment_within_capacity(session, make_user, make_project):
    eng = make_user(max_capacity=100)
    p = make_project()
    old_id = _raw_assignment(session, eng, p, 30, start=-30, end=-1).id
    _assign(eng, p, 60)

    updated = capacity.update_assignment(old_id, {"end_date": _d(30)})
    assert updated.end_date == _d(30)
    assert capacity.compute_available_capacity(eng.id) == 10


def test_capacity_uses_the_service_clock(session, make_user, make_project, monkeypatch):
    fixed = capacity.today() + timedelta(days=400)
    monkeypatch.setattr(capacity, "today", lambda: fixed)
    eng = make_user()
    p = make_project()
    _raw_assignment(session, eng, p, 20, start=-10, end=-1)
    _raw_assignment(session, eng, p, 30, start=-10, end=0)
    assert capacity.compute_available_capacity(eng.id) == 70


def test_update_rejects_immutable_and_unknown_fields(make_user, make_project):
    eng = make_user()
    p = make_project()
    a = _assign(eng, p, 10)
    with pytest.raises(ValidationError) as ex:
        capacity.update_assignment(a.id, {"engineer_id": 5, "color": "red"})
    assert set(ex.value.errors) == {"engineer_id", "color"}


def test_update_rejects_inverted_dates(make_user, make_project):
    eng = make_user()
    p = make_project()
    a = _assign(eng, p, 10, start=0, end=30)
    with pytest.raises(ValidationError):
        capacity.update_assignment(a.id, {"end_date": _d(-1)})


def test_update_unknown_assignment(app):
    with pytest.raises(NotFound):
        capacity.update_assignment(9999, {"role": "x"})


def test_remove_frees_capacity_immediately(make_user, make_project):
    eng = make_user()
    p = make_project()
    aid = _assign(eng, p, 100).id
    assert capacity.compute_available_capacity(eng.id) == 0

    capacity.remove_assignment(aid)
    assert capacity.compute_available_capacity(eng.id) == 100
    with pytest.raises(NotFound):
        capacity.remove_assignment(aid)


def test_serial_writes_never_exceed_max(make_user, make_project):
    eng = make_user(max_capacity=80)
    p = make_project()
    accepted = 0
    for pct in (30, 30, 30, 20, 10, 5):
        try:
            _assign(eng, p, pct)
            accepted += pct
        except CapacityExceeded:
            pass
    assert accepted == 80
    assert capacity.compute_available_capacity(eng.id) == 0
