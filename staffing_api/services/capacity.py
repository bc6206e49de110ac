"""
Capacity accounting for engineer assignments.

Available capacity is always derived from the assignment rows:

    available = User.max_capacity - sum(allocation_percentage)
                over the engineer's assignments with end_date >= as_of

Assignments that have not started yet are still counted. Nothing is cached,
so deleting or shortening an assignment frees its share immediately.

Writes lock the engineer's user row first (SELECT ... FOR UPDATE) and run the
check and the insert/update in the same transaction, so two concurrent
requests for one engineer cannot both pass the check on Postgres. SQLite
ignores the lock clause; its single writer serialises commits anyway.
"""
from __future__ import annotations

import logging
from datetime import date, datetime

from sqlalchemy import func

from staffing_api.common.errors import APIError, CapacityExceeded, NotFound, ValidationError
from staffing_api.extensions import db
from staffing_api.models.assignment import Assignment
from staffing_api.models.user import User
from staffing_api.services.projects import get_project
from staffing_api.services.users import get_user

log = logging.getLogger(__name__)

PATCHABLE_FIELDS = ("role", "allocation_percentage", "start_date", "end_date")
IMMUTABLE_FIELDS = ("engineer_id", "project_id")


# ---------- helpers ----------

def today() -> date:
    """The single clock for "now" in capacity checks (UTC calendar day)."""
    return datetime.utcnow().date()


def _as_of_date(as_of: date | datetime | None) -> date:
    if as_of is None:
        return today()
    if isinstance(as_of, datetime):
        return as_of.date()
    return as_of


def _allocated(engineer_id: int, as_of: date, exclude_id: int | None = None) -> int:
    q = db.session.query(func.coalesce(func.sum(Assignment.allocation_percentage), 0)).filter(
        Assignment.engineer_id == engineer_id,
        Assignment.end_date >= as_of,
    )
    if exclude_id is not None:
        q = q.filter(Assignment.id != exclude_id)
    return int(q.scalar() or 0)


def _lock_engineer(engineer_id) -> User:
    u = (
        db.session.query(User)
        .filter(User.id == engineer_id)
        .with_for_update()
        .one_or_none()
    )
    if not u:
        raise NotFound("User not found")
    return u


def get_assignment(assignment_id) -> Assignment:
    a = db.session.get(Assignment, assignment_id)
    if not a:
        raise NotFound("Assignment not found")
    return a


# ---------- reads ----------

def compute_available_capacity(engineer_id, as_of: date | datetime | None = None) -> int:
    """
    max_capacity minus the allocations still active (end_date >= as_of).
    May be negative when the data is already over capacity.
    """
    u = get_user(engineer_id)
    return u.max_capacity - _allocated(u.id, _as_of_date(as_of))


def list_assignments(engineer_id=None, project_id=None):
    q = Assignment.query
    if engineer_id is not None:
        q = q.filter(Assignment.engineer_id == engineer_id)
    if project_id is not None:
        q = q.filter(Assignment.project_id == project_id)
    return q.order_by(Assignment.start_date.asc(), Assignment.id.asc()).all()


# ---------- writes ----------

def create_assignment(engineer_id, project_id, allocation_percentage: int,
                      start_date: date, end_date: date, role: str) -> Assignment:
    try:
        engineer = _lock_engineer(engineer_id)
        if not engineer.is_engineer:
            raise ValidationError("Can only assign engineers to projects",
                                  errors={"engineerId": "user is not an engineer"})
        get_project(project_id)

        available = engineer.max_capacity - _allocated(engineer.id, _as_of_date(None))
        if allocation_percentage > available:
            log.info("capacity rejected engineer=%s requested=%s available=%s",
                     engineer.id, allocation_percentage, available)
            raise CapacityExceeded(
                f"Engineer only has {available}% capacity available",
                available=available,
                requested=allocation_percentage,
            )

        a = Assignment(
            engineer_id=engineer.id,
            project_id=project_id,
            allocation_percentage=allocation_percentage,
            start_date=start_date,
            end_date=end_date,
            role=role,
        )
        db.session.add(a)
        db.session.commit()
    except APIError:
        db.session.rollback()
        raise

    log.info("created assignment id=%s engineer=%s project=%s allocation=%s",
             a.id, a.engineer_id, a.project_id, a.allocation_percentage)
    return a


def update_assignment(assignment_id, patch: dict) -> Assignment:
    """
    Apply a partial update. engineer_id / project_id cannot change.
    When allocation_percentage is present (0 included), or when an ended
    assignment is extended back into the active window, the engineer's other
    active allocations plus the resulting allocation must fit in max_capacity.
    """
    bad = {k: "field cannot be changed" for k in patch if k in IMMUTABLE_FIELDS}
    bad.update({k: "field is not allowed" for k in patch
                if k not in PATCHABLE_FIELDS and k not in IMMUTABLE_FIELDS})
    if bad:
        raise ValidationError("Validation failed", errors=bad)

    try:
        a = get_assignment(assignment_id)

        start = patch.get("start_date", a.start_date)
        end = patch.get("end_date", a.end_date)
        if start and end and end < start:
            raise ValidationError("Validation failed",
                                  errors={"endDate": "must not be before startDate"})

        # an ended assignment whose end_date moves to today or later rejoins the active sum
        now = today()
        reactivated = a.end_date < now <= end
        if "allocation_percentage" in patch or reactivated:
            new_alloc = patch.get("allocation_percentage", a.allocation_percentage)
            engineer = _lock_engineer(a.engineer_id)
            others = _allocated(engineer.id, now, exclude_id=a.id)
            if others + new_alloc > engineer.max_capacity:
                available = engineer.max_capacity - others
                log.info("capacity rejected update assignment=%s engineer=%s requested=%s available=%s",
                         a.id, engineer.id, new_alloc, available)
                raise CapacityExceeded(
                    f"Engineer would exceed capacity. Available: {available}%, Requested: {new_alloc}%",
                    available=available,
                    requested=new_alloc,
                )

        for key in PATCHABLE_FIELDS:
            if key in patch:
                setattr(a, key, patch[key])
        db.session.commit()
    except APIError:
        db.session.rollback()
        raise

    log.info("updated assignment id=%s fields=%s", a.id, sorted(patch))
    return a


def remove_assignment(assignment_id):
    a = get_assignment(assignment_id)
    db.session.delete(a)
    db.session.commit()
    log.info("removed assignment id=%s", assignment_id)
