from __future__ import annotations

from flask import Blueprint, request

from staffing_api.common import validation as v
from staffing_api.common.auth import ROLE_ENGINEER, ROLE_MANAGER, current_identity, requires_roles
from staffing_api.common.http import fail, json_body, ok
from staffing_api.common.rows import assignment_row
from staffing_api.services import capacity

bp = Blueprint("assignments", __name__, url_prefix="/api/assignments")

CREATE_FIELDS = ("engineerId", "projectId", "allocationPercentage", "startDate", "endDate", "role")
PATCH_FIELDS = ("role", "allocationPercentage", "startDate", "endDate")


def _rows(items):
    return [assignment_row(a) for a in items]


# ---------- routes ----------

@bp.post("")
@requires_roles(ROLE_MANAGER)
def create_assignment():
    """
    POST /api/assignments

    Body:
    {
      "engineerId": 3,
      "projectId": 7,
      "allocationPercentage": 40,   // 0-100
      "startDate": "2025-10-01",
      "endDate": "2025-12-31",
      "role": "Developer"
    }

    Rules:
      - engineerId must be a user with role "engineer"
      - allocationPercentage must fit in the engineer's available capacity
        (maxCapacity minus allocations of assignments not yet ended)
    """
    d = json_body()
    errors = {}
    v.reject_unknown(d, CREATE_FIELDS, errors)
    engineer_id = v.integer(d, "engineerId", errors, minimum=1)
    project_id = v.integer(d, "projectId", errors, minimum=1)
    allocation = v.integer(d, "allocationPercentage", errors, minimum=0, maximum=100)
    start = v.date_field(d, "startDate", errors)
    end = v.date_field(d, "endDate", errors)
    role = v.string(d, "role", errors)
    v.date_order(start, end, errors)
    v.raise_if(errors)

    a = capacity.create_assignment(
        engineer_id=engineer_id,
        project_id=project_id,
        allocation_percentage=allocation,
        start_date=start,
        end_date=end,
        role=role,
    )
    return ok(assignment_row(a), status=201)


@bp.get("")
@requires_roles()
def list_assignments():
    """Engineers see only their own assignments; managers see all."""
    ident = current_identity()
    if ident["role"] == ROLE_ENGINEER:
        items = capacity.list_assignments(engineer_id=ident["user_id"])
    else:
        items = capacity.list_assignments()
    return ok(_rows(items), total=len(items))


@bp.get("/engineer/<int:engineer_id>")
@requires_roles()
def list_for_engineer(engineer_id: int):
    items = capacity.list_assignments(engineer_id=engineer_id)
    return ok(_rows(items), total=len(items))


@bp.get("/project/<int:project_id>")
@requires_roles()
def list_for_project(project_id: int):
    items = capacity.list_assignments(project_id=project_id)
    return ok(_rows(items), total=len(items))


@bp.get("/engineers/<int:engineer_id>/capacity")
@requires_roles()
def engineer_capacity(engineer_id: int):
    """
    GET /api/assignments/engineers/<id>/capacity[?asOf=YYYY-MM-DD]
    data is the available capacity as an integer (may be negative).
    """
    raw = request.args.get("asOf")
    as_of = v.parse_date_any(raw) if raw else None
    if raw and as_of is None:
        return fail("asOf must be a date (YYYY-MM-DD)", status=400, code="VALIDATION_ERROR")
    return ok(capacity.compute_available_capacity(engineer_id, as_of))


@bp.get("/<int:assignment_id>")
@requires_roles()
def get_assignment(assignment_id: int):
    return ok(assignment_row(capacity.get_assignment(assignment_id)))


@bp.patch("/<int:assignment_id>")
@requires_roles(ROLE_MANAGER)
def update_assignment(assignment_id: int):
    d = json_body()
    errors = {}
    for key in ("engineerId", "projectId"):
        if key in d:
            errors[key] = "field cannot be changed"
    v.reject_unknown({k: d[k] for k in d if k not in ("engineerId", "projectId")}, PATCH_FIELDS, errors)

    patch = {}
    if "role" in d:
        patch["role"] = v.string(d, "role", errors)
    # presence test: 0 is a real value and still goes through the capacity check
    if "allocationPercentage" in d:
        patch["allocation_percentage"] = v.integer(d, "allocationPercentage", errors, minimum=0, maximum=100)
    if "startDate" in d:
        patch["start_date"] = v.date_field(d, "startDate", errors)
    if "endDate" in d:
        patch["end_date"] = v.date_field(d, "endDate", errors)
    v.date_order(patch.get("start_date"), patch.get("end_date"), errors)
    v.raise_if(errors)

    a = capacity.update_assignment(assignment_id, patch)
    return ok(assignment_row(a))


@bp.delete("/<int:assignment_id>")
@requires_roles(ROLE_MANAGER)
def delete_assignment(assignment_id: int):
    capacity.remove_assignment(assignment_id)
    return ok({"id": assignment_id, "deleted": True})
