from __future__ import annotations

from flask import Blueprint, request

from staffing_api.common import validation as v
from staffing_api.common.auth import ROLE_MANAGER, requires_roles
from staffing_api.common.http import fail, json_body, ok
from staffing_api.common.rows import project_row
from staffing_api.models.project import PROJECT_STATUSES
from staffing_api.services import projects as project_svc

bp = Blueprint("projects", __name__, url_prefix="/api/projects")

FIELDS = ("name", "description", "requiredSkills", "teamSize", "startDate", "endDate", "status")


def _read_fields(d: dict, errors: dict, partial: bool) -> dict:
    """camelCase body -> model kwargs. In partial mode only present keys are read."""
    def want(key):
        return not partial or key in d

    out = {}
    if want("name"):
        out["name"] = v.string(d, "name", errors)
    if want("description"):
        out["description"] = v.string(d, "description", errors)
    if want("requiredSkills"):
        out["required_skills"] = v.string_list(d, "requiredSkills", errors)
    if want("teamSize"):
        out["team_size"] = v.integer(d, "teamSize", errors, minimum=1)
    if want("startDate"):
        out["start_date"] = v.date_field(d, "startDate", errors)
    if want("endDate"):
        out["end_date"] = v.date_field(d, "endDate", errors)
    if "status" in d:
        out["status"] = v.choice(d, "status", PROJECT_STATUSES, errors)
    v.date_order(out.get("start_date"), out.get("end_date"), errors)
    return out


# ---------- routes ----------

@bp.post("")
@requires_roles(ROLE_MANAGER)
def create_project():
    d = json_body()
    errors = {}
    v.reject_unknown(d, FIELDS, errors)
    fields = _read_fields(d, errors, partial=False)
    v.raise_if(errors)
    p = project_svc.create_project(**fields)
    return ok(project_row(p), status=201)


@bp.get("")
@requires_roles()
def list_projects():
    """GET /api/projects?status=active"""
    status = request.args.get("status")
    if status and status not in PROJECT_STATUSES:
        return fail(f"status must be one of: {', '.join(PROJECT_STATUSES)}", status=400, code="VALIDATION_ERROR")
    rows = project_svc.list_projects(status=status)
    return ok([project_row(p) for p in rows], total=len(rows))


@bp.get("/skills")
@requires_roles()
def find_by_skills():
    """GET /api/projects/skills?skills=python,react"""
    skills = v.csv_arg(request.args.get("skills"))
    if not skills:
        return fail("skills query parameter is required", status=400, code="VALIDATION_ERROR")
    rows = project_svc.find_by_skills(skills)
    return ok([project_row(p) for p in rows], total=len(rows))


@bp.get("/<int:project_id>")
@requires_roles()
def get_project(project_id: int):
    return ok(project_row(project_svc.get_project(project_id)))


@bp.route("/<int:project_id>", methods=["PUT", "PATCH"])
@requires_roles(ROLE_MANAGER)
def update_project(project_id: int):
    d = json_body()
    errors = {}
    v.reject_unknown(d, FIELDS, errors)
    changes = _read_fields(d, errors, partial=True)
    v.raise_if(errors)
    p = project_svc.update_project(project_id, changes)
    return ok(project_row(p))


@bp.delete("/<int:project_id>")
@requires_roles(ROLE_MANAGER)
def delete_project(project_id: int):
    project_svc.delete_project(project_id)
    return ok({"id": project_id, "deleted": True})
