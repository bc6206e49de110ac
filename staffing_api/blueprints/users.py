from __future__ import annotations

from flask import Blueprint, request

from staffing_api.common import validation as v
from staffing_api.common.auth import ROLE_MANAGER, current_identity, requires_roles
from staffing_api.common.http import fail, json_body, ok
from staffing_api.common.rows import user_row
from staffing_api.models.user import SENIORITY_LEVELS, USER_ROLES
from staffing_api.services import users as user_svc

bp = Blueprint("users", __name__, url_prefix="/api/users")

CREATE_FIELDS = ("name", "email", "password", "role", "skills", "seniority", "maxCapacity", "department")
PATCH_FIELDS = ("name", "password", "skills", "seniority", "maxCapacity", "department")


# ---------- routes ----------

@bp.post("")
def register():
    """
    POST /api/users   (public)

    Body:
    {
      "name": "Asha", "email": "asha@example.com", "password": "secret1",
      "role": "engineer",            // default engineer
      "skills": ["python"],          // default []
      "seniority": "mid",            // default junior
      "maxCapacity": 50,             // 0-100, default 100
      "department": "Platform"       // optional
    }
    """
    d = json_body()
    errors = {}
    v.reject_unknown(d, CREATE_FIELDS, errors)
    name = v.string(d, "name", errors, min_len=2)
    email = v.email(d, "email", errors)
    password = v.string(d, "password", errors, min_len=6)
    role = v.choice(d, "role", USER_ROLES, errors, required=False)
    skills = v.string_list(d, "skills", errors, required=False)
    seniority = v.choice(d, "seniority", SENIORITY_LEVELS, errors, required=False)
    max_capacity = v.integer(d, "maxCapacity", errors, required=False, minimum=0, maximum=100)
    department = v.string(d, "department", errors, required=False)
    v.raise_if(errors)

    u = user_svc.create_user(
        email=email,
        password=password,
        name=name,
        role=role or "engineer",
        skills=skills or [],
        seniority=seniority or "junior",
        max_capacity=100 if max_capacity is None else max_capacity,
        department=department,
    )
    return ok(user_row(u), status=201)


@bp.get("")
@requires_roles()
def list_users():
    """GET /api/users?role=engineer&skills=python,react"""
    role = request.args.get("role")
    if role and role not in USER_ROLES:
        return fail(f"role must be one of: {', '.join(USER_ROLES)}", status=400, code="VALIDATION_ERROR")
    rows = user_svc.list_users(role=role, skills=v.csv_arg(request.args.get("skills")))
    return ok([user_row(u) for u in rows], total=len(rows))


@bp.get("/<int:user_id>")
@requires_roles()
def get_user(user_id: int):
    return ok(user_row(user_svc.get_user(user_id)))


@bp.patch("/<int:user_id>")
@requires_roles()
def update_user(user_id: int):
    ident = current_identity()
    if ident["role"] != ROLE_MANAGER and ident["user_id"] != user_id:
        return fail("Forbidden", status=403, code="FORBIDDEN")

    d = json_body()
    errors = {}
    v.reject_unknown(d, PATCH_FIELDS, errors)
    changes = {}
    if "name" in d:
        changes["name"] = v.string(d, "name", errors, min_len=2)
    if "skills" in d:
        changes["skills"] = v.string_list(d, "skills", errors)
    if "seniority" in d:
        changes["seniority"] = v.choice(d, "seniority", SENIORITY_LEVELS, errors)
    if "maxCapacity" in d:
        changes["max_capacity"] = v.integer(d, "maxCapacity", errors, minimum=0, maximum=100)
    if "department" in d:
        # explicit null clears it
        changes["department"] = v.string(d, "department", errors, required=False)
    password = v.string(d, "password", errors, required=False, min_len=6)
    v.raise_if(errors)

    u = user_svc.update_user(user_id, changes, password=password)
    return ok(user_row(u))


@bp.delete("/<int:user_id>")
@requires_roles(ROLE_MANAGER)
def delete_user(user_id: int):
    user_svc.delete_user(user_id)
    return ok({"id": user_id, "deleted": True})
