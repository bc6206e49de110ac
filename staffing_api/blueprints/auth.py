from flask import Blueprint, jsonify
from flask_jwt_extended import create_access_token

from staffing_api.common import validation as v
from staffing_api.common.auth import current_identity, requires_roles, token_claims
from staffing_api.common.http import fail, json_body, ok
from staffing_api.common.rows import user_row
from staffing_api.services import users as user_svc

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.post("/login")
def login():
    data = json_body()
    errors = {}
    email = v.string(data, "email", errors)
    password = v.string(data, "password", errors)
    v.raise_if(errors)

    u = user_svc.authenticate(email, password)
    if not u:
        return fail("Invalid credentials", status=401, code="UNAUTHORIZED")

    access = create_access_token(identity=str(u.id), additional_claims=token_claims(u))
    return jsonify({"success": True, "access_token": access, "user": user_row(u)}), 200


@bp.get("/profile")
@requires_roles()
def profile():
    u = user_svc.get_user(current_identity()["user_id"])
    return ok(user_row(u))
