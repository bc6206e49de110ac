# staffing_api/common/auth.py
from __future__ import annotations

from functools import wraps
from typing import Iterable

from flask_jwt_extended import JWTManager, get_jwt, get_jwt_identity, verify_jwt_in_request

from staffing_api.common.http import fail

jwt = JWTManager()

ROLE_ENGINEER = "engineer"
ROLE_MANAGER = "manager"


# ---------- helpers ----------

def is_role_allowed(subject_role: str | None, required_roles: Iterable[str]) -> bool:
    """
    Authorization predicate evaluated per request.
    An empty `required_roles` means "any authenticated user".
    """
    required = set(required_roles or ())
    if not required:
        return True
    return subject_role in required


def current_identity() -> dict:
    """
    {user_id, email, role} of the bearer token on the current request.
    Call only after the JWT was verified.
    """
    claims = get_jwt() or {}
    uid = get_jwt_identity()
    return {
        "user_id": int(uid) if uid is not None else None,
        "email": claims.get("email"),
        "role": claims.get("role"),
    }


def token_claims(user) -> dict:
    return {"email": user.email, "role": user.role}


# ---------- decorators ----------

def requires_roles(*codes: str):
    """
    Require a valid bearer token and, when codes are given, that the token's
    role is one of them. `@requires_roles()` only requires authentication.
    """
    def outer(fn):
        @wraps(fn)
        def inner(*args, **kwargs):
            verify_jwt_in_request()
            ident = current_identity()
            if ident["user_id"] is None:
                return fail("Unauthorized", status=401, code="UNAUTHORIZED")
            if not is_role_allowed(ident["role"], codes):
                return fail("Forbidden", status=403, code="FORBIDDEN")
            return fn(*args, **kwargs)
        return inner
    return outer


# ---------- JWT error envelopes ----------

@jwt.unauthorized_loader
def _missing_token(reason: str):
    return fail(reason or "Missing bearer token", status=401, code="UNAUTHORIZED")


@jwt.invalid_token_loader
def _invalid_token(reason: str):
    return fail(reason or "Invalid token", status=401, code="UNAUTHORIZED")


@jwt.expired_token_loader
def _expired_token(_header, _payload):
    return fail("Token has expired", status=401, code="UNAUTHORIZED")
