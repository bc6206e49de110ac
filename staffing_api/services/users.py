import logging

from sqlalchemy.exc import IntegrityError

from staffing_api.common.errors import Conflict, NotFound
from staffing_api.extensions import db
from staffing_api.models.assignment import Assignment
from staffing_api.models.user import User

log = logging.getLogger(__name__)

# profile fields a PATCH may touch; role and email are fixed at registration
UPDATABLE_FIELDS = ("name", "skills", "seniority", "max_capacity", "department")


def create_user(email, password, name, role="engineer", skills=None,
                seniority="junior", max_capacity=100, department=None):
    """
    Register an account. Raises Conflict when the email is already taken.
    """
    email = (email or "").strip().lower()
    if User.query.filter_by(email=email).first():
        raise Conflict("Email already exists")

    u = User(
        email=email,
        name=name,
        role=role or "engineer",
        skills=list(skills or []),
        seniority=seniority or "junior",
        max_capacity=100 if max_capacity is None else max_capacity,
        department=department,
    )
    u.set_password(password)
    db.session.add(u)
    try:
        db.session.commit()
    except IntegrityError:
        # lost a race with a concurrent registration on the unique index
        db.session.rollback()
        raise Conflict("Email already exists")
    log.info("registered user id=%s role=%s", u.id, u.role)
    return u


def get_user(user_id) -> User:
    u = db.session.get(User, user_id)
    if not u:
        raise NotFound("User not found")
    return u


def find_by_email(email):
    return User.query.filter_by(email=(email or "").strip().lower()).first()


def authenticate(email, password):
    """Returns the User for valid credentials, else None."""
    u = find_by_email(email)
    if not u or not u.check_password(password or ""):
        return None
    return u


def list_users(role=None, skills=None):
    """
    role   : equality filter
    skills : users having ANY of the given skills (set intersection)
    """
    q = User.query
    if role:
        q = q.filter(User.role == role)
    rows = q.order_by(User.id.asc()).all()
    if skills:
        wanted = set(skills)
        rows = [u for u in rows if wanted & set(u.skills or [])]
    return rows


def update_user(user_id, changes: dict, password=None) -> User:
    """
    Lowering max_capacity below the engineer's active allocations is allowed;
    existing assignments stay, and it is logged so the over-booking is visible.
    """
    u = get_user(user_id)
    for key, val in changes.items():
        if key in UPDATABLE_FIELDS:
            setattr(u, key, val)
    if password:
        u.set_password(password)
    db.session.commit()

    if "max_capacity" in changes:
        from staffing_api.services.capacity import compute_available_capacity
        available = compute_available_capacity(u.id)
        if available < 0:
            log.info("max_capacity lowered below active allocations user=%s max=%s available=%s",
                     u.id, u.max_capacity, available)
    return u


def delete_user(user_id):
    u = get_user(user_id)
    # assignments reference the user; remove them with it
    Assignment.query.filter(Assignment.engineer_id == u.id).delete()
    db.session.delete(u)
    db.session.commit()
    log.info("deleted user id=%s", user_id)
