from datetime import datetime
from staffing_api.extensions import db
from werkzeug.security import generate_password_hash, check_password_hash

USER_ROLES = ("engineer", "manager")
SENIORITY_LEVELS = ("junior", "mid", "senior")


class User(db.Model):
    __tablename__ = "users"

    id           = db.Column(db.Integer, primary_key=True)
    email        = db.Column(db.String(255), unique=True, index=True, nullable=False)
    password_hash= db.Column(db.String(255), nullable=False)
    name         = db.Column(db.String(255), nullable=False)
    role         = db.Column(db.String(20), nullable=False, default="engineer", index=True)
    skills       = db.Column(db.JSON, nullable=False, default=list)
    seniority    = db.Column(db.String(20), nullable=False, default="junior")
    max_capacity = db.Column(db.Integer, nullable=False, default=100)
    department   = db.Column(db.String(120), nullable=True)
    created_at   = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at   = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("max_capacity >= 0 AND max_capacity <= 100", name="ck_users_max_capacity"),
    )

    # --- helpers ---
    def set_password(self, raw: str):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return check_password_hash(self.password_hash, raw)

    @property
    def is_engineer(self) -> bool:
        return self.role == "engineer"

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"
