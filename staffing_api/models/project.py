from datetime import datetime
from staffing_api.extensions import db

PROJECT_STATUSES = ("planning", "active", "completed")


class Project(db.Model):
    __tablename__ = "projects"

    id              = db.Column(db.Integer, primary_key=True)
    name            = db.Column(db.String(255), nullable=False)
    description     = db.Column(db.Text, nullable=False)
    required_skills = db.Column(db.JSON, nullable=False, default=list)
    team_size       = db.Column(db.Integer, nullable=False, default=1)
    start_date      = db.Column(db.Date, nullable=False)
    end_date        = db.Column(db.Date, nullable=False)
    status          = db.Column(db.String(20), nullable=False, default="planning", index=True)
    created_at      = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at      = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.CheckConstraint("team_size >= 1", name="ck_projects_team_size"),
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id} name={self.name!r} status={self.status}>"
