from datetime import datetime
from staffing_api.extensions import db


class Assignment(db.Model):
    __tablename__ = "assignments"

    id          = db.Column(db.Integer, primary_key=True)
    engineer_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id  = db.Column(db.Integer, db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    allocation_percentage = db.Column(db.Integer, nullable=False)
    start_date  = db.Column(db.Date, nullable=False)
    end_date    = db.Column(db.Date, nullable=False, index=True)
    role        = db.Column(db.String(120), nullable=False)  # e.g. Developer, Tech Lead

    created_at  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at  = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # read-only joins used to resolve engineer / project on output
    engineer = db.relationship("User", lazy="joined", viewonly=True)
    project  = db.relationship("Project", lazy="joined", viewonly=True)

    __table_args__ = (
        db.CheckConstraint(
            "allocation_percentage >= 0 AND allocation_percentage <= 100",
            name="ck_assignments_allocation",
        ),
        db.Index("ix_assignment_engineer_end", "engineer_id", "end_date"),
    )

    def __repr__(self) -> str:
        return (f"<Assignment id={self.id} engineer_id={self.engineer_id} "
                f"project_id={self.project_id} allocation={self.allocation_percentage}>")
