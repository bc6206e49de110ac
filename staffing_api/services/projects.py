import logging

from staffing_api.common.errors import NotFound, ValidationError
from staffing_api.extensions import db
from staffing_api.models.assignment import Assignment
from staffing_api.models.project import Project

log = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "required_skills", "team_size",
                    "start_date", "end_date", "status")


def create_project(name, description, start_date, end_date, required_skills=None,
                   team_size=1, status="planning") -> Project:
    p = Project(
        name=name,
        description=description,
        start_date=start_date,
        end_date=end_date,
        required_skills=list(required_skills or []),
        team_size=team_size or 1,
        status=status or "planning",
    )
    db.session.add(p)
    db.session.commit()
    log.info("created project id=%s status=%s", p.id, p.status)
    return p


def get_project(project_id) -> Project:
    p = db.session.get(Project, project_id)
    if not p:
        raise NotFound("Project not found")
    return p


def list_projects(status=None):
    q = Project.query
    if status:
        q = q.filter(Project.status == status)
    return q.order_by(Project.id.asc()).all()


def find_by_skills(skills):
    """Projects whose requiredSkills intersect `skills`."""
    wanted = set(skills or [])
    if not wanted:
        return []
    return [p for p in list_projects() if wanted & set(p.required_skills or [])]


def update_project(project_id, changes: dict) -> Project:
    p = get_project(project_id)
    start = changes.get("start_date", p.start_date)
    end = changes.get("end_date", p.end_date)
    if start and end and end < start:
        raise ValidationError("Validation failed", errors={"endDate": "must not be before startDate"})
    for key, val in changes.items():
        if key in UPDATABLE_FIELDS:
            setattr(p, key, val)
    db.session.commit()
    return p


def delete_project(project_id):
    p = get_project(project_id)
    Assignment.query.filter(Assignment.project_id == p.id).delete()
    db.session.delete(p)
    db.session.commit()
    log.info("deleted project id=%s", project_id)
