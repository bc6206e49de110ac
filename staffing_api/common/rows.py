# staffing_api/common/rows.py
# JSON row shapes shared by the blueprints (camelCase for the web client).
from staffing_api.models.assignment import Assignment
from staffing_api.models.project import Project
from staffing_api.models.user import User


def _iso(v):
    return v.isoformat() if v else None


def user_row(u: User):
    return {
        "id": u.id,
        "email": u.email,
        "name": u.name,
        "role": u.role,
        "skills": list(u.skills or []),
        "seniority": u.seniority,
        "maxCapacity": u.max_capacity,
        "department": u.department,
        "createdAt": _iso(u.created_at),
        "updatedAt": _iso(u.updated_at),
    }


def project_row(p: Project):
    return {
        "id": p.id,
        "name": p.name,
        "description": p.description,
        "requiredSkills": list(p.required_skills or []),
        "teamSize": p.team_size,
        "startDate": _iso(p.start_date),
        "endDate": _iso(p.end_date),
        "status": p.status,
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }


def assignment_row(a: Assignment):
    """Engineer and project come back resolved, not as raw ids."""
    eng = a.engineer
    prj = a.project
    return {
        "id": a.id,
        "engineerId": {"id": eng.id, "name": eng.name, "email": eng.email} if eng else a.engineer_id,
        "projectId": {"id": prj.id, "name": prj.name, "description": prj.description} if prj else a.project_id,
        "allocationPercentage": a.allocation_percentage,
        "startDate": _iso(a.start_date),
        "endDate": _iso(a.end_date),
        "role": a.role,
        "createdAt": _iso(a.created_at),
        "updatedAt": _iso(a.updated_at),
    }
