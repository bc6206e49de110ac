import os
from datetime import date, timedelta

import pytest

from staffing_api import create_app
from staffing_api.extensions import db
from staffing_api.services import users as user_svc
from staffing_api.services import projects as project_svc
from staffing_api.services.capacity import today

PASSWORD = "secret123"


@pytest.fixture(scope="function")
def app():
    os.environ["DATABASE_URL"] = "sqlite:///:memory:"
    app = create_app({
        "TESTING": True,
        "JWT_SECRET_KEY": "test-jwt-secret-key-that-is-long-enough",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def session(app):
    with app.app_context():
        yield db.session


@pytest.fixture(scope="function")
def client(app):
    return app.test_client()


def days(n: int) -> date:
    return today() + timedelta(days=n)


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role="engineer", max_capacity=100, skills=None, email=None, name=None):
        counter["n"] += 1
        n = counter["n"]
        return user_svc.create_user(
            email=email or f"{role}{n}@test.local",
            password=PASSWORD,
            name=name or f"{role.title()} {n}",
            role=role,
            skills=skills or [],
            max_capacity=max_capacity,
        )
    return _make


@pytest.fixture
def make_project(app):
    def _make(name="Apollo", status="active", skills=None):
        return project_svc.create_project(
            name=name,
            description=f"{name} project",
            start_date=days(-30),
            end_date=days(120),
            required_skills=skills or ["python"],
            team_size=4,
            status=status,
        )
    return _make


@pytest.fixture
def login(client):
    def _login(user):
        res = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
        assert res.status_code == 200, res.get_json()
        return {"Authorization": f"Bearer {res.get_json()['access_token']}"}
    return _login
