import logging
import os
from datetime import timedelta

import click
from flask import Flask
from flask_cors import CORS

from staffing_api.extensions import db, init_db, DEFAULT_DATABASE_URL
from staffing_api.common.auth import jwt
from staffing_api.models import load_all


def create_app(config_object=None):
    """
    Application factory.

    config_object: optional dotted import path or mapping applied after the
    environment defaults (tests pass a dict).
    """
    app = Flask(__name__)

    # Basic inline config (defaults)
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(hours=int(os.getenv("JWT_EXPIRATION_HOURS", "1")))
    app.config["JWT_DECODE_LEEWAY"] = 120  # 2 minutes grace for clock skew
    app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    app.config["ALLOWED_ORIGINS"] = os.getenv("ALLOWED_ORIGINS", "*")

    if isinstance(config_object, dict):
        app.config.update(config_object)
    elif config_object:
        try:
            app.config.from_object(config_object)
        except Exception as e:
            # Just log and continue with defaults
            app.logger.warning("Could not import config object %r: %s", config_object, e)

    logging.getLogger("staffing_api").setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

    # CORS (browser client)
    origins = [o.strip() for o in app.config["ALLOWED_ORIGINS"].split(",") if o.strip()] or "*"
    CORS(app, resources={r"/api/*": {"origins": origins}})

    # Extensions
    init_db(app)
    jwt.init_app(app)

    # Ensure models are loaded so metadata is complete
    with app.app_context():
        load_all()

    # Blueprints
    from staffing_api.common.errors import bp_errors
    from staffing_api.blueprints.health import bp as health_bp
    from staffing_api.blueprints.auth import bp as auth_bp
    from staffing_api.blueprints.users import bp as users_bp
    from staffing_api.blueprints.projects import bp as projects_bp
    from staffing_api.blueprints.assignments import bp as assignments_bp

    app.register_blueprint(bp_errors)
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(assignments_bp)

    # ----------------- CLI COMMANDS -----------------

    @app.cli.command("seed-core")
    @click.option("--password", default="password1", show_default=True, help="Password for seeded accounts")
    def seed_core(password: str):
        """Seed a demo manager, two engineers and one project."""
        from staffing_api.models.user import User
        from staffing_api.models.project import Project
        from staffing_api.services.capacity import today as utc_today

        def ensure_user(email: str, name: str, role: str, **extra):
            user = User.query.filter_by(email=email).first()
            if user:
                return user, False
            user = User(email=email, name=name, role=role, **extra)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user, True

        _, mgr_created = ensure_user("manager@demo.local", "Demo Manager", "manager",
                                     seniority="senior", department="Delivery")
        _, e1_created = ensure_user("dev1@demo.local", "Demo Engineer One", "engineer",
                                    skills=["python", "react"], seniority="mid", max_capacity=100)
        _, e2_created = ensure_user("dev2@demo.local", "Demo Engineer Two", "engineer",
                                    skills=["python", "postgres"], seniority="junior", max_capacity=50)

        if not Project.query.filter_by(name="Demo Platform").first():
            today = utc_today()
            db.session.add(Project(
                name="Demo Platform",
                description="Seeded demo project",
                required_skills=["python", "react"],
                team_size=3,
                start_date=today,
                end_date=today + timedelta(days=90),
                status="active",
            ))
            db.session.commit()

        click.echo(
            "Seeded/ensured: "
            f"manager@demo.local ({'created' if mgr_created else 'existing'}); "
            f"dev1@demo.local ({'created' if e1_created else 'existing'}); "
            f"dev2@demo.local ({'created' if e2_created else 'existing'}); "
            f"password {password}"
        )

    return app
