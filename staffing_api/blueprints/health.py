from flask import Blueprint, jsonify
from sqlalchemy import text

from staffing_api.extensions import db

bp = Blueprint("health", __name__, url_prefix="/api")


@bp.get("/health")
def health():
    db.session.execute(text("SELECT 1"))
    return jsonify({"ok": True, "service": "staffing-api"})
