# Overview: Flask API routes for system operations; health and pipeline configuration.

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text

from ..extensions import db
from ..services.context import app_services


system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.get("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
    except Exception:
        current_app.logger.exception("Database health check failed")
        return jsonify({"status": "degraded", "database": "unavailable"}), 503
    return jsonify({"status": "ok", "database": "ok"}), 200


@system_bp.get("/pipeline")
def pipeline():
    services = app_services()
    return jsonify({
        "stages": list(services.pipeline.stages),
        "ready_stage": services.pipeline.ready_stage,
    }), 200
