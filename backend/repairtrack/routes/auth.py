# Overview: Flask API routes for login, logout and store management.

"""
Authentication Routes

- POST /api/auth/login    - password only; resolves to a store or the hub
- POST /api/auth/logout
- GET  /api/auth/current  - who is logged in
- GET  /api/auth/stores   - store names for the login screen
- POST /api/auth/stores   - create a store (admin password required)

The resolved identity lives in Flask's signed session cookie. Services never
authenticate; they receive the already resolved store_id/role.
"""

from flask import Blueprint, jsonify, request, session, current_app

from ..decorators import SESSION_ROLE, SESSION_STORE_ID, SESSION_STORE_NAME
from ..errors import OrderTrackingError
from ..services import store_service
from ..services.context import repository
from .responses import error_response


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    try:
        identity = store_service.authenticate(
            repository(),
            data.get("password") or "",
            hub_password=current_app.config["HUB_PASSWORD"],
        )
    except OrderTrackingError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to login")
        return jsonify({"error": "Internal server error"}), 500

    session.clear()
    session[SESSION_ROLE] = identity.role
    session[SESSION_STORE_ID] = identity.store_id
    session[SESSION_STORE_NAME] = identity.store_name
    return jsonify(identity.to_dict()), 200


@auth_bp.post("/logout")
def logout():
    session.clear()
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/current")
def current():
    return jsonify({
        "role": session.get(SESSION_ROLE),
        "store_id": session.get(SESSION_STORE_ID),
        "store_name": session.get(SESSION_STORE_NAME),
    }), 200


@auth_bp.get("/stores")
def list_stores():
    stores = store_service.list_stores(repository())
    return jsonify([store.to_dict() for store in stores]), 200


@auth_bp.post("/stores")
def create_store():
    data = request.get_json(silent=True) or {}
    try:
        store = store_service.create_store(
            repository(),
            name=data.get("name"),
            password=data.get("password") or "",
            admin_password=data.get("admin_password") or "",
            expected_admin_password=current_app.config["ADMIN_PASSWORD"],
            rounds=current_app.config["BCRYPT_ROUNDS"],
        )
        return jsonify(store.to_dict()), 201
    except OrderTrackingError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create store")
        return jsonify({"error": "Internal server error"}), 500
