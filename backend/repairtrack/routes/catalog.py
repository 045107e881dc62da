# Overview: Flask API routes for the complaint and in-house preset catalogs.

from flask import Blueprint, jsonify, request, current_app

from ..decorators import require_auth, require_role
from ..errors import OrderTrackingError
from ..services import catalog_service
from ..services.context import repository
from ..services.store_service import ROLE_HUB, ROLE_STORE
from .responses import error_response


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/catalog")

CATALOGS = (catalog_service.CATALOG_COMPLAINTS, catalog_service.CATALOG_PRESETS)


@catalog_bp.get("/<catalog>")
@require_auth
def list_entries(catalog: str):
    if catalog not in CATALOGS:
        return jsonify({"error": "Catalog not found"}), 404
    entries = catalog_service.list_entries(repository(), catalog)
    return jsonify([entry.to_dict() for entry in entries]), 200


@catalog_bp.post("/<catalog>")
@require_auth
@require_role(ROLE_STORE, ROLE_HUB)
def add_entry(catalog: str):
    if catalog not in CATALOGS:
        return jsonify({"error": "Catalog not found"}), 404
    data = request.get_json(silent=True) or {}
    try:
        entry = catalog_service.add_entry(
            repository(), catalog, data.get("description"), data.get("default_price")
        )
        return jsonify(entry.to_dict()), 201
    except OrderTrackingError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to add catalog entry")
        return jsonify({"error": "Internal server error"}), 500


@catalog_bp.delete("/<catalog>/<int:entry_id>")
@require_auth
@require_role(ROLE_STORE, ROLE_HUB)
def delete_entry(catalog: str, entry_id: int):
    if catalog not in CATALOGS:
        return jsonify({"error": "Catalog not found"}), 404
    try:
        if not catalog_service.delete_entry(repository(), catalog, entry_id):
            return jsonify({"error": "Entry not found"}), 404
        return jsonify({"deleted": entry_id}), 200
    except OrderTrackingError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to delete catalog entry")
        return jsonify({"error": "Internal server error"}), 500
