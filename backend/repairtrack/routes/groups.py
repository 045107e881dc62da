# Overview: Flask API routes for order groups and their shared expenses.

from flask import Blueprint, jsonify, request, g, current_app

from ..decorators import require_auth
from ..errors import OrderTrackingError
from ..services.context import lifecycle_manager
from ..services.store_service import ROLE_STORE
from .responses import error_response


groups_bp = Blueprint("groups", __name__, url_prefix="/api/groups")


def _scope_store_id() -> int | None:
    if g.role == ROLE_STORE:
        return g.store_id
    return request.args.get("store_id", type=int)


@groups_bp.get("")
@require_auth
def list_groups():
    try:
        groups = lifecycle_manager().get_groups(_scope_store_id())
        return jsonify([group.to_dict() for group in groups]), 200
    except OrderTrackingError as exc:
        return error_response(exc)


@groups_bp.post("")
@require_auth
def create_group():
    data = request.get_json(silent=True) or {}
    try:
        group = lifecycle_manager().create_group(
            data.get("name"),
            data.get("order_ids") or [],
            store_id=g.store_id,
        )
        return jsonify(group.to_dict()), 201
    except OrderTrackingError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to create group")
        return jsonify({"error": "Internal server error"}), 500


@groups_bp.post("/<int:group_id>/expenses")
@require_auth
def add_group_expense(group_id: int):
    """
    Record a shared expense and split it across the group's orders.

    Each POST adds the expense again; clients must not resubmit.
    """
    data = request.get_json(silent=True) or {}
    try:
        manager = lifecycle_manager()
        if g.role == ROLE_STORE:
            group = manager.repository.get_group(group_id)
            if group is None or any(o.store_id != g.store_id for o in group.orders):
                return jsonify({"error": "Group not found"}), 404
        totals = manager.add_group_expense(group_id, data.get("description"), data.get("amount"))
        return jsonify({"group_id": group_id, "member_totals": totals}), 201
    except OrderTrackingError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception("Failed to add group expense")
        return jsonify({"error": "Internal server error"}), 500
