# Overview: Flask API routes for orders; parses input and returns JSON responses.

"""
Order Routes

Reads:
- GET  /api/orders               - active pipeline (completed orders excluded)
- GET  /api/orders/completed     - completed orders only
- GET  /api/orders/board         - active orders bucketed by stage
- GET  /api/orders/next-serial   - serial the next intake would get (store)
- GET  /api/orders/:id
- GET  /api/orders/:id/summary   - profit, balance due, display strings

Commands:
- POST /api/orders                    - intake (store)
- POST /api/orders/:id/advance        - {"direction": "next" | "prev"}
- PUT  /api/orders/:id/status         - {"status": stage}
- POST /api/orders/bulk-status        - {"order_ids": [...], "status": stage}
- PUT  /api/orders/:id/completion     - {"completed": bool}
- PUT  /api/orders/:id/price          - {"price": n}
- PUT  /api/orders/:id/hub-price      - {"price": n} (hub)
- PUT  /api/orders/:id/expense        - {"expense": n}
- PUT  /api/orders/:id/balance-payment - {"amount": n, "method": str}

SCOPING: a store session only sees and touches its own orders; foreign ids
answer 404 exactly like missing ones. The hub sees every store and may
narrow with ?store_id=.
"""

from flask import Blueprint, jsonify, request, g, current_app

from ..decorators import require_auth, require_role
from ..errors import InvalidStateError, OrderTrackingError, ValidationError
from ..services import pricing_service
from ..services.context import intake_service, lifecycle_manager
from ..services.store_service import ROLE_HUB, ROLE_STORE
from ..validation import coerce_bool
from .responses import error_response


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _scope_store_id() -> int | None:
    if g.role == ROLE_STORE:
        return g.store_id
    return request.args.get("store_id", type=int)


def _owned_order(manager, order_id: str):
    order = manager.get_order(order_id)
    if g.role == ROLE_STORE and order.store_id != g.store_id:
        raise InvalidStateError.missing_order(order_id)
    return order


def _serialize(order) -> dict:
    data = order.to_dict()
    data["pricing"] = pricing_service.summarize(order)
    return data


def _run(failure_message: str, func, status: int = 200):
    try:
        return jsonify(func()), status
    except OrderTrackingError as exc:
        return error_response(exc)
    except Exception:
        current_app.logger.exception(failure_message)
        return jsonify({"error": "Internal server error"}), 500


@orders_bp.get("")
@require_auth
def list_orders():
    def _op():
        manager = lifecycle_manager()
        return [_serialize(o) for o in manager.active_orders(_scope_store_id())]

    return _run("Failed to list orders", _op)


@orders_bp.get("/completed")
@require_auth
def list_completed_orders():
    def _op():
        manager = lifecycle_manager()
        return [_serialize(o) for o in manager.completed_orders(_scope_store_id())]

    return _run("Failed to list completed orders", _op)


@orders_bp.get("/board")
@require_auth
def board():
    def _op():
        manager = lifecycle_manager()
        columns = manager.board(_scope_store_id())
        return {
            "stages": list(manager.pipeline.stages),
            "columns": {stage: [_serialize(o) for o in orders] for stage, orders in columns.items()},
        }

    return _run("Failed to load board", _op)


@orders_bp.get("/next-serial")
@require_auth
@require_role(ROLE_STORE)
def next_serial():
    return _run(
        "Failed to allocate serial",
        lambda: {"serial_number": intake_service().next_serial(g.store_id)},
    )


@orders_bp.post("")
@require_auth
@require_role(ROLE_STORE)
def create_order():
    data = request.get_json(silent=True)

    def _op():
        order = intake_service().create_order(g.store_id, data)
        return {"order": _serialize(order)}

    return _run("Failed to create order", _op, status=201)


@orders_bp.get("/<order_id>")
@require_auth
def get_order(order_id: str):
    return _run("Failed to load order", lambda: _serialize(_owned_order(lifecycle_manager(), order_id)))


@orders_bp.get("/<order_id>/summary")
@require_auth
def order_summary(order_id: str):
    return _run(
        "Failed to load order summary",
        lambda: pricing_service.summarize(_owned_order(lifecycle_manager(), order_id)),
    )


@orders_bp.post("/<order_id>/advance")
@require_auth
def advance_order(order_id: str):
    data = request.get_json(silent=True) or {}

    def _op():
        manager = lifecycle_manager()
        _owned_order(manager, order_id)
        return {"order": _serialize(manager.advance(order_id, data.get("direction", "next")))}

    return _run("Failed to advance order", _op)


@orders_bp.put("/<order_id>/status")
@require_auth
def set_order_status(order_id: str):
    data = request.get_json(silent=True) or {}

    def _op():
        manager = lifecycle_manager()
        _owned_order(manager, order_id)
        return {"order": _serialize(manager.set_status(order_id, data.get("status") or ""))}

    return _run("Failed to update order status", _op)


@orders_bp.post("/bulk-status")
@require_auth
def bulk_set_status():
    data = request.get_json(silent=True) or {}
    order_ids = data.get("order_ids") or []

    def _op():
        manager = lifecycle_manager()
        if not isinstance(order_ids, list) or not all(isinstance(i, str) for i in order_ids):
            raise ValidationError("order_ids must be a list of strings")

        owned, foreign = order_ids, []
        if g.role == ROLE_STORE:
            mine = {o.id for o in manager.repository.get_orders(g.store_id)}
            owned = [i for i in order_ids if i in mine]
            foreign = [i for i in order_ids if i not in mine]

        result = manager.bulk_set_status(owned, data.get("status") or "")
        for order_id in foreign:
            result.add_failure(order_id, f"Order {order_id} not found")
        return result.to_dict()

    return _run("Failed to update order statuses", _op)


@orders_bp.put("/<order_id>/completion")
@require_auth
def set_completion(order_id: str):
    data = request.get_json(silent=True) or {}

    def _op():
        manager = lifecycle_manager()
        _owned_order(manager, order_id)
        completed = coerce_bool(data.get("completed", True))
        return {"order": _serialize(manager.toggle_completion(order_id, completed))}

    return _run("Failed to update completion", _op)


@orders_bp.put("/<order_id>/price")
@require_auth
def update_price(order_id: str):
    data = request.get_json(silent=True) or {}

    def _op():
        manager = lifecycle_manager()
        _owned_order(manager, order_id)
        return {"order": _serialize(manager.update_price(order_id, data.get("price")))}

    return _run("Failed to update price", _op)


@orders_bp.put("/<order_id>/hub-price")
@require_auth
@require_role(ROLE_HUB)
def update_hub_price(order_id: str):
    data = request.get_json(silent=True) or {}

    def _op():
        manager = lifecycle_manager()
        return {"order": _serialize(manager.update_hub_price(order_id, data.get("price")))}

    return _run("Failed to update hub price", _op)


@orders_bp.put("/<order_id>/expense")
@require_auth
@require_role(ROLE_STORE)
def update_expense(order_id: str):
    data = request.get_json(silent=True) or {}

    def _op():
        manager = lifecycle_manager()
        _owned_order(manager, order_id)
        return {"order": _serialize(manager.update_expense(order_id, data.get("expense")))}

    return _run("Failed to update expense", _op)


@orders_bp.put("/<order_id>/balance-payment")
@require_auth
@require_role(ROLE_STORE)
def record_balance_payment(order_id: str):
    data = request.get_json(silent=True) or {}

    def _op():
        manager = lifecycle_manager()
        _owned_order(manager, order_id)
        order = manager.record_balance_payment(order_id, data.get("amount"), data.get("method"))
        return {"order": _serialize(order)}

    return _run("Failed to record balance payment", _op)
