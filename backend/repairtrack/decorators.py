# Overview: Session and role decorators for API routes.

from functools import wraps
from flask import jsonify, g, session

from .services.store_service import ROLE_HUB, ROLE_STORE


SESSION_ROLE = "role"
SESSION_STORE_ID = "store_id"
SESSION_STORE_NAME = "store_name"


def require_auth(f):
    """
    Require a logged-in store or hub session.

    Sets the following Flask g attributes:
    - g.role: "store" or "hub"
    - g.store_id: the store's id (None for the hub)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        role = session.get(SESSION_ROLE)
        if role not in (ROLE_STORE, ROLE_HUB):
            return jsonify({"error": "Authentication required"}), 401

        store_id = session.get(SESSION_STORE_ID)
        if role == ROLE_STORE and store_id is None:
            return jsonify({"error": "Invalid session: missing store"}), 401

        g.role = role
        g.store_id = store_id if role == ROLE_STORE else None
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """Restrict a route to the given roles. Must be applied after @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "role"):
                return jsonify({"error": "Authentication required"}), 401
            if g.role not in roles:
                return jsonify({
                    "error": "Permission denied",
                    "required_role": list(roles),
                }), 403
            return f(*args, **kwargs)

        return decorated_function

    return decorator
