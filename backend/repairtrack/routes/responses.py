# Overview: Maps domain errors to JSON error responses.

from flask import jsonify

from ..errors import (
    AuthenticationError,
    BoundaryError,
    DuplicateSerialError,
    InvalidStateError,
    OrderTrackingError,
    RepositoryUnavailableError,
    ValidationError,
)


def error_response(exc: OrderTrackingError):
    if isinstance(exc, ValidationError):
        return jsonify({"error": str(exc)}), 400
    if isinstance(exc, AuthenticationError):
        return jsonify({"error": str(exc)}), 401
    if isinstance(exc, InvalidStateError) and exc.not_found:
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, BoundaryError):
        return jsonify({"error": str(exc), "status": exc.status}), 409
    if isinstance(exc, DuplicateSerialError):
        return jsonify({
            "error": "Could not assign a unique serial number, please try again",
            "serial_number": exc.serial_number,
        }), 409
    if isinstance(exc, InvalidStateError):
        return jsonify({"error": str(exc)}), 409
    if isinstance(exc, RepositoryUnavailableError):
        return jsonify({"error": "Storage unavailable, please retry"}), 503
    return jsonify({"error": str(exc)}), 400
