"""Shared route helpers: standardized response builders."""

from flask import jsonify, request
from pydantic import ValidationError


def api_error(message, status_code=400, details=None):
    """Standardized error response: {"error": "...", "status": N}"""
    payload = {"error": message, "status": status_code}
    if details:
        payload.update(details)
    return jsonify(payload), status_code


def api_success(data=None, status_code=200):
    """Standardized success response: {"success": true, ...}"""
    payload = {"success": True}
    if data:
        payload.update(data)
    return jsonify(payload), status_code


def validate_json(model_class):
    """Parse and validate request JSON against a Pydantic model.

    Returns (model_instance, None) on success, or (None, error_response) on failure.
    """
    data = request.get_json(silent=True)
    if not data:
        return None, api_error("Request body is required")
    try:
        return model_class(**data), None
    except ValidationError as e:
        errors = [{"field": err["loc"][-1], "message": err["msg"]} for err in e.errors()]
        return None, api_error("Validation failed", 400, {"details": errors})
