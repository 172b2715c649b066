# Overview: Flask API routes for store settings; parses input and returns JSON responses.

from __future__ import annotations

from flask import Blueprint, jsonify, request, current_app

from ..services import settings_service
from ..validation import ValidationError, require_json_object


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
def get_settings_route():
    settings = settings_service.get_settings()
    return jsonify({"settings": settings.to_dict()}), 200


@settings_bp.patch("")
def update_settings_route():
    """
    Partial update of the store settings.

    Tax changes only affect sales finalized afterwards; each sale keeps the
    rate and mode it was settled with.
    """
    try:
        payload = require_json_object(request.get_json(silent=True))
        settings = settings_service.update_settings(payload)
        return jsonify({"settings": settings.to_dict()}), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update settings")
        return jsonify({"error": "Internal server error"}), 500
