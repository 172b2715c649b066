# Overview: Flask API routes for cash shift operations; parses input and returns JSON responses.

# backend/posgo/routes/shifts.py
"""
Cash Shift API Routes

WHY: Cash control screen. The cashier opens the drawer with a starting
float, records cash put in or taken out, and closes with a counted amount.

DESIGN:
- One open shift at a time (409 when opening a second one)
- Close returns the reconciliation report; over/under is reported, not refused
- Closed shifts are immutable; their report can be fetched again
"""

from flask import Blueprint, request, jsonify, current_app

from ..services import shift_service
from ..services.shift_service import (
    ShiftError,
    ShiftAlreadyOpenError,
    ShiftNotFoundError,
    NoActiveShiftError,
)
from ..validation import ValidationError, require_json_object


shifts_bp = Blueprint("shifts", __name__, url_prefix="/api/shifts")


@shifts_bp.get("/active")
def active_shift_route():
    """
    Live view of the open shift.

    Returns {"shift": null} when the drawer is closed.
    """
    shift = shift_service.get_active_shift()
    if shift is None:
        return jsonify({"shift": None}), 200
    return jsonify(shift_service.shift_snapshot(shift)), 200


@shifts_bp.post("/open")
def open_shift_route():
    """
    Request body:
    {
        "start_amount": 100.0,
        "notes": "Morning shift"  (optional)
    }
    """
    try:
        payload = require_json_object(request.get_json(silent=True))
        shift = shift_service.open_shift(payload.get("start_amount"), payload.get("notes"))
        return jsonify({"shift": shift.to_dict()}), 201

    except ShiftAlreadyOpenError as e:
        return jsonify({"error": str(e)}), 409
    except (ValidationError, ShiftError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to open shift")
        return jsonify({"error": "Internal server error"}), 500


@shifts_bp.post("/movements")
def record_movement_route():
    """
    Request body:
    {
        "type": "IN" | "OUT",
        "amount": 20.0,
        "description": "Change top-up"  (optional)
    }
    """
    try:
        payload = require_json_object(request.get_json(silent=True))
        movement = shift_service.record_movement(
            payload.get("type"),
            payload.get("amount"),
            payload.get("description"),
        )
        return jsonify({"movement": movement.to_dict()}), 201

    except NoActiveShiftError as e:
        return jsonify({"error": str(e), "action": "OPEN_SHIFT"}), 409
    except (ValidationError, ShiftError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to record cash movement")
        return jsonify({"error": "Internal server error"}), 500


@shifts_bp.post("/close")
def close_shift_route():
    """
    Request body:
    {
        "counted_amount": 215.5,
        "notes": "..."          (optional)
        "shift_id": 4           (optional, must be the open shift)
    }
    """
    try:
        payload = require_json_object(request.get_json(silent=True))
        shift_id = payload.get("shift_id")
        if shift_id is not None and (isinstance(shift_id, bool) or not isinstance(shift_id, int)):
            return jsonify({"error": "shift_id must be an integer"}), 400

        report = shift_service.close_shift(
            payload.get("counted_amount"),
            payload.get("notes"),
            shift_id=shift_id,
        )
        return jsonify({"report": report.to_dict()}), 200

    except NoActiveShiftError as e:
        return jsonify({"error": str(e), "action": "OPEN_SHIFT"}), 409
    except (ValidationError, ShiftError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to close shift")
        return jsonify({"error": "Internal server error"}), 500


@shifts_bp.get("")
def list_shifts_route():
    status = request.args.get("status")
    limit = min(request.args.get("limit", 50, type=int), 200)
    shifts = shift_service.list_shifts(status=status, limit=limit)
    return jsonify({"shifts": [s.to_dict() for s in shifts]}), 200


@shifts_bp.get("/<int:shift_id>/report")
def shift_report_route(shift_id: int):
    try:
        report = shift_service.get_shift_report(shift_id)
    except ShiftNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"report": report.to_dict()}), 200
