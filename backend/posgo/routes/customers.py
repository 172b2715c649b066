# Overview: Flask API routes for customers; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import customer_service
from ..services.customer_service import CustomerError, CustomerNotFoundError
from ..validation import ValidationError, require_json_object


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
def list_customers_route():
    """
    Query params:
    - q: str (optional) - matches name, document id or phone
    """
    customers = customer_service.list_customers(search=request.args.get("q"))
    return jsonify({"customers": [c.to_dict() for c in customers]}), 200


@customers_bp.post("")
def create_customer_route():
    try:
        payload = require_json_object(request.get_json(silent=True))
        customer = customer_service.create_customer(
            name=payload.get("name"),
            phone=payload.get("phone"),
            document_id=payload.get("document_id"),
            email=payload.get("email"),
        )
        return jsonify({"customer": customer.to_dict()}), 201

    except (ValidationError, CustomerError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.get("/<int:customer_id>")
def get_customer_route(customer_id: int):
    try:
        customer = customer_service.get_customer(customer_id)
    except CustomerNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"customer": customer.to_dict()}), 200


@customers_bp.patch("/<int:customer_id>")
def update_customer_route(customer_id: int):
    try:
        payload = require_json_object(request.get_json(silent=True))
        customer = customer_service.update_customer(customer_id, payload)
        return jsonify({"customer": customer.to_dict()}), 200

    except CustomerNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, CustomerError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return jsonify({"error": "Internal server error"}), 500
