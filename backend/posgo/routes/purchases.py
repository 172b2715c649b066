# Overview: Flask API routes for supplier purchases; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import purchase_service
from ..services.purchase_service import PurchaseError
from ..validation import ValidationError, require_json_object


purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")


@purchases_bp.post("")
def receive_purchase_route():
    """
    Receive a supplier purchase into stock.

    Request body:
    {
        "supplier": "Textiles SAC",
        "invoice_number": "F001-123",
        "items": [{"product_id": 1, "variant_id": null, "quantity": 10, "cost": 12.5}]
    }
    """
    try:
        payload = require_json_object(request.get_json(silent=True))
        purchase = purchase_service.receive_purchase(
            payload.get("supplier"),
            payload.get("invoice_number"),
            payload.get("items"),
        )
        return jsonify({"purchase": purchase.to_dict()}), 201

    except (ValidationError, PurchaseError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to receive purchase")
        return jsonify({"error": "Internal server error"}), 500


@purchases_bp.get("")
def list_purchases_route():
    supplier = request.args.get("supplier")
    purchases = purchase_service.list_purchases(supplier=supplier)
    return jsonify({"purchases": [p.to_dict() for p in purchases]}), 200
