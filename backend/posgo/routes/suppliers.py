# Overview: Flask API routes for the supplier directory; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import supplier_service, purchase_service
from ..services.supplier_service import SupplierError, SupplierNotFoundError
from ..validation import ValidationError, ConflictError, require_json_object


suppliers_bp = Blueprint("suppliers", __name__, url_prefix="/api/suppliers")


@suppliers_bp.get("")
def list_suppliers_route():
    """
    Query params:
    - q: str (optional) - matches name, RUC or contact name
    """
    suppliers = supplier_service.list_suppliers(search=request.args.get("q"))
    return jsonify({"suppliers": [s.to_dict() for s in suppliers]}), 200


@suppliers_bp.post("")
def create_supplier_route():
    """
    Request body:
    {
        "name": "Textiles SAC",
        "ruc": "20123456789",
        "phone": "014445566",
        "email": "ventas@textiles.pe",
        "address": "Av. Gamarra 123",
        "contact_name": "Rosa Quispe"
    }
    """
    try:
        payload = require_json_object(request.get_json(silent=True))
        supplier = supplier_service.create_supplier(
            name=payload.get("name"),
            ruc=payload.get("ruc"),
            phone=payload.get("phone"),
            email=payload.get("email"),
            address=payload.get("address"),
            contact_name=payload.get("contact_name"),
        )
        return jsonify({"supplier": supplier.to_dict()}), 201

    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except (ValidationError, SupplierError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create supplier")
        return jsonify({"error": "Internal server error"}), 500


@suppliers_bp.get("/<int:supplier_id>")
def get_supplier_route(supplier_id: int):
    try:
        supplier = supplier_service.get_supplier(supplier_id)
    except SupplierNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"supplier": supplier.to_dict()}), 200


@suppliers_bp.patch("/<int:supplier_id>")
def update_supplier_route(supplier_id: int):
    try:
        payload = require_json_object(request.get_json(silent=True))
        supplier = supplier_service.update_supplier(supplier_id, payload)
        return jsonify({"supplier": supplier.to_dict()}), 200

    except SupplierNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except (ValidationError, SupplierError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update supplier")
        return jsonify({"error": "Internal server error"}), 500


@suppliers_bp.get("/<int:supplier_id>/purchases")
def supplier_purchases_route(supplier_id: int):
    """Purchase history of one supplier, matched on its current name."""
    try:
        supplier = supplier_service.get_supplier(supplier_id)
    except SupplierNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    purchases = purchase_service.list_purchases(supplier=supplier.name)
    return jsonify({"supplier": supplier.to_dict(), "purchases": [p.to_dict() for p in purchases]}), 200
