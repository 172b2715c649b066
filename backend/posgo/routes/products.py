# Overview: Flask API routes for catalog products; parses input and returns JSON responses.

# backend/posgo/routes/products.py
"""
Product catalog routes.

Products with variants carry their variants inline. Stock is changed by
checkout and purchase receiving; PATCH only sets it for products without
variants (stock counts).
"""
from flask import Blueprint, request, jsonify, current_app

from ..services import inventory_service
from ..services.inventory_service import InventoryError, ProductNotFoundError
from ..validation import ValidationError, ConflictError, require_json_object

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products():
    """
    List products.

    Query params:
    - category: str (optional)
    - low_stock: int (optional) - only products with stock <= value
    """
    category = request.args.get("category")
    low_stock = request.args.get("low_stock", type=int)

    products = inventory_service.list_products(category=category, low_stock=low_stock)
    return jsonify({"products": [p.to_dict() for p in products]}), 200


@products_bp.post("")
def create_product_route():
    """
    Create a product.

    Request body:
    {
        "name": "Polo Basico",
        "price": 35.0,
        "cost": 20.0,              (optional)
        "stock": 10,
        "category": "Ropa",        (optional, default "Otros")
        "barcode": "775000111",    (optional)
        "variants": [              (optional)
            {"name": "M", "price": 35.0, "stock": 4, "barcode": "775000112"}
        ]
    }
    """
    try:
        payload = require_json_object(request.get_json(silent=True))
        product = inventory_service.create_product(
            name=payload.get("name"),
            price=payload.get("price", 0),
            category=payload.get("category"),
            cost=payload.get("cost"),
            stock=payload.get("stock", 0),
            barcode=payload.get("barcode"),
            description=payload.get("description"),
            variants=payload.get("variants"),
        )
        return jsonify({"product": product.to_dict()}), 201
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = inventory_service.get_product(product_id)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"product": product.to_dict()}), 200


@products_bp.patch("/<int:product_id>")
def update_product_route(product_id: int):
    try:
        payload = require_json_object(request.get_json(silent=True))
        product = inventory_service.update_product(product_id, payload)
        return jsonify({"product": product.to_dict()}), 200
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except (ValidationError, InventoryError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/barcode/<code>")
def lookup_barcode_route(code: str):
    """
    Resolve a scanned barcode.

    A variant barcode returns the parent product plus the matched variant.
    """
    match = inventory_service.find_by_barcode(code)
    if match is None:
        return jsonify({"error": f"No product with barcode {code}"}), 404

    product, variant = match
    return jsonify({
        "product": product.to_dict(),
        "variant": variant.to_dict() if variant else None,
    }), 200
