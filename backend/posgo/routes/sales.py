# Overview: Flask API routes for checkout; parses input and returns JSON responses.

# backend/posgo/routes/sales.py
"""
Sales / Checkout API Routes

WHY: The register screen quotes the cart while the cashier adds tenders,
then checks out once the tenders cover the total.

DESIGN:
- The client sends product ids, quantities and discounts; prices and costs
  are always read from the catalog
- quote never writes; checkout writes the sale in one commit
- No open shift -> 409 with action OPEN_SHIFT so the UI can send the
  cashier to the cash-control screen
"""

from flask import Blueprint, request, jsonify, current_app

from ..services import settlement_service
from ..services.cart import CartError
from ..services.inventory_service import ProductNotFoundError
from ..services.settlement_service import SaleError, SaleNotFoundError, NoActiveShiftError
from ..services.tenders import TenderError, tenders_from_payload
from ..validation import ValidationError, parse_optional_id, require_json_object


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


def _no_shift_response(e: NoActiveShiftError):
    return jsonify({"error": str(e), "action": "OPEN_SHIFT"}), 409


@sales_bp.post("/quote")
def quote_route():
    """
    Price a cart without saving anything.

    Request body:
    {
        "lines": [{"product_id": 1, "variant_id": null, "quantity": 2, "discount": 0.5}],
        "tenders": [{"method": "CASH", "amount": 20.0}]
    }
    """
    try:
        payload = require_json_object(request.get_json(silent=True))
        cart = settlement_service.build_cart(payload.get("lines"))
        tenders = tenders_from_payload(payload.get("tenders"))
        return jsonify(settlement_service.quote(cart, tenders)), 200

    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except (ValidationError, CartError, TenderError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to quote cart")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/checkout")
def checkout_route():
    """
    Finalize a sale against the open cash shift.

    Request body:
    {
        "lines": [{"product_id": 1, "quantity": 2}],
        "tenders": [{"method": "CASH", "amount": 10.0}, {"method": "YAPE", "amount": 5.0}],
        "customer_id": 3   (optional)
    }

    Responses:
    - 201 {"sale": {...}}
    - 400 invalid input, empty cart, or tenders below total (details included)
    - 409 no open shift
    """
    try:
        payload = require_json_object(request.get_json(silent=True))
        cart = settlement_service.build_cart(payload.get("lines"))
        tenders = tenders_from_payload(payload.get("tenders"))
        customer_id = parse_optional_id(payload.get("customer_id"), "customer_id")

        sale = settlement_service.finalize_sale(cart, tenders, customer_id=customer_id)
        if sale is None:
            return jsonify({"error": "Cart is empty"}), 400

        return jsonify({"sale": sale.to_dict()}), 201

    except NoActiveShiftError as e:
        return _no_shift_response(e)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except SaleError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except (ValidationError, CartError, TenderError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to finalize sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("")
def list_sales_route():
    """
    Query params:
    - shift_id: int (optional)
    - customer_id: int (optional)
    - limit: int (optional, default 100, max 500)
    """
    shift_id = request.args.get("shift_id", type=int)
    customer_id = request.args.get("customer_id", type=int)
    limit = min(request.args.get("limit", 100, type=int), 500)

    sales = settlement_service.list_sales(shift_id=shift_id, customer_id=customer_id, limit=limit)
    return jsonify({"sales": [s.to_dict(include_lines=False) for s in sales]}), 200


@sales_bp.get("/<int:sale_id>")
def get_sale_route(sale_id: int):
    try:
        sale = settlement_service.get_sale(sale_id)
    except SaleNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify({"sale": sale.to_dict()}), 200
