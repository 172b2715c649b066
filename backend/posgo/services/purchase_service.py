# Overview: Service-layer operations for supplier purchases received into stock.

"""
Purchase Service

WHY: Stock comes in from suppliers. Receiving a purchase records the
invoice and puts the units on the shelf in one step.

DESIGN:
- Supplier, invoice number and at least one line are required
- Each line increments product (or variant) stock and replaces its cost
  with the purchase cost, so later sales report profit on the latest cost
- Purchase + lines + stock changes share one commit
"""

from __future__ import annotations

from flask import current_app

from .. import money
from ..extensions import db
from ..models import Purchase, PurchaseLine
from ..time_utils import utcnow
from ..validation import ValidationError, parse_amount, parse_quantity, parse_optional_id, require_text
from .concurrency import run_with_retry
from .inventory_service import InventoryError, get_product, increment_stock


class PurchaseError(Exception):
    """Raised when a purchase cannot be received."""
    pass


def _parse_item(item) -> dict:
    if not isinstance(item, dict):
        raise ValidationError("Each item must be an object")
    return {
        "product_id": parse_quantity(item.get("product_id"), "product_id"),
        "variant_id": parse_optional_id(item.get("variant_id"), "variant_id"),
        "quantity": parse_quantity(item.get("quantity"), "quantity"),
        "unit_cost": parse_amount(item.get("cost", item.get("unit_cost")), "cost"),
    }


def receive_purchase(supplier: str, invoice_number: str, items: list[dict]) -> Purchase:
    """
    Record a supplier purchase and increment stock.

    items: [{product_id, variant_id?, quantity, cost}, ...]

    Raises:
        ValidationError: missing supplier/invoice, no items, bad numbers
        PurchaseError: unknown product or variant
    """
    supplier = require_text(supplier, "supplier", max_length=255)
    invoice_number = require_text(invoice_number, "invoice_number", max_length=64)
    if not items or not isinstance(items, list):
        raise ValidationError("At least one item is required")

    parsed = [_parse_item(item) for item in items]

    def _op():
        purchase = Purchase(
            supplier=supplier,
            invoice_number=invoice_number,
            total_cost=money.total_of(p["unit_cost"] * p["quantity"] for p in parsed),
            received_at=utcnow(),
        )
        db.session.add(purchase)
        db.session.flush()

        for p in parsed:
            try:
                product = get_product(p["product_id"])
                increment_stock(p["product_id"], p["variant_id"], p["quantity"], p["unit_cost"])
            except InventoryError as exc:
                raise PurchaseError(str(exc)) from exc

            db.session.add(PurchaseLine(
                purchase_id=purchase.id,
                product_id=product.id,
                variant_id=p["variant_id"],
                product_name=product.name,
                quantity=p["quantity"],
                unit_cost=p["unit_cost"],
            ))

        db.session.commit()
        return purchase

    purchase = run_with_retry(_op, label="receive_purchase")
    current_app.logger.info(
        "Purchase %s received from %s (invoice %s): %d lines, %.2f",
        purchase.id,
        purchase.supplier,
        purchase.invoice_number,
        len(parsed),
        purchase.total_cost,
    )
    return purchase


def list_purchases(supplier: str | None = None, limit: int = 100) -> list[Purchase]:
    query = db.session.query(Purchase)
    if supplier:
        query = query.filter(Purchase.supplier == supplier)
    return query.order_by(Purchase.id.desc()).limit(limit).all()
