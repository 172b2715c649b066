# Overview: Cart totals, tender coverage and sale finalization against the open cash shift.

"""
Settlement Service

WHY: Checkout is the one place where money, stock and the cash drawer all
change together. This module computes what the customer owes, checks the
tenders cover it, and writes the sale.

DESIGN:
- compute_totals and tender_status are pure; they can be called on every
  keystroke of the checkout screen.
- finalize_sale is all-or-nothing: sale, lines, tenders, stock decrement
  and customer stats share one commit. The cart is cleared only after
  that commit succeeds.
- The open shift row is locked while settling so a concurrent close can
  not reconcile the drawer halfway through a sale.

TAX MODES:
- prices include tax: total = net, tax is extracted from it
- prices exclude tax: subtotal = net, tax is added on top
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from flask import current_app

from .. import money
from ..extensions import db
from ..models import Sale, SaleLine, SaleTender, CashShift, Customer, Product, StoreSettings
from ..time_utils import utcnow
from ..validation import ValidationError, parse_optional_id, parse_quantity
from .cart import Cart, CartLine, CartError
from .concurrency import lock_open_shift, run_with_retry
from .inventory_service import get_product, decrement_stock
from .settings_service import get_settings
from .shift_service import NoActiveShiftError, get_active_shift
from .tenders import Tender, TenderStatus, add_tender, tender_status, primary_method

__all__ = [
    "SaleError",
    "InsufficientTenderError",
    "NoActiveShiftError",
    "Totals",
    "compute_totals",
    "add_tender",
    "tender_status",
    "build_cart",
    "quote",
    "finalize_sale",
    "get_sale",
    "list_sales",
]


class SaleError(Exception):
    """Raised for sale operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class InsufficientTenderError(SaleError):
    """Tenders do not cover the sale total."""
    pass


class SaleNotFoundError(SaleError):
    pass


# =============================================================================
# TOTALS
# =============================================================================

@dataclass(frozen=True)
class Totals:
    gross: float
    discount: float
    subtotal: float
    tax: float
    total: float

    def to_dict(self) -> dict:
        return {
            "gross": self.gross,
            "discount": self.discount,
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
        }


def compute_totals(lines: Iterable[CartLine], tax_rate: float, prices_include_tax: bool) -> Totals:
    """
    Totals of a cart under the store's tax mode.

    Discounts are per unit. The net amount is floored at zero, so a
    discount larger than the price never produces a negative total.
    An empty cart yields all zeros.
    """
    lines = list(lines)
    gross = money.total_of(money.line_gross(line.unit_price, line.quantity) for line in lines)
    discount = money.total_of(money.line_discount(line.discount, line.quantity) for line in lines)
    net = money.floor_zero(gross - discount)

    subtotal, tax, total = money.split_tax(net, tax_rate, prices_include_tax)
    return Totals(gross=gross, discount=discount, subtotal=subtotal, tax=tax, total=total)


# =============================================================================
# CART FROM REQUEST PAYLOAD
# =============================================================================

def build_cart(items: Sequence[dict] | None) -> Cart:
    """
    Build a cart from [{product_id, variant_id?, quantity?, discount?}, ...].

    Products are read from the catalog so prices and costs are never taken
    from the client.
    """
    if items is None:
        return Cart()
    if not isinstance(items, list):
        raise ValidationError("lines must be a list")

    cart = Cart()
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Each line must be an object")

        product_id = parse_quantity(item.get("product_id"), "product_id")
        variant_id = parse_optional_id(item.get("variant_id"), "variant_id")
        quantity = parse_quantity(item.get("quantity", 1), "quantity")

        product = get_product(product_id)
        variant = None
        if variant_id is not None:
            variant = product.find_variant(variant_id)
            if variant is None:
                raise CartError(f"Variant {variant_id} not found on product {product_id}")

        line = cart.add(product, variant, quantity)
        if item.get("discount") is not None:
            cart.set_discount(line.key, item["discount"])

    return cart


def quote(cart: Cart, tenders: Sequence[Tender], settings: StoreSettings | None = None) -> dict:
    """Totals plus tender coverage, without touching the database."""
    settings = settings or get_settings()
    totals = compute_totals(cart, settings.tax_rate, settings.prices_include_tax)
    status: TenderStatus = tender_status(totals.total, tenders)
    return {
        "lines": cart.to_list(),
        "totals": totals.to_dict(),
        "tenders": [t.to_dict() for t in tenders],
        "status": status.to_dict(),
        "tax_rate": settings.tax_rate,
        "prices_include_tax": settings.prices_include_tax,
    }


# =============================================================================
# FINALIZE
# =============================================================================

def _unit_cost_at_sale(line: CartLine) -> float | None:
    """Current cost of the product or variant; the cart snapshot if it is gone."""
    product = db.session.get(Product, line.product_id)
    if product is None:
        return line.unit_cost

    if line.variant_id is not None:
        variant = product.find_variant(line.variant_id)
        if variant is None:
            return line.unit_cost
        return variant.cost if variant.cost is not None else product.cost

    return product.cost


def finalize_sale(
    cart: Cart,
    tenders: Sequence[Tender],
    *,
    customer_id: int | None = None,
    settings: StoreSettings | None = None,
    shift: CashShift | None = None,
) -> Sale | None:
    """
    Settle the cart against the open shift.

    Order of checks (nothing is written until all pass):
    1. no open shift -> NoActiveShiftError
    2. empty cart -> returns None
    3. tenders below total -> InsufficientTenderError

    Then, in one commit: Sale + SaleLines + SaleTenders, stock decrement per
    line, customer purchase stats. The cart is cleared afterwards.

    Profit = total - tax - sum(unit cost x qty) and may be negative.
    """
    if shift is None:
        shift = get_active_shift()
    if shift is None or not shift.is_open:
        raise NoActiveShiftError()

    if cart.is_empty:
        return None

    settings = settings or get_settings()
    tax_rate = settings.tax_rate
    prices_include_tax = settings.prices_include_tax

    totals = compute_totals(cart, tax_rate, prices_include_tax)
    status = tender_status(totals.total, tenders)
    if not status.covered:
        raise InsufficientTenderError(
            f"Payment does not cover the total. Remaining: {money.display(status.remaining)}",
            details={"total": totals.total, "paid": status.paid, "remaining": status.remaining},
        )

    shift_id = shift.id
    lines = list(cart)
    tenders = list(tenders)

    def _op():
        locked_shift = lock_open_shift(shift_id)
        if locked_shift is None:
            raise NoActiveShiftError()

        customer = None
        if customer_id is not None:
            customer = db.session.get(Customer, customer_id)
            if customer is None:
                raise SaleError(f"Customer {customer_id} not found")

        now = utcnow()
        sale = Sale(
            created_at=now,
            subtotal=totals.subtotal,
            tax=totals.tax,
            discount=totals.discount,
            total=totals.total,
            tax_rate=tax_rate,
            prices_include_tax=prices_include_tax,
            primary_method=primary_method(tenders).value,
            amount_paid=status.paid,
            change_due=status.change,
            customer_id=customer.id if customer else None,
            customer_name=customer.name if customer else None,
            shift_id=locked_shift.id,
        )
        db.session.add(sale)
        db.session.flush()

        cost_total = 0.0
        for line in lines:
            unit_cost = _unit_cost_at_sale(line)
            cost_total += money.line_cost(unit_cost, line.quantity)
            db.session.add(SaleLine(
                sale_id=sale.id,
                product_id=line.product_id,
                variant_id=line.variant_id,
                name=line.name,
                variant_name=line.variant_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                unit_cost=unit_cost,
                discount=line.discount,
            ))
            decrement_stock(line.product_id, line.variant_id, line.quantity)

        for position, tender in enumerate(tenders):
            db.session.add(SaleTender(
                sale_id=sale.id,
                position=position,
                method=tender.method.value,
                amount=tender.amount,
            ))

        sale.profit = money.profit(totals.total, totals.tax, cost_total)

        if customer is not None:
            customer.total_purchases = (customer.total_purchases or 0) + 1
            customer.last_purchase_at = now

        db.session.commit()
        return sale

    sale = run_with_retry(_op, label="finalize_sale")
    cart.clear()

    current_app.logger.info(
        "Sale %s finalized on shift %s: total %.2f, paid %.2f, change %.2f",
        sale.id,
        sale.shift_id,
        sale.total,
        sale.amount_paid,
        sale.change_due,
    )
    return sale


# =============================================================================
# READ
# =============================================================================

def get_sale(sale_id: int) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if not sale:
        raise SaleNotFoundError(f"Sale {sale_id} not found")
    return sale


def list_sales(*, shift_id: int | None = None, customer_id: int | None = None, limit: int = 100) -> list[Sale]:
    query = db.session.query(Sale)
    if shift_id is not None:
        query = query.filter(Sale.shift_id == shift_id)
    if customer_id is not None:
        query = query.filter(Sale.customer_id == customer_id)
    return query.order_by(Sale.id.desc()).limit(limit).all()
