# Overview: Service-layer operations for the product catalog and stock levels.

"""
Inventory Service

WHY: Checkout and purchase receiving both mutate stock. Keeping the
mutations here means the variant/aggregate rule is enforced in one place.

STOCK INVARIANT:
- A product with variants keeps product.stock == sum(variant.stock).
- Mutation helpers never commit; the caller owns the transaction so a
  stock change lands together with the sale or purchase that caused it.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product, ProductVariant
from ..validation import (
    ValidationError,
    ConflictError,
    parse_amount,
    parse_quantity,
    require_text,
    optional_text,
)


class InventoryError(Exception):
    """Raised for catalog and stock errors."""
    pass


class ProductNotFoundError(InventoryError):
    pass


# =============================================================================
# LOOKUPS
# =============================================================================

def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if not product:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product


def find_by_barcode(code: str) -> tuple[Product, ProductVariant | None] | None:
    """Resolve a scanned code to a product, or to a product + variant."""
    code = (code or "").strip()
    if not code:
        return None

    product = db.session.query(Product).filter_by(barcode=code).first()
    if product:
        return product, None

    variant = db.session.query(ProductVariant).filter_by(barcode=code).first()
    if variant:
        return variant.product, variant

    return None


def list_products(category: str | None = None, low_stock: int | None = None) -> list[Product]:
    query = db.session.query(Product)
    if category:
        query = query.filter(Product.category == category)
    if low_stock is not None:
        query = query.filter(Product.stock <= low_stock)
    return query.order_by(Product.name, Product.id).all()


# =============================================================================
# CATALOG WRITES
# =============================================================================

def _check_barcode_free(barcode: str | None, *, product_id: int | None = None, variant_id: int | None = None) -> None:
    if not barcode:
        return
    owner = db.session.query(Product).filter_by(barcode=barcode).first()
    if owner and owner.id != product_id:
        raise ConflictError(f"Barcode {barcode} already assigned to product {owner.id}")
    variant_owner = db.session.query(ProductVariant).filter_by(barcode=barcode).first()
    if variant_owner and variant_owner.id != variant_id:
        raise ConflictError(f"Barcode {barcode} already assigned to variant {variant_owner.id}")


def _check_barcodes_distinct(barcodes: list[str | None]) -> None:
    """A product and its variants share one scan space; no code may repeat."""
    seen = set()
    for barcode in barcodes:
        if not barcode:
            continue
        if barcode in seen:
            raise ConflictError(f"Barcode {barcode} is used more than once in this product")
        seen.add(barcode)


def _build_variant(data: dict) -> ProductVariant:
    barcode = optional_text(data.get("barcode"), max_length=64, field="barcode")
    _check_barcode_free(barcode)
    cost = data.get("cost")
    return ProductVariant(
        name=require_text(data.get("name"), "variant name", max_length=128),
        price=parse_amount(data.get("price", 0), "variant price"),
        cost=parse_amount(cost, "variant cost") if cost is not None else None,
        stock=parse_quantity(data.get("stock", 0), "variant stock", minimum=0),
        barcode=barcode,
    )


def create_product(
    *,
    name: str,
    price=0,
    category: str | None = None,
    cost=None,
    stock=0,
    barcode: str | None = None,
    description: str | None = None,
    variants: list[dict] | None = None,
) -> Product:
    """
    Create a catalog product, optionally with variants.

    With variants the given stock is ignored and the aggregate is computed
    from the variant stocks.
    """
    barcode = optional_text(barcode, max_length=64, field="barcode")

    if variants:
        if not isinstance(variants, list) or not all(isinstance(v, dict) for v in variants):
            raise ValidationError("variants must be a list of objects")
        _check_barcodes_distinct(
            [barcode] + [optional_text(v.get("barcode"), max_length=64, field="barcode") for v in variants]
        )

    _check_barcode_free(barcode)

    product = Product(
        name=require_text(name, "name", max_length=255),
        category=optional_text(category, max_length=64, field="category") or "Otros",
        description=optional_text(description),
        price=parse_amount(price, "price"),
        cost=parse_amount(cost, "cost") if cost is not None else None,
        stock=parse_quantity(stock, "stock", minimum=0),
        barcode=barcode,
    )

    if variants:
        product.variants = [_build_variant(v) for v in variants]
        product.has_variants = True
        recompute_aggregate_stock(product)

    db.session.add(product)
    db.session.commit()
    return product


UPDATABLE_FIELDS = {"name", "category", "description", "price", "cost", "stock", "barcode"}


def update_product(product_id: int, patch: dict) -> Product:
    product = get_product(product_id)

    unknown = [k for k in patch if k not in UPDATABLE_FIELDS]
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(sorted(unknown))}")

    try:
        if "name" in patch:
            product.name = require_text(patch["name"], "name", max_length=255)
        if "category" in patch:
            product.category = optional_text(patch["category"], max_length=64, field="category") or "Otros"
        if "description" in patch:
            product.description = optional_text(patch["description"])
        if "price" in patch:
            product.price = parse_amount(patch["price"], "price")
        if "cost" in patch:
            product.cost = parse_amount(patch["cost"], "cost") if patch["cost"] is not None else None
        if "barcode" in patch:
            barcode = optional_text(patch["barcode"], max_length=64, field="barcode")
            _check_barcode_free(barcode, product_id=product.id)
            product.barcode = barcode
        if "stock" in patch:
            if product.has_variants:
                raise ValidationError("stock of a product with variants is the sum of its variants")
            product.stock = parse_quantity(patch["stock"], "stock", minimum=0)
    except ValueError:
        db.session.rollback()
        raise

    db.session.commit()
    return product


# =============================================================================
# STOCK MUTATIONS (no commit)
# =============================================================================

def recompute_aggregate_stock(product: Product) -> int:
    if product.has_variants:
        product.stock = sum(v.stock for v in product.variants)
    return product.stock


def decrement_stock(product_id: int, variant_id: int | None, quantity: int) -> Product | None:
    """
    Take `quantity` units out of stock for a sold line.

    Stock may go negative; the sale already happened at the counter.
    A product or variant that no longer exists is logged and skipped.
    """
    product = db.session.get(Product, product_id)
    if not product:
        current_app.logger.warning("Stock decrement skipped: product %s no longer exists", product_id)
        return None

    if variant_id is None and product.has_variants:
        current_app.logger.warning(
            "Stock decrement skipped: product %s has variants but no variant was given",
            product_id,
        )
        return product

    if variant_id is not None:
        variant = product.find_variant(variant_id)
        if not variant:
            current_app.logger.warning(
                "Stock decrement skipped: variant %s no longer exists on product %s",
                variant_id,
                product_id,
            )
            return product
        variant.stock -= quantity
        recompute_aggregate_stock(product)
    else:
        product.stock -= quantity

    return product


def increment_stock(
    product_id: int,
    variant_id: int | None,
    quantity: int,
    unit_cost: float | None = None,
) -> Product:
    """Put received units into stock and record the latest unit cost."""
    product = get_product(product_id)

    if variant_id is None and product.has_variants:
        raise InventoryError(f"Product {product_id} has variants; variant_id is required")

    if variant_id is not None:
        variant = product.find_variant(variant_id)
        if not variant:
            raise InventoryError(f"Variant {variant_id} not found on product {product_id}")
        variant.stock += quantity
        if unit_cost is not None:
            variant.cost = unit_cost
        recompute_aggregate_stock(product)
    else:
        product.stock += quantity
        if unit_cost is not None:
            product.cost = unit_cost

    return product
