# Overview: In-memory cart; never persisted, destroyed on checkout or clear.

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import Product, ProductVariant
from ..validation import ValidationError, parse_amount, parse_quantity


class CartError(Exception):
    """Raised when a product cannot be put in the cart."""
    pass


@dataclass
class CartLine:
    """
    Snapshot of a product (or product + variant) taken when it is added.

    discount is a per-unit amount in currency units, not a percentage.
    """
    product_id: int
    name: str
    unit_price: float
    unit_cost: float | None = None
    quantity: int = 1
    discount: float = 0.0
    variant_id: int | None = None
    variant_name: str | None = None

    @property
    def key(self) -> tuple[int, int | None]:
        return (self.product_id, self.variant_id)

    @classmethod
    def from_product(cls, product: Product, variant: ProductVariant | None = None) -> "CartLine":
        if variant is not None:
            cost = variant.cost if variant.cost is not None else product.cost
            return cls(
                product_id=product.id,
                name=product.name,
                unit_price=variant.price,
                unit_cost=cost,
                variant_id=variant.id,
                variant_name=variant.name,
            )
        return cls(
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            unit_cost=product.cost,
        )

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "name": self.name,
            "variant_name": self.variant_name,
            "unit_price": self.unit_price,
            "unit_cost": self.unit_cost,
            "quantity": self.quantity,
            "discount": self.discount,
        }


@dataclass
class Cart:
    lines: list[CartLine] = field(default_factory=list)

    def __iter__(self):
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def get(self, key: tuple[int, int | None]) -> CartLine | None:
        for line in self.lines:
            if line.key == key:
                return line
        return None

    def _require(self, key) -> CartLine:
        line = self.get(key)
        if line is None:
            raise CartError(f"Item {key} is not in the cart")
        return line

    def add(self, product: Product, variant: ProductVariant | None = None, quantity: int = 1) -> CartLine:
        """Add a product, or bump the quantity of the line already holding it."""
        quantity = parse_quantity(quantity)

        if product.has_variants and variant is None:
            raise CartError(f"Select a variant of {product.name}")
        if variant is not None and variant.product_id != product.id:
            raise CartError(f"Variant {variant.id} does not belong to product {product.id}")

        stock = variant.stock if variant is not None else product.stock
        if stock <= 0:
            raise CartError(f"{product.name} is out of stock")

        key = (product.id, variant.id if variant is not None else None)
        existing = self.get(key)
        if existing:
            existing.quantity += quantity
            return existing

        line = CartLine.from_product(product, variant)
        line.quantity = quantity
        self.lines.append(line)
        return line

    def change_quantity(self, key, delta: int) -> CartLine:
        line = self._require(key)
        line.quantity = max(1, line.quantity + delta)
        return line

    def set_quantity(self, key, quantity) -> CartLine:
        line = self._require(key)
        line.quantity = parse_quantity(quantity)
        return line

    def set_discount(self, key, amount) -> CartLine:
        line = self._require(key)
        try:
            line.discount = parse_amount(amount, "discount")
        except ValidationError as exc:
            raise CartError(str(exc))
        return line

    def remove(self, key) -> None:
        self.lines = [line for line in self.lines if line.key != key]

    def clear(self) -> None:
        self.lines = []

    def to_list(self) -> list[dict]:
        return [line.to_dict() for line in self.lines]
