from __future__ import annotations

from ..extensions import db
from posgo.time_utils import to_utc_z

class Product(db.Model):
    """
    Catalog product.

    STOCK: For products with variants, `stock` is an aggregate that must
    always equal the sum of the variant stocks, and `price` is display-only
    (the selected variant's price is what gets charged).

    Money columns are floats in currency units.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_name", "category", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=False, default="Otros", index=True)
    description = db.Column(db.Text, nullable=True)

    price = db.Column(db.Float, nullable=False, default=0.0)
    cost = db.Column(db.Float, nullable=True)  # Cost price for profit calculation

    stock = db.Column(db.Integer, nullable=False, default=0)
    barcode = db.Column(db.String(64), nullable=True, unique=True, index=True)

    has_variants = db.Column(db.Boolean, nullable=False, default=False)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    variants = db.relationship(
        "ProductVariant",
        backref="product",
        lazy=True,
        order_by="ProductVariant.id",
        cascade="all, delete-orphan",
    )
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def find_variant(self, variant_id: int | None) -> "ProductVariant | None":
        if variant_id is None:
            return None
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "price": self.price,
            "cost": self.cost,
            "stock": self.stock,
            "barcode": self.barcode,
            "has_variants": self.has_variants,
            "variants": [v.to_dict() for v in self.variants],
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

class ProductVariant(db.Model):
    """A sellable option of a product (size, color...) with its own price and stock."""
    __tablename__ = "product_variants"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    name = db.Column(db.String(128), nullable=False)  # e.g. "Rojo - S"
    price = db.Column(db.Float, nullable=False, default=0.0)
    cost = db.Column(db.Float, nullable=True)  # falls back to product cost when null
    stock = db.Column(db.Integer, nullable=False, default=0)
    barcode = db.Column(db.String(64), nullable=True, unique=True, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "name": self.name,
            "price": self.price,
            "cost": self.cost,
            "stock": self.stock,
            "barcode": self.barcode,
        }
