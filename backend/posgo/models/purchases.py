from __future__ import annotations

from ..extensions import db
from posgo.time_utils import to_utc_z

class Purchase(db.Model):
    """
    Supplier purchase received into stock.

    IMMUTABLE: Posted once by purchase_service.receive_purchase.
    """
    __tablename__ = "purchases"
    __table_args__ = (
        db.Index("ix_purchases_supplier_received", "supplier", "received_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    supplier = db.Column(db.String(255), nullable=False)
    invoice_number = db.Column(db.String(64), nullable=False)
    total_cost = db.Column(db.Float, nullable=False, default=0.0)

    received_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    lines = db.relationship("PurchaseLine", backref="purchase", lazy=True, order_by="PurchaseLine.id")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplier": self.supplier,
            "invoice_number": self.invoice_number,
            "total_cost": self.total_cost,
            "received_at": to_utc_z(self.received_at),
            "lines": [line.to_dict() for line in self.lines],
        }

class PurchaseLine(db.Model):
    __tablename__ = "purchase_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    purchase_id = db.Column(db.Integer, db.ForeignKey("purchases.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    variant_id = db.Column(db.Integer, nullable=True)

    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_cost = db.Column(db.Float, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "purchase_id": self.purchase_id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_cost": self.unit_cost,
        }
