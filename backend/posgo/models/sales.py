from __future__ import annotations

from ..extensions import db
from posgo.time_utils import to_utc_z

class Sale(db.Model):
    """
    Finalized sale (the checkout transaction record).

    IMMUTABLE: Written exactly once by settlement_service.finalize_sale and
    never updated afterwards. Reporting and shift close only read it.

    primary_method is the method of the first tender and exists only for
    single-method reporting paths; the tenders relationship is authoritative.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_shift_created", "shift_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    subtotal = db.Column(db.Float, nullable=False, default=0.0)
    tax = db.Column(db.Float, nullable=False, default=0.0)
    discount = db.Column(db.Float, nullable=False, default=0.0)
    total = db.Column(db.Float, nullable=False, default=0.0)

    # Settlement snapshot of the store configuration
    tax_rate = db.Column(db.Float, nullable=False, default=0.0)
    prices_include_tax = db.Column(db.Boolean, nullable=False, default=True)

    primary_method = db.Column(db.String(16), nullable=False, index=True)
    amount_paid = db.Column(db.Float, nullable=False, default=0.0)
    change_due = db.Column(db.Float, nullable=False, default=0.0)

    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)
    customer_name = db.Column(db.String(255), nullable=True)

    profit = db.Column(db.Float, nullable=False, default=0.0)

    shift_id = db.Column(db.Integer, db.ForeignKey("cash_shifts.id"), nullable=False, index=True)

    lines = db.relationship("SaleLine", backref="sale", lazy=True, order_by="SaleLine.id")
    tenders = db.relationship("SaleTender", backref="sale", lazy=True, order_by="SaleTender.position")
    shift = db.relationship("CashShift", backref=db.backref("sales", lazy=True, order_by="Sale.id"))

    def to_dict(self, *, include_lines: bool = True) -> dict:
        data = {
            "id": self.id,
            "created_at": to_utc_z(self.created_at),
            "subtotal": self.subtotal,
            "tax": self.tax,
            "discount": self.discount,
            "total": self.total,
            "tax_rate": self.tax_rate,
            "prices_include_tax": self.prices_include_tax,
            "primary_method": self.primary_method,
            "amount_paid": self.amount_paid,
            "change_due": self.change_due,
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "profit": self.profit,
            "shift_id": self.shift_id,
            "tenders": [t.to_dict() for t in self.tenders],
        }
        if include_lines:
            data["lines"] = [line.to_dict() for line in self.lines]
        return data

class SaleLine(db.Model):
    """Frozen copy of a cart line at sale time."""
    __tablename__ = "sale_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    variant_id = db.Column(db.Integer, nullable=True)

    name = db.Column(db.String(255), nullable=False)
    variant_name = db.Column(db.String(128), nullable=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    unit_cost = db.Column(db.Float, nullable=True)
    discount = db.Column(db.Float, nullable=False, default=0.0)  # per unit

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "name": self.name,
            "variant_name": self.variant_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "unit_cost": self.unit_cost,
            "discount": self.discount,
        }

class SaleTender(db.Model):
    """
    One payment instrument/amount pair of a sale.

    Split payments store several rows; position keeps insertion order.
    """
    __tablename__ = "sale_tenders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    method = db.Column(db.String(16), nullable=False, index=True)  # CASH, CARD, YAPE, PLIN
    amount = db.Column(db.Float, nullable=False)

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "amount": self.amount,
        }
