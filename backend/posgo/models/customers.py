from __future__ import annotations

from ..extensions import db
from posgo.time_utils import to_utc_z

class Customer(db.Model):
    """Store customer; purchase stats are maintained by checkout."""
    __tablename__ = "customers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(32), nullable=True)
    document_id = db.Column(db.String(32), nullable=True, index=True)  # DNI / RUC
    email = db.Column(db.String(255), nullable=True)

    total_purchases = db.Column(db.Integer, nullable=False, default=0)
    last_purchase_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "document_id": self.document_id,
            "email": self.email,
            "total_purchases": self.total_purchases,
            "last_purchase_at": to_utc_z(self.last_purchase_at) if self.last_purchase_at else None,
            "created_at": to_utc_z(self.created_at),
        }
