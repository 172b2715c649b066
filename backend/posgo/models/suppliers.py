from __future__ import annotations

from ..extensions import db
from posgo.time_utils import to_utc_z

class Supplier(db.Model):
    """
    Supplier directory entry.

    Purchases keep the supplier name as text, so renaming a supplier does
    not rewrite purchase history.
    """
    __tablename__ = "suppliers"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    ruc = db.Column(db.String(32), nullable=True, unique=True)  # tax id, unique when present
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)
    contact_name = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "ruc": self.ruc,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "contact_name": self.contact_name,
            "created_at": to_utc_z(self.created_at),
        }
