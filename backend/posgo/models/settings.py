from __future__ import annotations

from ..extensions import db
from posgo.time_utils import to_utc_z

class StoreSettings(db.Model):
    """
    Single-row store configuration.

    tax_rate is a fraction (0.18 = 18%). prices_include_tax decides whether
    tax is extracted from shelf prices or added on top at checkout.
    """
    __tablename__ = "store_settings"

    id = db.Column(db.Integer, primary_key=True)  # always 1
    store_name = db.Column(db.String(255), nullable=False)
    tax_id = db.Column(db.String(32), nullable=True)  # RUC
    address = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)

    tax_rate = db.Column(db.Float, nullable=False, default=0.0)
    currency = db.Column(db.String(8), nullable=False, default="")
    prices_include_tax = db.Column(db.Boolean, nullable=False, default=True)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self) -> dict:
        return {
            "store_name": self.store_name,
            "tax_id": self.tax_id,
            "address": self.address,
            "phone": self.phone,
            "tax_rate": self.tax_rate,
            "currency": self.currency,
            "prices_include_tax": self.prices_include_tax,
            "updated_at": to_utc_z(self.updated_at),
        }
