from __future__ import annotations

from ..extensions import db
from posgo.time_utils import to_utc_z

class CashShift(db.Model):
    """
    Cash drawer shift.

    LIFECYCLE:
    - OPEN: Drawer is in use, sales may be settled against it
    - CLOSED: Cash counted, expected amount recorded (terminal)

    IMMUTABLE: Once closed, a shift is never reopened or modified. A new
    shift is opened instead. Shifts are never deleted.

    The discrepancy (counted - expected) is derived, not stored.
    """
    __tablename__ = "cash_shifts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    status = db.Column(db.String(16), nullable=False, default="OPEN", index=True)  # OPEN, CLOSED

    opened_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    start_amount = db.Column(db.Float, nullable=False, default=0.0)
    counted_amount = db.Column(db.Float, nullable=True)  # Set when closing
    expected_amount = db.Column(db.Float, nullable=True)  # Set when closing

    # Rolled up at close time
    total_sales_cash = db.Column(db.Float, nullable=False, default=0.0)
    total_sales_digital = db.Column(db.Float, nullable=False, default=0.0)

    notes = db.Column(db.Text, nullable=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    movements = db.relationship("CashMovement", backref="shift", lazy=True, order_by="CashMovement.id")
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_open(self) -> bool:
        return self.status == "OPEN"

    def to_dict(self) -> dict:
        discrepancy = None
        if self.counted_amount is not None and self.expected_amount is not None:
            discrepancy = self.counted_amount - self.expected_amount
        return {
            "id": self.id,
            "status": self.status,
            "opened_at": to_utc_z(self.opened_at),
            "closed_at": to_utc_z(self.closed_at) if self.closed_at else None,
            "start_amount": self.start_amount,
            "counted_amount": self.counted_amount,
            "expected_amount": self.expected_amount,
            "discrepancy": discrepancy,
            "total_sales_cash": self.total_sales_cash,
            "total_sales_digital": self.total_sales_digital,
            "notes": self.notes,
            "version_id": self.version_id,
        }

class CashMovement(db.Model):
    """
    Append-only drawer ledger entry.

    TYPES:
    - OPEN: Opening float (written by open_shift)
    - IN: Manual cash added (e.g. topping up change)
    - OUT: Manual cash removed (e.g. paying a supplier)
    - CLOSE: Counted cash at close (written by close_shift)

    IMMUTABLE: Rows are never updated or deleted.
    """
    __tablename__ = "cash_movements"
    __table_args__ = (
        db.Index("ix_cash_movements_shift_occurred", "shift_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.Integer, db.ForeignKey("cash_shifts.id"), nullable=False, index=True)

    type = db.Column(db.String(8), nullable=False, index=True)
    amount = db.Column(db.Float, nullable=False)
    description = db.Column(db.String(255), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "shift_id": self.shift_id,
            "type": self.type,
            "amount": self.amount,
            "description": self.description,
            "occurred_at": to_utc_z(self.occurred_at),
        }

class ActiveShiftPointer(db.Model):
    """
    Single-row pointer to the shift currently OPEN system-wide.

    Only shift_service reads or writes this table. A null shift_id means the
    drawer is closed.
    """
    __tablename__ = "active_shift_pointer"

    id = db.Column(db.Integer, primary_key=True)  # always 1
    shift_id = db.Column(db.Integer, db.ForeignKey("cash_shifts.id"), nullable=True)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}
