# Overview: Cash drawer shift lifecycle, manual cash movements and close-out reconciliation.

"""
Cash Shift Service

WHY: Every sale is settled against an open cash drawer, and at the end of
the day the counted cash is compared with what the drawer should hold.

STATE MACHINE:
- CLOSED --open_shift(start_amount)--> OPEN --close_shift(counted)--> CLOSED
- At most one shift is OPEN system-wide. The open shift is found through
  the single-row ActiveShiftPointer, which only this module writes.
- A closed shift is terminal; the next open_shift creates a new one.

RECONCILIATION:
- expected = start_amount + cash tenders + IN movements - OUT movements
- discrepancy = counted - expected is reported, never enforced.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app

from .. import money
from ..extensions import db
from ..models import CashShift, CashMovement, ActiveShiftPointer, Sale
from ..time_utils import utcnow
from ..validation import ValidationError, parse_amount, optional_text
from .concurrency import lock_for_update, lock_open_shift, run_with_retry
from .tenders import TenderMethod, parse_method, touches_drawer


class ShiftError(Exception):
    """Raised for shift management errors."""
    pass


class NoActiveShiftError(ShiftError):
    """Raised when an operation needs an open drawer and none is open."""

    def __init__(self, message: str = "No open cash shift. Open a shift first."):
        super().__init__(message)


class ShiftAlreadyOpenError(ShiftError):
    """Raised when opening a shift while another one is open."""
    pass


class ShiftNotFoundError(ShiftError):
    pass


STATUS_OPEN = "OPEN"
STATUS_CLOSED = "CLOSED"

MOVEMENT_OPEN = "OPEN"
MOVEMENT_IN = "IN"
MOVEMENT_OUT = "OUT"
MOVEMENT_CLOSE = "CLOSE"

MANUAL_MOVEMENT_TYPES = (MOVEMENT_IN, MOVEMENT_OUT)

POINTER_ROW_ID = 1


# =============================================================================
# ACTIVE SHIFT POINTER
# =============================================================================

def _get_pointer(*, lock: bool = False) -> ActiveShiftPointer:
    query = db.session.query(ActiveShiftPointer).filter_by(id=POINTER_ROW_ID)
    if lock:
        query = lock_for_update(query)
    pointer = query.first()
    if pointer is None:
        pointer = ActiveShiftPointer(id=POINTER_ROW_ID, shift_id=None)
        db.session.add(pointer)
        db.session.flush()
    return pointer


def get_active_shift_id() -> int | None:
    pointer = db.session.get(ActiveShiftPointer, POINTER_ROW_ID)
    return pointer.shift_id if pointer else None


def _set_active_shift_id(shift_id: int | None) -> None:
    """Move the pointer. Caller commits."""
    pointer = _get_pointer(lock=True)
    pointer.shift_id = shift_id


def get_active_shift(*, lock: bool = False) -> CashShift | None:
    """Return the OPEN shift the pointer refers to, or None."""
    shift_id = get_active_shift_id()
    if shift_id is None:
        return None

    if lock:
        shift = lock_open_shift(shift_id)
    else:
        shift = db.session.get(CashShift, shift_id)
        if shift is not None and shift.status != STATUS_OPEN:
            shift = None

    if shift is None:
        current_app.logger.warning("Active shift pointer refers to shift %s which is not open", shift_id)
        return None
    return shift


# =============================================================================
# LIFECYCLE
# =============================================================================

def _append_movement(shift: CashShift, movement_type: str, amount: float, description: str | None) -> CashMovement:
    movement = CashMovement(
        shift_id=shift.id,
        type=movement_type,
        amount=amount,
        description=description,
        occurred_at=utcnow(),
    )
    db.session.add(movement)
    db.session.flush()
    return movement


def open_shift(start_amount, notes: str | None = None) -> CashShift:
    """
    Open the cash drawer with a starting float.

    A start amount of 0 is valid. Writes the OPEN movement and points the
    active-shift pointer at the new shift.

    Raises:
        ValidationError: start amount missing, negative or not a number
        ShiftAlreadyOpenError: another shift is still open
    """
    amount = parse_amount(start_amount, "start_amount")
    notes = optional_text(notes, field="notes")

    def _op():
        pointer = _get_pointer(lock=True)
        if pointer.shift_id is not None:
            raise ShiftAlreadyOpenError(f"Shift {pointer.shift_id} is already open. Close it first.")

        shift = CashShift(
            status=STATUS_OPEN,
            opened_at=utcnow(),
            start_amount=amount,
            notes=notes,
        )
        db.session.add(shift)
        db.session.flush()

        _append_movement(shift, MOVEMENT_OPEN, amount, "Shift opened")
        pointer.shift_id = shift.id

        db.session.commit()
        return shift

    shift = run_with_retry(_op, label="open_shift")
    current_app.logger.info("Cash shift %s opened with %.2f", shift.id, shift.start_amount)
    return shift


def record_movement(movement_type: str, amount, description: str | None = None) -> CashMovement:
    """
    Record manual cash put into (IN) or taken out of (OUT) the open drawer.

    The shift row itself is not modified; the movement only counts toward
    the expected cash.
    """
    movement_type = (movement_type or "").strip().upper()
    if movement_type not in MANUAL_MOVEMENT_TYPES:
        raise ValidationError(f"type must be one of {', '.join(MANUAL_MOVEMENT_TYPES)}")

    value = parse_amount(amount, "amount", allow_zero=False)
    description = optional_text(description, max_length=255, field="description")

    def _op():
        shift = get_active_shift(lock=True)
        if shift is None:
            raise NoActiveShiftError()

        movement = _append_movement(shift, movement_type, value, description)
        db.session.commit()
        return movement

    return run_with_retry(_op, label="record_movement")


# =============================================================================
# RECONCILIATION
# =============================================================================

def get_shift_sales(shift: CashShift) -> list[Sale]:
    return db.session.query(Sale).filter_by(shift_id=shift.id).order_by(Sale.id).all()


def get_shift_movements(shift: CashShift) -> list[CashMovement]:
    return db.session.query(CashMovement).filter_by(shift_id=shift.id).order_by(CashMovement.id).all()


def sale_tender_breakdown(sale: Sale) -> list[tuple[TenderMethod, float]]:
    """
    (method, amount) pairs of a sale.

    Sales recorded without tender rows fall back to the whole total under
    the primary method.
    """
    if sale.tenders:
        return [(parse_method(t.method), t.amount) for t in sale.tenders]
    return [(parse_method(sale.primary_method), sale.total)]


def tender_totals(shift: CashShift) -> dict[str, float]:
    totals = {method.value: 0.0 for method in TenderMethod}
    for sale in get_shift_sales(shift):
        for method, amount in sale_tender_breakdown(sale):
            totals[method.value] += amount
    return totals


def compute_cash_sales(shift: CashShift) -> float:
    return money.total_of(
        amount
        for sale in get_shift_sales(shift)
        for method, amount in sale_tender_breakdown(sale)
        if touches_drawer(method)
    )


def compute_digital_total(shift: CashShift) -> float:
    """Non-cash tenders; reported only, they never touch the drawer."""
    return money.total_of(
        amount
        for sale in get_shift_sales(shift)
        for method, amount in sale_tender_breakdown(sale)
        if not touches_drawer(method)
    )


def _movement_totals(shift: CashShift) -> tuple[float, float]:
    movements = get_shift_movements(shift)
    cash_in = money.total_of(m.amount for m in movements if m.type == MOVEMENT_IN)
    cash_out = money.total_of(m.amount for m in movements if m.type == MOVEMENT_OUT)
    return cash_in, cash_out


def compute_expected_cash(shift: CashShift) -> float:
    """The amount the drawer should physically hold right now."""
    cash_in, cash_out = _movement_totals(shift)
    return money.expected_drawer(shift.start_amount, compute_cash_sales(shift), cash_in, cash_out)


def shift_snapshot(shift: CashShift) -> dict:
    """Live totals for the cash-control panel of an open shift."""
    cash_in, cash_out = _movement_totals(shift)
    return {
        "shift": shift.to_dict(),
        "tender_totals": tender_totals(shift),
        "cash_sales": compute_cash_sales(shift),
        "digital_sales": compute_digital_total(shift),
        "cash_in": cash_in,
        "cash_out": cash_out,
        "expected_cash": compute_expected_cash(shift),
        "sales_count": len(get_shift_sales(shift)),
        "movements": [m.to_dict() for m in reversed(get_shift_movements(shift))],
    }


# =============================================================================
# CLOSE + REPORTING
# =============================================================================

@dataclass
class ShiftReport:
    """Close-out artifact for display/printing. Not stored."""
    shift: CashShift
    movements: list[CashMovement] = field(default_factory=list)
    sales: list[Sale] = field(default_factory=list)

    @property
    def discrepancy(self) -> float | None:
        return money.discrepancy(self.shift.counted_amount, self.shift.expected_amount)

    def to_dict(self) -> dict:
        return {
            "shift": self.shift.to_dict(),
            "movements": [m.to_dict() for m in self.movements],
            "sales": [s.to_dict(include_lines=False) for s in self.sales],
            "cash_sales": self.shift.total_sales_cash,
            "digital_sales": self.shift.total_sales_digital,
            "expected_cash": self.shift.expected_amount,
            "counted_cash": self.shift.counted_amount,
            "discrepancy": self.discrepancy,
        }


def close_shift(counted_amount, notes: str | None = None, *, shift_id: int | None = None) -> ShiftReport:
    """
    Close the open shift with the operator's counted cash.

    Records expected and counted amounts plus the cash/digital roll-ups,
    writes the CLOSE movement and clears the active-shift pointer in one
    commit. Over/under is allowed and only reported.

    Raises:
        ValidationError: counted amount missing, negative or not a number
        NoActiveShiftError: no shift is open
        ShiftError: shift_id given and it is not the open shift
    """
    counted = parse_amount(counted_amount, "counted_amount")
    notes = optional_text(notes, field="notes")

    def _op():
        shift = get_active_shift(lock=True)
        if shift is None:
            raise NoActiveShiftError("No open cash shift to close")
        if shift_id is not None and shift.id != shift_id:
            raise ShiftError(f"Shift {shift_id} is not the open shift")

        shift.expected_amount = compute_expected_cash(shift)
        shift.total_sales_cash = compute_cash_sales(shift)
        shift.total_sales_digital = compute_digital_total(shift)
        shift.counted_amount = counted
        shift.status = STATUS_CLOSED
        shift.closed_at = utcnow()
        if notes:
            shift.notes = notes

        _append_movement(shift, MOVEMENT_CLOSE, counted, "Shift closed")
        _set_active_shift_id(None)

        db.session.commit()
        return shift

    shift = run_with_retry(_op, label="close_shift")
    report = ShiftReport(shift=shift, movements=get_shift_movements(shift), sales=get_shift_sales(shift))
    current_app.logger.info(
        "Cash shift %s closed: expected %.2f, counted %.2f, discrepancy %.2f",
        shift.id,
        shift.expected_amount,
        shift.counted_amount,
        report.discrepancy,
    )
    return report


def get_shift(shift_id: int) -> CashShift:
    shift = db.session.get(CashShift, shift_id)
    if not shift:
        raise ShiftNotFoundError(f"Shift {shift_id} not found")
    return shift


def list_shifts(status: str | None = None, limit: int = 50) -> list[CashShift]:
    query = db.session.query(CashShift)
    if status:
        query = query.filter_by(status=status.upper())
    return query.order_by(CashShift.id.desc()).limit(limit).all()


def get_shift_report(shift_id: int) -> ShiftReport:
    shift = get_shift(shift_id)
    return ShiftReport(shift=shift, movements=get_shift_movements(shift), sales=get_shift_sales(shift))
