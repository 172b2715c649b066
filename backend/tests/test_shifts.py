# Overview: Pytest coverage for the cash shift lifecycle and drawer reconciliation.

"""
Cash Shift Tests

STATE MACHINE: CLOSED -> open -> OPEN -> close -> CLOSED (terminal)
RECONCILIATION: expected = start + cash tenders + IN - OUT
"""

import pytest

from posgo.extensions import db
from posgo.models import CashShift, CashMovement, Sale
from posgo.services import inventory_service, shift_service
from posgo.services.settlement_service import finalize_sale
from posgo.services.shift_service import (
    NoActiveShiftError,
    ShiftAlreadyOpenError,
    ShiftError,
    ShiftNotFoundError,
)
from posgo.validation import ValidationError

from helpers import make_cart, cash, card


@pytest.fixture
def fifty(db_session):
    return inventory_service.create_product(name="Zapatillas", price=50.0, cost=30.0, stock=10)


@pytest.fixture
def thirty(db_session):
    return inventory_service.create_product(name="Mochila", price=30.0, cost=15.0, stock=10)


class TestOpenShift:
    def test_open_sets_pointer_and_writes_open_movement(self, db_session):
        shift = shift_service.open_shift(100)

        assert shift.status == "OPEN"
        assert shift.start_amount == 100.0
        assert shift_service.get_active_shift_id() == shift.id
        assert shift_service.get_active_shift().id == shift.id

        movements = shift_service.get_shift_movements(shift)
        assert [(m.type, m.amount) for m in movements] == [("OPEN", 100.0)]

    def test_zero_start_amount_is_valid(self, db_session):
        assert shift_service.open_shift(0).start_amount == 0.0

    @pytest.mark.parametrize("amount", [-1, "abc", None, float("nan")])
    def test_invalid_start_amount(self, db_session, amount):
        with pytest.raises(ValidationError):
            shift_service.open_shift(amount)
        assert shift_service.get_active_shift() is None

    def test_only_one_open_shift(self, open_shift):
        with pytest.raises(ShiftAlreadyOpenError):
            shift_service.open_shift(50)

        assert db.session.query(CashShift).filter_by(status="OPEN").count() == 1
        assert shift_service.get_active_shift_id() == open_shift.id

    def test_no_active_shift_initially(self, db_session):
        assert shift_service.get_active_shift() is None
        assert shift_service.get_active_shift_id() is None


class TestMovements:
    def test_record_in_and_out(self, open_shift):
        shift_service.record_movement("in", 30, "Change top-up")
        shift_service.record_movement("OUT", 20, "Restock change")

        types = [m.type for m in shift_service.get_shift_movements(open_shift)]
        assert types == ["OPEN", "IN", "OUT"]

    def test_movement_requires_open_shift(self, db_session):
        with pytest.raises(NoActiveShiftError):
            shift_service.record_movement("IN", 10)

    @pytest.mark.parametrize("movement_type", ["OPEN", "CLOSE", "", None])
    def test_only_manual_types(self, open_shift, movement_type):
        with pytest.raises(ValidationError):
            shift_service.record_movement(movement_type, 10)

    @pytest.mark.parametrize("amount", [0, -5])
    def test_amount_must_be_positive(self, open_shift, amount):
        with pytest.raises(ValidationError):
            shift_service.record_movement("OUT", amount)


class TestReconciliation:
    def test_expected_cash_scenario(self, open_shift, fifty, thirty, tax_inclusive):
        finalize_sale(make_cart((fifty, 1)), [cash(50.0)])
        finalize_sale(make_cart((thirty, 1)), [card(30.0)])
        shift_service.record_movement("OUT", 20, "restock change")

        assert shift_service.compute_cash_sales(open_shift) == pytest.approx(50.0)
        assert shift_service.compute_expected_cash(open_shift) == pytest.approx(130.0)
        assert shift_service.compute_digital_total(open_shift) == pytest.approx(30.0)

    def test_split_tender_counts_only_cash_portion(self, open_shift, tax_inclusive):
        jacket = inventory_service.create_product(name="Casaca", price=45.0, stock=2)
        finalize_sale(make_cart((jacket, 1)), [cash(20.0), card(25.0)])

        assert shift_service.compute_cash_sales(open_shift) == pytest.approx(20.0)
        assert shift_service.compute_digital_total(open_shift) == pytest.approx(25.0)

    def test_cash_tender_counted_at_face_value(self, open_shift, fifty, tax_inclusive):
        sale = finalize_sale(make_cart((fifty, 1)), [cash(60.0)])

        assert sale.change_due == pytest.approx(10.0)
        assert shift_service.compute_expected_cash(open_shift) == pytest.approx(160.0)

    def test_sale_without_tender_rows_uses_primary_method(self, open_shift):
        db.session.add(Sale(shift_id=open_shift.id, total=12.0, primary_method="YAPE"))
        db.session.add(Sale(shift_id=open_shift.id, total=8.0, primary_method="CASH"))
        db.session.commit()

        assert shift_service.compute_digital_total(open_shift) == pytest.approx(12.0)
        assert shift_service.compute_cash_sales(open_shift) == pytest.approx(8.0)

    def test_expected_matches_formula_for_any_sequence(self, open_shift, fifty, tax_inclusive):
        shift_service.record_movement("IN", 15.5)
        finalize_sale(make_cart((fifty, 2)), [cash(70.0), card(30.0)])
        shift_service.record_movement("OUT", 40)
        shift_service.record_movement("IN", 4.5)
        finalize_sale(make_cart((fifty, 1)), [cash(50.0)])
        shift_service.record_movement("OUT", 0.25)

        expected = 100.0 + (70.0 + 50.0) + (15.5 + 4.5) - (40 + 0.25)
        assert shift_service.compute_expected_cash(open_shift) == pytest.approx(expected)

    def test_snapshot(self, open_shift, fifty, tax_inclusive):
        finalize_sale(make_cart((fifty, 1)), [card(50.0)])
        shift_service.record_movement("IN", 10)

        snapshot = shift_service.shift_snapshot(open_shift)
        assert snapshot["tender_totals"] == {"CASH": 0.0, "CARD": 50.0, "YAPE": 0.0, "PLIN": 0.0}
        assert snapshot["expected_cash"] == pytest.approx(110.0)
        assert snapshot["sales_count"] == 1
        assert snapshot["movements"][0]["type"] == "IN"


class TestCloseShift:
    def test_close_records_reconciliation(self, open_shift, fifty, thirty, tax_inclusive):
        finalize_sale(make_cart((fifty, 1)), [cash(50.0)])
        finalize_sale(make_cart((thirty, 1)), [card(30.0)])
        shift_service.record_movement("OUT", 20, "restock change")

        report = shift_service.close_shift(125)
        shift = report.shift

        assert shift.status == "CLOSED"
        assert shift.closed_at is not None
        assert shift.expected_amount == pytest.approx(130.0)
        assert shift.counted_amount == pytest.approx(125.0)
        assert shift.total_sales_cash == pytest.approx(50.0)
        assert shift.total_sales_digital == pytest.approx(30.0)
        assert report.discrepancy == pytest.approx(-5.0)
        assert len(report.sales) == 2
        assert [m.type for m in report.movements] == ["OPEN", "OUT", "CLOSE"]
        assert shift_service.get_active_shift_id() is None

    def test_over_count_is_reported_not_refused(self, open_shift):
        report = shift_service.close_shift(110)
        assert report.discrepancy == pytest.approx(10.0)

    def test_close_without_open_shift(self, db_session):
        with pytest.raises(NoActiveShiftError):
            shift_service.close_shift(10)

    def test_close_wrong_shift_id(self, open_shift):
        with pytest.raises(ShiftError):
            shift_service.close_shift(100, shift_id=open_shift.id + 1)
        assert shift_service.get_active_shift_id() == open_shift.id

    def test_negative_count_rejected(self, open_shift):
        with pytest.raises(ValidationError):
            shift_service.close_shift(-1)
        assert shift_service.get_active_shift().status == "OPEN"

    def test_reopen_creates_new_shift(self, open_shift):
        shift_service.close_shift(100)
        second = shift_service.open_shift(80)

        assert second.id != open_shift.id
        db.session.expire_all()
        assert db.session.get(CashShift, open_shift.id).status == "CLOSED"
        assert shift_service.get_active_shift_id() == second.id

    def test_report_can_be_rebuilt(self, open_shift, fifty):
        finalize_sale(make_cart((fifty, 1)), [cash(50.0)])
        closed = shift_service.close_shift(150)

        report = shift_service.get_shift_report(closed.shift.id)
        assert report.to_dict()["discrepancy"] == pytest.approx(0.0)
        assert report.to_dict()["expected_cash"] == pytest.approx(150.0)

    def test_unknown_report(self, db_session):
        with pytest.raises(ShiftNotFoundError):
            shift_service.get_shift_report(404)

    def test_list_shifts_newest_first(self, db_session):
        first = shift_service.open_shift(10)
        shift_service.close_shift(10)
        second = shift_service.open_shift(20)

        assert [s.id for s in shift_service.list_shifts()] == [second.id, first.id]
        assert [s.id for s in shift_service.list_shifts(status="closed")] == [first.id]
        assert db.session.query(CashMovement).count() == 3
