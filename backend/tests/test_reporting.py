# Overview: Pytest coverage for sales and restock reports.

import pytest

from posgo.extensions import db
from posgo.models import Sale
from posgo.services import inventory_service, reporting_service
from posgo.services.reporting_service import ReportError
from posgo.services.settlement_service import finalize_sale

from helpers import make_cart, cash, card


def test_sales_summary(soda, open_shift, tax_inclusive):
    first = finalize_sale(make_cart((soda, 2)), [cash(15.0), card(5.0)])
    second = finalize_sale(make_cart((soda, 1)), [card(10.0)])
    db.session.add(Sale(shift_id=open_shift.id, total=7.0, primary_method="PLIN"))
    db.session.commit()

    summary = reporting_service.sales_summary()

    assert summary["transactions"] == 3
    assert summary["total_sales"] == pytest.approx(37.0)
    assert summary["total_profit"] == pytest.approx(first.profit + second.profit)
    assert summary["by_method"] == pytest.approx({"CASH": 15.0, "CARD": 15.0, "YAPE": 0.0, "PLIN": 7.0})


def test_sales_summary_range(soda, open_shift):
    finalize_sale(make_cart((soda, 1)), [cash(10.0)])

    assert reporting_service.sales_summary(start="2000-01-01T00:00:00Z", end="2000-12-31T00:00:00Z")["transactions"] == 0
    assert reporting_service.sales_summary(start="2000-01-01T00:00:00Z")["transactions"] == 1

    with pytest.raises(ReportError):
        reporting_service.sales_summary(start="yesterday")
    with pytest.raises(ReportError):
        reporting_service.sales_summary(start="2001-01-01", end="2000-01-01")


def test_recent_sales_newest_first(soda, open_shift):
    sales = [finalize_sale(make_cart((soda, 1)), [cash(10.0)]) for _ in range(3)]
    assert [s.id for s in reporting_service.recent_sales(limit=2)] == [sales[2].id, sales[1].id]


def test_restock_orders_by_units_sold(soda, open_shift):
    rice = inventory_service.create_product(name="Arroz 1kg", price=4.8, stock=8)
    sugar = inventory_service.create_product(name="Azucar 1kg", price=4.0, stock=4)

    finalize_sale(make_cart((rice, 5)), [cash(24.0)])
    finalize_sale(make_cart((sugar, 1)), [cash(4.0)])

    items = reporting_service.restock_list(threshold=5)

    assert [(i["name"], i["stock"], i["sales_count"]) for i in items] == [
        ("Arroz 1kg", 3, 5),
        ("Azucar 1kg", 3, 1),
    ]
    assert reporting_service.product_sales_counts() == {rice.id: 5, sugar.id: 1}


def test_restock_threshold_validation(db_session):
    with pytest.raises(ReportError):
        reporting_service.restock_list(threshold=-1)
