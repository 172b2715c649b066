# Overview: Pytest coverage for receiving supplier purchases into stock.

import pytest

from posgo.extensions import db
from posgo.models import Purchase, Product
from posgo.services import purchase_service
from posgo.services.purchase_service import PurchaseError
from posgo.validation import ValidationError


def test_receive_increments_stock_and_cost(soda, shirt):
    purchase = purchase_service.receive_purchase(
        "Distribuidora Lima",
        "F001-0042",
        [
            {"product_id": soda.id, "quantity": 24, "cost": 5.5},
            {"product_id": shirt.id, "variant_id": shirt.variants[2].id, "quantity": 3, "cost": 19.0},
        ],
    )

    assert purchase.total_cost == pytest.approx(24 * 5.5 + 3 * 19.0)
    assert [line.product_name for line in purchase.lines] == ["Gaseosa 500ml", "Polo Basico"]

    db.session.expire_all()
    soda = db.session.get(Product, soda.id)
    shirt = db.session.get(Product, shirt.id)
    assert soda.stock == 34
    assert soda.cost == 5.5
    assert shirt.variants[2].stock == 5
    assert shirt.variants[2].cost == 19.0
    assert shirt.stock == 15


@pytest.mark.parametrize("supplier,invoice,items", [
    ("", "F1", [{"product_id": 1, "quantity": 1, "cost": 1}]),
    ("Prov", "", [{"product_id": 1, "quantity": 1, "cost": 1}]),
    ("Prov", "F1", []),
    ("Prov", "F1", [{"product_id": 1, "quantity": 0, "cost": 1}]),
    ("Prov", "F1", [{"product_id": 1, "quantity": 1, "cost": -2}]),
])
def test_invalid_purchase(db_session, supplier, invoice, items):
    with pytest.raises(ValidationError):
        purchase_service.receive_purchase(supplier, invoice, items)


def test_unknown_product_rolls_back(soda):
    with pytest.raises(PurchaseError):
        purchase_service.receive_purchase(
            "Prov",
            "F1",
            [{"product_id": soda.id, "quantity": 5, "cost": 4.0}, {"product_id": 999, "quantity": 1, "cost": 1.0}],
        )

    db.session.expire_all()
    assert db.session.query(Purchase).count() == 0
    assert db.session.get(Product, soda.id).stock == 10


def test_variant_product_needs_variant(shirt):
    with pytest.raises(PurchaseError):
        purchase_service.receive_purchase("Prov", "F1", [{"product_id": shirt.id, "quantity": 5, "cost": 4.0}])


def test_list_purchases(soda):
    purchase_service.receive_purchase("A", "1", [{"product_id": soda.id, "quantity": 1, "cost": 1.0}])
    purchase_service.receive_purchase("B", "2", [{"product_id": soda.id, "quantity": 1, "cost": 1.0}])

    assert [p.supplier for p in purchase_service.list_purchases()] == ["B", "A"]
    assert [p.invoice_number for p in purchase_service.list_purchases(supplier="A")] == ["1"]
