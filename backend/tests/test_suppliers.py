# Overview: Pytest coverage for the supplier directory.

import pytest

from posgo.services import purchase_service, supplier_service
from posgo.services.supplier_service import SupplierNotFoundError
from posgo.validation import ConflictError, ValidationError


def test_create_and_update(db_session):
    supplier = supplier_service.create_supplier(
        name=" Textiles SAC ",
        ruc="20123456789",
        contact_name="Rosa Quispe",
    )

    assert supplier.name == "Textiles SAC"
    assert supplier.phone is None

    updated = supplier_service.update_supplier(supplier.id, {
        "phone": "014445566",
        "email": "ventas@textiles.pe",
        "address": "Av. Gamarra 123",
    })
    assert updated.phone == "014445566"
    assert updated.email == "ventas@textiles.pe"
    assert updated.to_dict()["contact_name"] == "Rosa Quispe"


def test_validation(db_session):
    with pytest.raises(ValidationError):
        supplier_service.create_supplier(name="  ")
    with pytest.raises(ValidationError):
        supplier_service.create_supplier(name="Distribuidora", email="sin-arroba")

    supplier = supplier_service.create_supplier(name="Distribuidora")
    with pytest.raises(ValidationError):
        supplier_service.update_supplier(supplier.id, {"created_at": "2026-01-01"})
    with pytest.raises(ValidationError):
        supplier_service.update_supplier(supplier.id, {"name": ""})

    assert supplier_service.get_supplier(supplier.id).name == "Distribuidora"


def test_ruc_unique_when_present(db_session):
    first = supplier_service.create_supplier(name="Textiles SAC", ruc="20123456789")
    supplier_service.create_supplier(name="Sin RUC 1")
    supplier_service.create_supplier(name="Sin RUC 2", ruc="")

    with pytest.raises(ConflictError):
        supplier_service.create_supplier(name="Copia", ruc="20123456789")

    other = supplier_service.create_supplier(name="Abarrotes Lima", ruc="20999999999")
    with pytest.raises(ConflictError):
        supplier_service.update_supplier(other.id, {"ruc": "20123456789"})

    # Re-saving its own RUC is not a conflict
    assert supplier_service.update_supplier(first.id, {"ruc": "20123456789"}).ruc == "20123456789"


def test_not_found(db_session):
    with pytest.raises(SupplierNotFoundError):
        supplier_service.get_supplier(42)
    with pytest.raises(SupplierNotFoundError):
        supplier_service.update_supplier(42, {"name": "X"})


def test_search(db_session):
    supplier_service.create_supplier(name="Textiles SAC", ruc="20123456789")
    supplier_service.create_supplier(name="Abarrotes Lima", contact_name="Jorge Huaman")

    assert [s.name for s in supplier_service.list_suppliers()] == ["Abarrotes Lima", "Textiles SAC"]
    assert [s.name for s in supplier_service.list_suppliers(search="2012")] == ["Textiles SAC"]
    assert [s.name for s in supplier_service.list_suppliers(search="huaman")] == ["Abarrotes Lima"]


def test_purchase_history_by_supplier_name(soda):
    supplier = supplier_service.create_supplier(name="Bebidas Norte")
    purchase_service.receive_purchase(supplier.name, "F001-1", [{"product_id": soda.id, "quantity": 5, "cost": 6.0}])
    purchase_service.receive_purchase("Otro", "F002-9", [{"product_id": soda.id, "quantity": 1, "cost": 6.0}])

    history = purchase_service.list_purchases(supplier=supplier.name)
    assert [p.invoice_number for p in history] == ["F001-1"]
