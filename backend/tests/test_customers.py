# Overview: Pytest coverage for customer records.

import pytest

from posgo.services import customer_service
from posgo.services.customer_service import CustomerNotFoundError
from posgo.validation import ValidationError


def test_create_and_update(db_session):
    customer = customer_service.create_customer(name=" Luis Paredes ", phone="987654321")

    assert customer.name == "Luis Paredes"
    assert customer.total_purchases == 0

    updated = customer_service.update_customer(customer.id, {"email": "luis@example.pe", "document_id": "70112233"})
    assert updated.email == "luis@example.pe"
    assert updated.document_id == "70112233"


def test_validation(db_session):
    with pytest.raises(ValidationError):
        customer_service.create_customer(name="")
    with pytest.raises(ValidationError):
        customer_service.create_customer(name="Ana", email="not-an-email")

    customer = customer_service.create_customer(name="Ana")
    with pytest.raises(ValidationError):
        customer_service.update_customer(customer.id, {"total_purchases": 10})


def test_not_found(db_session):
    with pytest.raises(CustomerNotFoundError):
        customer_service.get_customer(77)


def test_search(db_session):
    customer_service.create_customer(name="Ana Torres", document_id="40123456")
    customer_service.create_customer(name="Bruno Diaz", phone="999111222")

    assert [c.name for c in customer_service.list_customers()] == ["Ana Torres", "Bruno Diaz"]
    assert [c.name for c in customer_service.list_customers(search="4012")] == ["Ana Torres"]
    assert [c.name for c in customer_service.list_customers(search="bruno")] == ["Bruno Diaz"]
