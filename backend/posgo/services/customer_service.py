# Overview: Service-layer operations for customers; encapsulates business logic and database work.

from __future__ import annotations

from sqlalchemy import or_

from ..extensions import db
from ..models import Customer
from ..validation import ValidationError, require_text, optional_text


class CustomerError(Exception):
    """Raised for customer operation errors."""
    pass


class CustomerNotFoundError(CustomerError):
    pass


UPDATABLE_FIELDS = {"name", "phone", "document_id", "email"}


def _validate_email(email: str | None) -> str | None:
    if email and "@" not in email:
        raise ValidationError("email is not a valid address")
    return email


def create_customer(
    *,
    name: str,
    phone: str | None = None,
    document_id: str | None = None,
    email: str | None = None,
) -> Customer:
    """
    Register a customer. Purchase stats start at zero and are maintained
    by checkout only.
    """
    customer = Customer(
        name=require_text(name, "name", max_length=255),
        phone=optional_text(phone, max_length=32, field="phone"),
        document_id=optional_text(document_id, max_length=32, field="document_id"),
        email=_validate_email(optional_text(email, max_length=255, field="email")),
        total_purchases=0,
    )
    db.session.add(customer)
    db.session.commit()
    return customer


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise CustomerNotFoundError(f"Customer {customer_id} not found")
    return customer


def update_customer(customer_id: int, patch: dict) -> Customer:
    customer = get_customer(customer_id)

    unknown = [k for k in patch if k not in UPDATABLE_FIELDS]
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(sorted(unknown))}")

    try:
        if "name" in patch:
            customer.name = require_text(patch["name"], "name", max_length=255)
        if "phone" in patch:
            customer.phone = optional_text(patch["phone"], max_length=32, field="phone")
        if "document_id" in patch:
            customer.document_id = optional_text(patch["document_id"], max_length=32, field="document_id")
        if "email" in patch:
            customer.email = _validate_email(optional_text(patch["email"], max_length=255, field="email"))
    except ValidationError:
        db.session.rollback()
        raise

    db.session.commit()
    return customer


def list_customers(search: str | None = None, limit: int = 100) -> list[Customer]:
    query = db.session.query(Customer)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Customer.name.ilike(pattern),
            Customer.document_id.ilike(pattern),
            Customer.phone.ilike(pattern),
        ))
    return query.order_by(Customer.name, Customer.id).limit(limit).all()
