# Overview: Service-layer operations for the supplier directory; encapsulates business logic and database work.

"""
Supplier Service

WHY: Purchases come from a small set of recurring suppliers. The directory
keeps their tax id and contact details so receiving staff pick a supplier
instead of retyping it.

DESIGN:
- Name is required; every other field is optional
- RUC (tax id) is unique across suppliers when specified
- Purchases store the supplier name as text, so the purchase history filter
  (purchase_service.list_purchases(supplier=...)) works on that name
"""

from __future__ import annotations

from sqlalchemy import or_

from ..extensions import db
from ..models import Supplier
from ..validation import ValidationError, ConflictError, require_text, optional_text


class SupplierError(Exception):
    """Raised for supplier operation errors."""
    pass


class SupplierNotFoundError(SupplierError):
    pass


UPDATABLE_FIELDS = {"name", "ruc", "phone", "email", "address", "contact_name"}


def _validate_email(email: str | None) -> str | None:
    if email and "@" not in email:
        raise ValidationError("email is not a valid address")
    return email


def _check_ruc_free(ruc: str | None, *, supplier_id: int | None = None) -> None:
    if not ruc:
        return
    existing = db.session.query(Supplier).filter(Supplier.ruc == ruc).first()
    if existing and existing.id != supplier_id:
        raise ConflictError(f"RUC {ruc} already assigned to supplier {existing.id}")


def create_supplier(
    *,
    name: str,
    ruc: str | None = None,
    phone: str | None = None,
    email: str | None = None,
    address: str | None = None,
    contact_name: str | None = None,
) -> Supplier:
    """
    Add a supplier to the directory.

    Raises:
        ValidationError: blank name, malformed email, overlong fields
        ConflictError: RUC already used by another supplier
    """
    ruc = optional_text(ruc, max_length=32, field="ruc")
    _check_ruc_free(ruc)

    supplier = Supplier(
        name=require_text(name, "name", max_length=255),
        ruc=ruc,
        phone=optional_text(phone, max_length=32, field="phone"),
        email=_validate_email(optional_text(email, max_length=255, field="email")),
        address=optional_text(address),
        contact_name=optional_text(contact_name, max_length=255, field="contact_name"),
    )
    db.session.add(supplier)
    db.session.commit()
    return supplier


def get_supplier(supplier_id: int) -> Supplier:
    supplier = db.session.get(Supplier, supplier_id)
    if not supplier:
        raise SupplierNotFoundError(f"Supplier {supplier_id} not found")
    return supplier


def update_supplier(supplier_id: int, patch: dict) -> Supplier:
    """Apply a partial update. Unknown fields are rejected, not ignored."""
    supplier = get_supplier(supplier_id)

    unknown = [k for k in patch if k not in UPDATABLE_FIELDS]
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(sorted(unknown))}")

    try:
        if "name" in patch:
            supplier.name = require_text(patch["name"], "name", max_length=255)
        if "ruc" in patch:
            ruc = optional_text(patch["ruc"], max_length=32, field="ruc")
            _check_ruc_free(ruc, supplier_id=supplier.id)
            supplier.ruc = ruc
        if "phone" in patch:
            supplier.phone = optional_text(patch["phone"], max_length=32, field="phone")
        if "email" in patch:
            supplier.email = _validate_email(optional_text(patch["email"], max_length=255, field="email"))
        if "address" in patch:
            supplier.address = optional_text(patch["address"])
        if "contact_name" in patch:
            supplier.contact_name = optional_text(patch["contact_name"], max_length=255, field="contact_name")
    except ValueError:
        db.session.rollback()
        raise

    db.session.commit()
    return supplier


def list_suppliers(search: str | None = None, limit: int = 100) -> list[Supplier]:
    query = db.session.query(Supplier)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Supplier.name.ilike(pattern),
            Supplier.ruc.ilike(pattern),
            Supplier.contact_name.ilike(pattern),
        ))
    return query.order_by(Supplier.name, Supplier.id).limit(limit).all()
