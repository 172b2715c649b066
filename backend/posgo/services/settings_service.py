# Overview: Store settings (tax mode, currency, ticket header) stored in a single row.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import StoreSettings
from ..validation import ValidationError, parse_amount, require_text, optional_text


SETTINGS_ROW_ID = 1

WRITABLE_FIELDS = {"store_name", "tax_id", "address", "phone", "tax_rate", "currency", "prices_include_tax"}


def get_settings() -> StoreSettings:
    """
    Return the store settings row, creating it from Config on first use.
    """
    settings = db.session.get(StoreSettings, SETTINGS_ROW_ID)
    if settings:
        return settings

    cfg = current_app.config
    settings = StoreSettings(
        id=SETTINGS_ROW_ID,
        store_name=cfg.get("POS_STORE_NAME", "PosGo!"),
        currency=cfg.get("POS_CURRENCY", ""),
        tax_rate=float(cfg.get("POS_TAX_RATE", 0.0)),
        prices_include_tax=bool(cfg.get("POS_PRICES_INCLUDE_TAX", True)),
    )
    db.session.add(settings)
    db.session.commit()
    return settings


def update_settings(patch: dict) -> StoreSettings:
    """
    Apply a partial update.

    tax_rate only has to be a non-negative number; there is no upper bound.
    """
    unknown = [k for k in patch if k not in WRITABLE_FIELDS]
    if unknown:
        raise ValidationError(f"Field not allowed: {', '.join(sorted(unknown))}")

    settings = get_settings()
    try:
        if "store_name" in patch:
            settings.store_name = require_text(patch["store_name"], "store_name", max_length=255)
        if "tax_id" in patch:
            settings.tax_id = optional_text(patch["tax_id"], max_length=32, field="tax_id")
        if "address" in patch:
            settings.address = optional_text(patch["address"], max_length=255, field="address")
        if "phone" in patch:
            settings.phone = optional_text(patch["phone"], max_length=32, field="phone")
        if "currency" in patch:
            settings.currency = optional_text(patch["currency"], max_length=8, field="currency") or ""
        if "tax_rate" in patch:
            settings.tax_rate = parse_amount(patch["tax_rate"], "tax_rate")
        if "prices_include_tax" in patch:
            value = patch["prices_include_tax"]
            if not isinstance(value, bool):
                raise ValidationError("prices_include_tax must be true or false")
            settings.prices_include_tax = value
    except ValidationError:
        db.session.rollback()
        raise

    db.session.commit()
    return settings
