# Overview: Service-layer operations for reporting; read-only aggregates over sales and stock.

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func

from ..extensions import db
from ..models import Sale, SaleLine, SaleTender, Product
from ..time_utils import parse_iso_datetime, to_utc_z
from .tenders import TenderMethod


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def _parse_range(start: str | None, end: str | None) -> tuple[datetime | None, datetime | None]:
    try:
        start_dt = parse_iso_datetime(start) if start else None
        end_dt = parse_iso_datetime(end) if end else None
    except ValueError:
        raise ReportError("start and end must be ISO-8601 datetimes")
    if start_dt and end_dt and start_dt > end_dt:
        raise ReportError("start must be before end")
    return start_dt, end_dt


def _filter_range(query, start_dt: datetime | None, end_dt: datetime | None):
    if start_dt:
        query = query.filter(Sale.created_at >= start_dt)
    if end_dt:
        query = query.filter(Sale.created_at <= end_dt)
    return query


def sales_summary(start: str | None = None, end: str | None = None) -> dict:
    """
    Dashboard totals: sales, profit, transaction count and per-method tenders.

    Sales without tender rows count their whole total under primary_method.
    """
    start_dt, end_dt = _parse_range(start, end)

    totals_row = _filter_range(
        db.session.query(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.total), 0.0),
            func.coalesce(func.sum(Sale.profit), 0.0),
            func.coalesce(func.sum(Sale.tax), 0.0),
        ),
        start_dt,
        end_dt,
    ).one()

    by_method = {method.value: 0.0 for method in TenderMethod}

    tender_rows = _filter_range(
        db.session.query(SaleTender.method, func.sum(SaleTender.amount))
        .join(Sale, Sale.id == SaleTender.sale_id),
        start_dt,
        end_dt,
    ).group_by(SaleTender.method).all()
    for method, amount in tender_rows:
        by_method[method] = by_method.get(method, 0.0) + float(amount or 0.0)

    legacy_rows = _filter_range(
        db.session.query(Sale.primary_method, func.sum(Sale.total))
        .outerjoin(SaleTender, SaleTender.sale_id == Sale.id)
        .filter(SaleTender.id.is_(None)),
        start_dt,
        end_dt,
    ).group_by(Sale.primary_method).all()
    for method, amount in legacy_rows:
        by_method[method] = by_method.get(method, 0.0) + float(amount or 0.0)

    count, total_sales, total_profit, total_tax = totals_row
    return {
        "start": to_utc_z(start_dt),
        "end": to_utc_z(end_dt),
        "transactions": int(count or 0),
        "total_sales": float(total_sales),
        "total_profit": float(total_profit),
        "total_tax": float(total_tax),
        "by_method": by_method,
    }


def recent_sales(limit: int = 10) -> list[Sale]:
    return db.session.query(Sale).order_by(Sale.id.desc()).limit(limit).all()


def product_sales_counts() -> dict[int, int]:
    """Units sold per product id, over all sales."""
    rows = (
        db.session.query(SaleLine.product_id, func.coalesce(func.sum(SaleLine.quantity), 0))
        .group_by(SaleLine.product_id)
        .all()
    )
    return {product_id: int(qty) for product_id, qty in rows}


def restock_list(threshold: int = 5) -> list[dict]:
    """
    Products at or under the stock threshold, best sellers first.
    """
    if threshold < 0:
        raise ReportError("threshold cannot be negative")

    counts = product_sales_counts()
    products = (
        db.session.query(Product)
        .filter(Product.stock <= threshold)
        .order_by(Product.name, Product.id)
        .all()
    )

    items = []
    for product in products:
        data = product.to_dict()
        data["sales_count"] = counts.get(product.id, 0)
        items.append(data)

    items.sort(key=lambda item: item["sales_count"], reverse=True)
    return items
