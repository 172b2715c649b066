# Overview: Currency arithmetic for carts, tenders and cash drawers.

"""
Money helpers.

Amounts are plain floats in currency units (not cents). Stored values are
never rounded; only display() formats to two decimals. Tender coverage is
compared with COVERAGE_EPSILON to absorb float noise such as
11.8 / 1.18 * 1.18 != 11.8.

Every arithmetic rule that touches money goes through this module so a
move to Decimal/cents only has to change this file.
"""

from __future__ import annotations

from typing import Iterable


COVERAGE_EPSILON = 0.01


def floor_zero(amount: float) -> float:
    return max(0.0, amount)


def total_of(amounts: Iterable[float]) -> float:
    return float(sum(amounts, 0.0))


def line_gross(unit_price: float, quantity: int) -> float:
    return unit_price * quantity


def line_discount(per_unit_discount: float, quantity: int) -> float:
    return (per_unit_discount or 0.0) * quantity


def line_cost(unit_cost: float | None, quantity: int) -> float:
    return (unit_cost or 0.0) * quantity


def split_tax(net: float, tax_rate: float, prices_include_tax: bool) -> tuple[float, float, float]:
    """
    Split a net (post-discount) amount into (subtotal, tax, total).

    Tax-inclusive stores extract the tax from the shelf price; tax-exclusive
    stores add it on top. The same net amount yields a different split in
    each mode.
    """
    if prices_include_tax:
        total = net
        subtotal = total / (1 + tax_rate)
        tax = total - subtotal
    else:
        subtotal = net
        tax = subtotal * tax_rate
        total = subtotal + tax
    return subtotal, tax, total


def profit(total: float, tax: float, cost: float) -> float:
    # Not floored: a sale below cost reports a negative profit.
    return total - tax - cost


def remaining(total: float, paid: float) -> float:
    return floor_zero(total - paid)


def change(total: float, paid: float) -> float:
    return floor_zero(paid - total)


def covers(total: float, paid: float) -> bool:
    return remaining(total, paid) <= COVERAGE_EPSILON


def expected_drawer(start_amount: float, cash_sales: float, cash_in: float, cash_out: float) -> float:
    return start_amount + cash_sales + cash_in - cash_out


def discrepancy(counted: float | None, expected: float | None) -> float | None:
    if counted is None or expected is None:
        return None
    return counted - expected


def display(amount: float | None, currency: str = "") -> str:
    return f"{currency}{(amount or 0.0):.2f}"
