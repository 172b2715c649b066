# Overview: Closed set of payment methods and tender list arithmetic.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

from .. import money


class TenderError(Exception):
    """Raised for invalid tender input."""
    pass


class TenderMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    YAPE = "YAPE"  # e-wallet
    PLIN = "PLIN"  # e-wallet


# Whether a method puts physical money in the drawer. Every member must be
# listed; the check below fails at import time otherwise.
_TOUCHES_DRAWER = {
    TenderMethod.CASH: True,
    TenderMethod.CARD: False,
    TenderMethod.YAPE: False,
    TenderMethod.PLIN: False,
}

_missing = set(TenderMethod) - set(_TOUCHES_DRAWER)
if _missing:
    raise RuntimeError(f"Drawer classification missing for: {sorted(m.value for m in _missing)}")


def parse_method(value) -> TenderMethod:
    if isinstance(value, TenderMethod):
        return value
    if isinstance(value, str):
        try:
            return TenderMethod(value.strip().upper())
        except ValueError:
            pass
    valid = ", ".join(m.value for m in TenderMethod)
    raise TenderError(f"Invalid payment method: {value!r}. Must be one of {valid}")


def touches_drawer(method) -> bool:
    return _TOUCHES_DRAWER[parse_method(method)]


@dataclass(frozen=True)
class Tender:
    method: TenderMethod
    amount: float

    def to_dict(self) -> dict:
        return {"method": self.method.value, "amount": self.amount}


@dataclass(frozen=True)
class TenderStatus:
    paid: float
    remaining: float
    change: float
    covered: bool

    def to_dict(self) -> dict:
        return {
            "paid": self.paid,
            "remaining": self.remaining,
            "change": self.change,
            "covered": self.covered,
        }


def add_tender(tenders: Sequence[Tender], method, amount) -> list[Tender]:
    """
    Return a new tender list with one more entry appended.

    The input list is not modified. Non-positive amounts are rejected.
    """
    method = parse_method(method)
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise TenderError("Tender amount must be a number")
    if amount <= 0:
        raise TenderError("Tender amount must be positive")
    return [*tenders, Tender(method=method, amount=float(amount))]


def tenders_from_payload(items: Iterable[dict] | None) -> list[Tender]:
    tenders: list[Tender] = []
    for item in items or []:
        if not isinstance(item, dict):
            raise TenderError("Each tender must be an object with method and amount")
        amount = item.get("amount")
        if isinstance(amount, str):
            try:
                amount = float(amount.strip())
            except ValueError:
                raise TenderError("Tender amount must be a number")
        tenders = add_tender(tenders, item.get("method"), amount)
    return tenders


def paid_total(tenders: Iterable[Tender]) -> float:
    return money.total_of(t.amount for t in tenders)


def tender_status(total: float, tenders: Iterable[Tender]) -> TenderStatus:
    paid = paid_total(tenders)
    return TenderStatus(
        paid=paid,
        remaining=money.remaining(total, paid),
        change=money.change(total, paid),
        covered=money.covers(total, paid),
    )


def primary_method(tenders: Sequence[Tender]) -> TenderMethod:
    """First tender wins; a fully discounted sale with no tenders counts as cash."""
    if tenders:
        return tenders[0].method
    return TenderMethod.CASH
