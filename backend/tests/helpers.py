# Overview: Shared builders for carts and tenders used across the test modules.

from posgo.services.cart import Cart
from posgo.services.tenders import Tender, TenderMethod


def make_cart(*items) -> Cart:
    """Build a cart from (product, quantity) or (product, variant, quantity) tuples."""
    cart = Cart()
    for item in items:
        if len(item) == 2:
            product, quantity = item
            cart.add(product, quantity=quantity)
        else:
            product, variant, quantity = item
            cart.add(product, variant, quantity)
    return cart


def cash(amount: float) -> Tender:
    return Tender(method=TenderMethod.CASH, amount=amount)


def card(amount: float) -> Tender:
    return Tender(method=TenderMethod.CARD, amount=amount)
