# Overview: Pytest coverage for the in-memory cart.

import pytest

from posgo.models import Product, ProductVariant
from posgo.services.cart import Cart, CartError
from posgo.validation import ValidationError


@pytest.fixture
def product():
    return Product(id=1, name="Gaseosa", price=10.0, cost=6.0, stock=5, has_variants=False)


@pytest.fixture
def product_with_variants():
    product = Product(id=2, name="Polo", price=35.0, cost=18.0, stock=3, has_variants=True)
    product.variants = [
        ProductVariant(id=10, product_id=2, name="S", price=35.0, stock=3),
        ProductVariant(id=11, product_id=2, name="M", price=38.0, cost=20.0, stock=0),
    ]
    return product


class TestCartAdd:
    def test_add_snapshots_price_and_cost(self, product):
        cart = Cart()
        line = cart.add(product)

        assert line.quantity == 1
        assert line.unit_price == 10.0
        assert line.unit_cost == 6.0
        assert line.key == (1, None)

    def test_adding_again_increments_quantity(self, product):
        cart = Cart()
        cart.add(product)
        cart.add(product, quantity=2)

        assert len(cart) == 1
        assert cart.get((1, None)).quantity == 3

    def test_out_of_stock_rejected(self, product):
        product.stock = 0
        with pytest.raises(CartError):
            Cart().add(product)

    def test_variant_required_for_variant_product(self, product_with_variants):
        with pytest.raises(CartError):
            Cart().add(product_with_variants)

    def test_variant_price_and_cost_fallback(self, product_with_variants):
        cart = Cart()
        small = product_with_variants.variants[0]
        line = cart.add(product_with_variants, small)

        assert line.unit_price == 35.0
        assert line.unit_cost == 18.0  # variant has no cost, product's is used
        assert line.variant_name == "S"
        assert line.key == (2, 10)

    def test_out_of_stock_variant_rejected(self, product_with_variants):
        with pytest.raises(CartError):
            Cart().add(product_with_variants, product_with_variants.variants[1])

    def test_foreign_variant_rejected(self, product):
        stray = ProductVariant(id=99, product_id=42, name="X", price=1.0, stock=5)
        with pytest.raises(CartError):
            Cart().add(product, stray)

    def test_invalid_quantity(self, product):
        with pytest.raises(ValidationError):
            Cart().add(product, quantity=0)


class TestCartEditing:
    def test_change_quantity_floors_at_one(self, product):
        cart = Cart()
        cart.add(product, quantity=2)

        assert cart.change_quantity((1, None), -5).quantity == 1
        assert cart.change_quantity((1, None), 3).quantity == 4

    def test_set_discount(self, product):
        cart = Cart()
        cart.add(product)

        assert cart.set_discount((1, None), "1.5").discount == 1.5
        with pytest.raises(CartError):
            cart.set_discount((1, None), -1)

    def test_unknown_line(self, product):
        with pytest.raises(CartError):
            Cart().set_quantity((1, None), 2)

    def test_remove_and_clear(self, product, product_with_variants):
        cart = Cart()
        cart.add(product)
        cart.add(product_with_variants, product_with_variants.variants[0])

        cart.remove((1, None))
        assert [line.key for line in cart] == [(2, 10)]

        cart.clear()
        assert cart.is_empty
        assert cart.to_list() == []
