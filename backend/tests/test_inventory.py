# Overview: Pytest coverage for catalog writes and stock mutations.

import pytest

from posgo.extensions import db
from posgo.models import Product
from posgo.services import inventory_service
from posgo.services.inventory_service import InventoryError, ProductNotFoundError
from posgo.validation import ConflictError, ValidationError


class TestCatalog:
    def test_create_defaults(self, db_session):
        product = inventory_service.create_product(name="Chicle", price="0.5")

        assert product.category == "Otros"
        assert product.price == 0.5
        assert product.cost is None
        assert product.stock == 0
        assert product.has_variants is False

    def test_variant_product_aggregates_stock(self, shirt):
        assert shirt.has_variants is True
        assert shirt.stock == 12
        assert [v.name for v in shirt.variants] == ["S", "M", "L"]

    def test_duplicate_barcode_rejected(self, soda, shirt):
        with pytest.raises(ConflictError):
            inventory_service.create_product(name="Copia", price=1.0, barcode=soda.barcode)
        with pytest.raises(ConflictError):
            inventory_service.create_product(name="Copia", price=1.0, barcode=shirt.variants[0].barcode)

    def test_repeated_variant_barcode_in_one_product_rejected(self, db_session):
        with pytest.raises(ConflictError):
            inventory_service.create_product(name="Medias", price=5.0, variants=[
                {"name": "Blanca", "price": 5.0, "barcode": "X1"},
                {"name": "Negra", "price": 5.0, "barcode": "X1"},
            ])

        assert db.session.query(Product).count() == 0

    def test_product_barcode_repeated_on_own_variant_rejected(self, db_session):
        with pytest.raises(ConflictError):
            inventory_service.create_product(name="Gorra", price=20.0, barcode="Y1", variants=[
                {"name": "Roja", "price": 20.0, "barcode": "Y1"},
            ])

        assert db.session.query(Product).count() == 0
        assert inventory_service.find_by_barcode("Y1") is None

    def test_variants_without_barcodes_allowed(self, db_session):
        product = inventory_service.create_product(name="Gorra", price=20.0, barcode="Y2", variants=[
            {"name": "Roja", "price": 20.0},
            {"name": "Azul", "price": 20.0, "barcode": ""},
        ])

        assert [v.barcode for v in product.variants] == [None, None]

    @pytest.mark.parametrize("payload", [
        {"name": "", "price": 1.0},
        {"name": "X", "price": -1},
        {"name": "X", "price": 1.0, "stock": 1.5},
    ])
    def test_invalid_product(self, db_session, payload):
        with pytest.raises(ValidationError):
            inventory_service.create_product(**payload)

    def test_find_by_barcode(self, soda, shirt):
        assert inventory_service.find_by_barcode("7750000000011") == (soda, None)

        product, variant = inventory_service.find_by_barcode("7750000000059")
        assert product.id == shirt.id
        assert variant.name == "M"

        assert inventory_service.find_by_barcode("nope") is None
        assert inventory_service.find_by_barcode("  ") is None

    def test_update_product(self, soda):
        updated = inventory_service.update_product(soda.id, {"price": 12.5, "category": "Gaseosas"})
        assert updated.price == 12.5
        assert updated.category == "Gaseosas"

    def test_update_rejects_unknown_fields_and_variant_stock(self, soda, shirt):
        with pytest.raises(ValidationError):
            inventory_service.update_product(soda.id, {"has_variants": True})
        with pytest.raises(ValidationError):
            inventory_service.update_product(shirt.id, {"stock": 50})

        db.session.expire_all()
        assert db.session.get(Product, shirt.id).stock == 12

    def test_list_filters(self, soda, shirt):
        assert [p.id for p in inventory_service.list_products(category="Ropa")] == [shirt.id]
        assert inventory_service.list_products(low_stock=5) == []
        inventory_service.update_product(soda.id, {"stock": 2})
        assert [p.id for p in inventory_service.list_products(low_stock=5)] == [soda.id]

    def test_missing_product(self, db_session):
        with pytest.raises(ProductNotFoundError):
            inventory_service.get_product(123)


class TestStockMutations:
    def test_decrement_simple(self, soda):
        inventory_service.decrement_stock(soda.id, None, 3)
        db.session.commit()
        assert soda.stock == 7

    def test_decrement_variant_recomputes_aggregate(self, shirt):
        medium = shirt.variants[1]
        inventory_service.decrement_stock(shirt.id, medium.id, 4)
        db.session.commit()

        assert medium.stock == 2
        assert shirt.stock == sum(v.stock for v in shirt.variants) == 8

    def test_decrement_missing_variant_is_skipped(self, shirt):
        inventory_service.decrement_stock(shirt.id, 9999, 1)
        inventory_service.decrement_stock(shirt.id, None, 1)
        db.session.commit()
        assert shirt.stock == 12

    def test_decrement_missing_product_is_skipped(self, db_session):
        assert inventory_service.decrement_stock(9999, None, 1) is None

    def test_increment_updates_cost(self, shirt):
        small = shirt.variants[0]
        inventory_service.increment_stock(shirt.id, small.id, 5, unit_cost=16.0)
        db.session.commit()

        assert small.stock == 9
        assert small.cost == 16.0
        assert shirt.stock == 17

    def test_increment_requires_variant_for_variant_product(self, shirt):
        with pytest.raises(InventoryError):
            inventory_service.increment_stock(shirt.id, None, 5)
