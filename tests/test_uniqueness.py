"""
Tests for business key uniqueness among active rows.
"""

from decimal import Decimal

import pytest

from bakery_cms.config import BakeryConfig
from bakery_cms.models import Brand, PaymentMethod, Product
from bakery_cms.repositories import (
    BrandRepository,
    OrderItemRepository,
    PaymentRepository,
    ProductRepository,
    StockItemBrandRepository,
)
from bakery_cms.soft_delete import ActiveUniqueViolation, Scope, ensure_unique_among_active


class TestCreate:
    """Test uniqueness checks on insert."""

    def test_duplicate_active_name_rejected(self, db_session, factory):
        existing = factory.brand("Anchor")

        with pytest.raises(ActiveUniqueViolation) as exc_info:
            BrandRepository(db_session).create(name="Anchor")

        assert exc_info.value.entity_type == "Brand"
        assert exc_info.value.values == {"name": "Anchor"}
        assert exc_info.value.conflicting_id == existing.id
        assert BrandRepository(db_session).count(scope=Scope.WITH_DELETED) == 1

    def test_deleted_rows_do_not_block(self, db_session, factory):
        repository = BrandRepository(db_session)
        for _ in range(3):
            brand = repository.create(name="Anchor")
            repository.delete(brand.id)

        repository.create(name="Anchor")

        assert repository.count(scope=Scope.ONLY_DELETED, name="Anchor") == 3
        assert repository.count(name="Anchor") == 1

    def test_composite_key(self, db_session, factory):
        order = factory.order()
        croissant = factory.product("Croissant")
        baguette = factory.product("Baguette")
        repository = OrderItemRepository(db_session)
        line = dict(quantity=1, unit_price=Decimal("1"), subtotal=Decimal("1"))

        repository.create(order_id=order.id, product_id=croissant.id, **line)
        repository.create(order_id=order.id, product_id=baguette.id, **line)

        with pytest.raises(ActiveUniqueViolation):
            repository.create(order_id=order.id, product_id=croissant.id, **line)

    def test_one_active_payment_per_order(self, db_session, factory):
        order = factory.order()
        repository = PaymentRepository(db_session)
        repository.create(order_id=order.id, amount=Decimal("10"), method=PaymentMethod.CASH)

        with pytest.raises(ActiveUniqueViolation):
            repository.create(
                order_id=order.id, amount=Decimal("10"), method=PaymentMethod.VIETQR
            )

    def test_enforcement_can_be_disabled(self, db_session, factory):
        factory.brand("Anchor")
        config = BakeryConfig(
            environment="test", database_url="sqlite://", enforce_active_uniqueness=False
        )

        BrandRepository(db_session, config=config).create(name="Anchor")

        assert BrandRepository(db_session).count(name="Anchor") == 2


class TestUpdateAndRestore:
    """Test uniqueness checks on update and restore."""

    def test_update_to_taken_name_rejected(self, db_session, factory):
        factory.brand("Anchor")
        other = factory.brand("President")

        with pytest.raises(ActiveUniqueViolation):
            BrandRepository(db_session).update(other.id, name="Anchor")

        db_session.expire_all()
        assert db_session.get(Brand, other.id).name == "President"

    def test_update_keeping_own_name(self, db_session, factory):
        brand = factory.brand("Anchor")

        updated = BrandRepository(db_session).update(brand.id, description="Butter")

        assert updated.description == "Butter"

    def test_restore_blocked_by_newer_active_row(self, db_session, factory):
        """Restoring a row whose key is now held by another active row fails."""
        repository = ProductRepository(db_session)
        old = factory.product("Croissant")
        repository.delete(old.id)
        factory.product("Croissant")

        with pytest.raises(ActiveUniqueViolation):
            repository.restore(old.id)

        assert repository.find_by_id(old.id, scope=Scope.ONLY_DELETED) is not None
        assert repository.count(name="Croissant") == 1

    def test_stock_item_brand_pair(self, db_session, factory):
        flour = factory.stock_item("Flour")
        brand = factory.brand("Meizan")
        repository = StockItemBrandRepository(db_session)
        first = factory.stock_item_brand(flour, brand, "18000")
        repository.delete(first.id)
        factory.stock_item_brand(flour, brand, "19000")

        with pytest.raises(ActiveUniqueViolation):
            repository.restore(first.id)


class TestEnsureUniqueAmongActive:
    """Test the check function directly."""

    def test_none_values_are_skipped(self, db_session, factory):
        factory.product("Croissant")
        candidate = Product(name=None, price=Decimal("1"))

        ensure_unique_among_active(db_session, candidate)

    def test_excluded_id_is_ignored(self, db_session, factory):
        product = factory.product("Croissant")

        ensure_unique_among_active(db_session, product, exclude_id=product.id)

        with pytest.raises(ActiveUniqueViolation):
            ensure_unique_among_active(db_session, product)
