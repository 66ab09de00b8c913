"""Shared fixtures: an in-memory bakery database and row factories."""

import itertools
from decimal import Decimal

import pytest

from bakery_cms.config import BakeryConfig, set_config
from bakery_cms.database import create_db_engine, get_session_factory, init_db
from bakery_cms.models import (
    Brand,
    BusinessModel,
    BusinessType,
    Order,
    OrderItem,
    Payment,
    PaymentMethod,
    Product,
    ProductStockItem,
    StockItem,
    StockItemBrand,
)


@pytest.fixture(autouse=True)
def bakery_config():
    """Install a test configuration for the duration of each test."""
    config = BakeryConfig(environment="test", database_url="sqlite://")
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture
def db_engine(bakery_config):
    """Create an in-memory SQLite engine with the bakery schema."""
    engine = create_db_engine(bakery_config)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """Create a session on the in-memory database."""
    session = get_session_factory(db_engine)()
    yield session
    session.close()


class BakeryFactory:
    """Insert rows directly, bypassing repositories."""

    def __init__(self, session):
        self.session = session
        self._seq = itertools.count(1)

    def _add(self, entity):
        self.session.add(entity)
        self.session.commit()
        return entity

    def product(self, name=None, price="25000.00", **kwargs):
        return self._add(
            Product(
                name=name or f"Product {next(self._seq)}",
                price=Decimal(price),
                business_type=kwargs.pop("business_type", BusinessType.BOTH),
                **kwargs,
            )
        )

    def order(self, order_number=None, **kwargs):
        return self._add(
            Order(
                order_number=order_number or f"ORD-{next(self._seq):04d}",
                business_model=kwargs.pop("business_model", BusinessModel.MADE_TO_ORDER),
                **kwargs,
            )
        )

    def order_item(self, order, product, quantity=1, unit_price="25000.00"):
        price = Decimal(unit_price)
        return self._add(
            OrderItem(
                order_id=order.id,
                product_id=product.id,
                quantity=quantity,
                unit_price=price,
                subtotal=price * quantity,
            )
        )

    def payment(self, order, amount="50000.00", method=PaymentMethod.CASH):
        return self._add(Payment(order_id=order.id, amount=Decimal(amount), method=method))

    def brand(self, name=None):
        return self._add(Brand(name=name or f"Brand {next(self._seq)}"))

    def stock_item(self, name=None, unit_of_measure="kg", current_quantity="10", **kwargs):
        return self._add(
            StockItem(
                name=name or f"Stock item {next(self._seq)}",
                unit_of_measure=unit_of_measure,
                current_quantity=Decimal(current_quantity),
                **kwargs,
            )
        )

    def stock_item_brand(self, stock_item, brand, price_after_tax, price_before_tax=None):
        after = Decimal(price_after_tax)
        return self._add(
            StockItemBrand(
                stock_item_id=stock_item.id,
                brand_id=brand.id,
                price_before_tax=Decimal(price_before_tax) if price_before_tax else after,
                price_after_tax=after,
            )
        )

    def recipe_line(self, product, stock_item, quantity="1", preferred_brand=None):
        return self._add(
            ProductStockItem(
                product_id=product.id,
                stock_item_id=stock_item.id,
                quantity=Decimal(quantity),
                preferred_brand_id=preferred_brand.id if preferred_brand else None,
            )
        )


@pytest.fixture
def factory(db_session):
    """Row factory bound to the test session."""
    return BakeryFactory(db_session)


@pytest.fixture
def order_with_dependents(factory):
    """A draft order with two items and one payment."""
    product = factory.product("Croissant")
    other = factory.product("Baguette")
    order = factory.order("ORD-0001")
    items = [factory.order_item(order, product, 2), factory.order_item(order, other, 1)]
    payment = factory.payment(order)
    return order, items, payment
