"""
Tests for recipe costing and stock item helpers.
"""

from decimal import Decimal

from bakery_cms.costing import calculate_product_cost, check_stock_item_usage
from bakery_cms.models import StockItemStatus
from bakery_cms.repositories import (
    BrandRepository,
    ProductRepository,
    ProductStockItemRepository,
    StockItemBrandRepository,
    StockItemRepository,
)


class TestCalculateProductCost:
    """Test unit cost from recipe lines and brand prices."""

    def test_lowest_price_without_preferred_brand(self, db_session, factory):
        product = factory.product("Croissant")
        flour = factory.stock_item("Flour")
        cheap, pricey = factory.brand("Meizan"), factory.brand("Bakers Choice")
        factory.stock_item_brand(flour, pricey, "24000")
        factory.stock_item_brand(flour, cheap, "18000")
        factory.recipe_line(product, flour, quantity="0.250")

        cost = calculate_product_cost(db_session, product.id)

        assert cost.product_name == "Croissant"
        [line] = cost.cost_breakdown
        assert line.brand_name == "Meizan"
        assert line.unit_price == Decimal("18000")
        assert cost.total_cost == Decimal("4500")

    def test_preferred_brand_wins(self, db_session, factory):
        product = factory.product("Croissant")
        butter = factory.stock_item("Butter")
        anchor, president = factory.brand("Anchor"), factory.brand("President")
        factory.stock_item_brand(butter, anchor, "200000")
        factory.stock_item_brand(butter, president, "150000")
        factory.recipe_line(product, butter, quantity="0.100", preferred_brand=anchor)

        cost = calculate_product_cost(db_session, product.id)

        assert cost.cost_breakdown[0].brand_id == anchor.id
        assert cost.total_cost == Decimal("20000")

    def test_preferred_brand_without_price_costs_nothing(self, db_session, factory):
        product = factory.product("Croissant")
        sugar = factory.stock_item("Sugar")
        listed, unlisted = factory.brand("Bien Hoa"), factory.brand("Other")
        factory.stock_item_brand(sugar, listed, "30000")
        factory.recipe_line(product, sugar, quantity="1", preferred_brand=unlisted)

        cost = calculate_product_cost(db_session, product.id)

        assert cost.cost_breakdown[0].unit_price == Decimal("0")
        assert cost.cost_breakdown[0].brand_id is None
        assert cost.cost_breakdown[0].brand_name is None
        assert cost.total_cost == Decimal("0")

    def test_deleted_preferred_brand_falls_back_to_lowest(self, db_session, factory):
        product = factory.product("Croissant")
        milk = factory.stock_item("Milk", unit_of_measure="l")
        preferred, other = factory.brand("Vinamilk"), factory.brand("TH")
        factory.stock_item_brand(milk, preferred, "30000")
        factory.stock_item_brand(milk, other, "35000")
        factory.recipe_line(product, milk, quantity="2", preferred_brand=preferred)
        BrandRepository(db_session).delete(preferred.id)

        cost = calculate_product_cost(db_session, product.id)

        # the preferred brand's price row is still active, so it stays cheapest
        assert cost.total_cost == Decimal("60000")
        assert cost.cost_breakdown[0].brand_name is None

    def test_deleted_rows_are_ignored(self, db_session, factory):
        product = factory.product("Croissant")
        flour, eggs = factory.stock_item("Flour"), factory.stock_item("Eggs", "pcs")
        brand = factory.brand("Meizan")
        cheap = factory.stock_item_brand(flour, brand, "10000")
        other_brand = factory.brand("Bakers Choice")
        factory.stock_item_brand(flour, other_brand, "20000")
        factory.stock_item_brand(eggs, brand, "3000")
        factory.recipe_line(product, flour, quantity="1")
        egg_line = factory.recipe_line(product, eggs, quantity="2")

        StockItemBrandRepository(db_session).delete(cheap.id)
        ProductStockItemRepository(db_session).delete(egg_line.id)

        cost = calculate_product_cost(db_session, product.id)

        assert [line.stock_item_name for line in cost.cost_breakdown] == ["Flour"]
        assert cost.total_cost == Decimal("20000")

    def test_lines_on_deleted_stock_item_are_skipped(self, db_session, factory):
        product = factory.product("Croissant")
        flour = factory.stock_item("Flour")
        factory.recipe_line(product, flour, quantity="1")
        StockItemRepository(db_session).delete(flour.id)

        cost = calculate_product_cost(db_session, product.id)

        assert cost.cost_breakdown == []
        assert cost.total_cost == Decimal("0")

    def test_missing_or_deleted_product(self, db_session, factory):
        product = factory.product("Croissant")
        ProductRepository(db_session).delete(product.id)

        assert calculate_product_cost(db_session, product.id) is None
        assert calculate_product_cost(db_session, "missing-id") is None

    def test_no_price_rows(self, db_session, factory):
        product = factory.product("Croissant")
        factory.recipe_line(product, factory.stock_item("Salt"), quantity="0.01")

        cost = calculate_product_cost(db_session, product.id)

        assert cost.cost_breakdown[0].brand_id is None
        assert cost.total_cost == Decimal("0")


class TestStockItems:
    """Test stock status and deletion protection."""

    def test_status_follows_quantity(self, db_session, factory):
        empty = factory.stock_item("Flour", current_quantity="0")
        low = factory.stock_item("Sugar", current_quantity="2", reorder_threshold=Decimal("5"))
        plenty = factory.stock_item("Salt", current_quantity="20", reorder_threshold=Decimal("5"))

        assert empty.status == StockItemStatus.OUT_OF_STOCK
        assert low.status == StockItemStatus.LOW_STOCK
        assert plenty.status == StockItemStatus.AVAILABLE

    def test_status_recomputed_on_update(self, db_session, factory):
        item = factory.stock_item("Flour", current_quantity="20")

        updated = StockItemRepository(db_session).update(item.id, current_quantity=Decimal("0"))

        assert updated.status == StockItemStatus.OUT_OF_STOCK

    def test_usage_counts_active_recipe_lines(self, db_session, factory):
        flour = factory.stock_item("Flour")
        line = factory.recipe_line(factory.product("Croissant"), flour)
        factory.recipe_line(factory.product("Baguette"), flour)

        usage = check_stock_item_usage(db_session, flour.id)
        assert usage.product_count == 2
        assert usage.can_delete is False

        ProductStockItemRepository(db_session).delete(line.id)

        assert check_stock_item_usage(db_session, flour.id).product_count == 1

    def test_unused_stock_item_can_be_deleted(self, db_session, factory):
        usage = check_stock_item_usage(db_session, factory.stock_item("Yeast").id)

        assert usage.can_delete is True
