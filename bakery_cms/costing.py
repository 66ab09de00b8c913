"""
Recipe costing.

A product's unit cost is the sum over its recipe lines of
``quantity * unit price``. The unit price comes from the line's preferred
brand when one is set, otherwise from the cheapest brand offering the stock
item. Only active rows take part.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from .models import Brand, Product, ProductStockItem, StockItem, StockItemBrand
from .soft_delete.scopes import scoped_query

logger = logging.getLogger(__name__)


class CostBreakdownItem(BaseModel):
    """Cost contribution of one recipe line."""

    stock_item_id: str
    stock_item_name: str
    quantity: Decimal
    unit_of_measure: str
    brand_id: Optional[str] = None
    brand_name: Optional[str] = None
    unit_price: Decimal = Field(Decimal("0"), description="Price after tax per unit")
    total_cost: Decimal = Field(Decimal("0"), description="quantity * unit_price")


class ProductCost(BaseModel):
    """Unit cost of a product with its per-line breakdown."""

    product_id: str
    product_name: str
    total_cost: Decimal = Decimal("0")
    cost_breakdown: List[CostBreakdownItem] = Field(default_factory=list)


class StockItemUsage(BaseModel):
    """Whether a stock item can be deleted without orphaning recipes."""

    stock_item_id: str
    product_count: int
    can_delete: bool


def _line_price(session: Session, line: ProductStockItem) -> tuple:
    """Return ``(brand, unit_price)`` for a recipe line."""
    if line.preferred_brand_id:
        brand = scoped_query(session, Brand, id=line.preferred_brand_id).first()
        if brand is not None:
            price = scoped_query(
                session,
                StockItemBrand,
                stock_item_id=line.stock_item_id,
                brand_id=brand.id,
            ).first()
            if price is None:
                return None, Decimal("0")
            return brand, price.price_after_tax

    offers = scoped_query(session, StockItemBrand, stock_item_id=line.stock_item_id).all()
    if not offers:
        return None, Decimal("0")

    cheapest = min(offers, key=lambda offer: offer.price_after_tax)
    brand = scoped_query(session, Brand, id=cheapest.brand_id).first()
    return brand, cheapest.price_after_tax


def calculate_product_cost(session: Session, product_id: str) -> Optional[ProductCost]:
    """
    Calculate the unit cost of a product from its recipe.

    Args:
        session: SQLAlchemy session
        product_id: Product primary key

    Returns:
        Cost with breakdown, or None when no active product has that id
    """
    logger.debug("Calculating product cost for %s", product_id)

    product = scoped_query(session, Product, id=product_id).first()
    if product is None:
        return None

    cost = ProductCost(product_id=product.id, product_name=product.name)

    for line in scoped_query(session, ProductStockItem, product_id=product_id).all():
        stock_item = scoped_query(session, StockItem, id=line.stock_item_id).first()
        if stock_item is None:
            logger.warning(
                "Recipe line %s of product %s uses deleted stock item %s",
                line.id,
                product_id,
                line.stock_item_id,
            )
            continue

        brand, unit_price = _line_price(session, line)
        item = CostBreakdownItem(
            stock_item_id=stock_item.id,
            stock_item_name=stock_item.name,
            quantity=line.quantity,
            unit_of_measure=stock_item.unit_of_measure,
            brand_id=brand.id if brand is not None else None,
            brand_name=brand.name if brand is not None else None,
            unit_price=unit_price,
            total_cost=line.quantity * unit_price,
        )
        cost.cost_breakdown.append(item)
        cost.total_cost += item.total_cost

    logger.info("Product cost calculated for %s: %s", product_id, cost.total_cost)
    return cost


def check_stock_item_usage(session: Session, stock_item_id: str) -> StockItemUsage:
    """Count the active recipe lines that use a stock item."""
    product_count = scoped_query(
        session, ProductStockItem, stock_item_id=stock_item_id
    ).count()
    return StockItemUsage(
        stock_item_id=stock_item_id,
        product_count=product_count,
        can_delete=product_count == 0,
    )
