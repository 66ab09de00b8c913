"""
Bakery tables.

Importing this package registers every table on ``Base.metadata`` and the
hard delete guard on every soft-deletable model.
"""

from ..database import Base
from ..soft_delete.mixins import register_soft_delete_listeners
from .enums import (
    BusinessModel,
    BusinessType,
    MovementType,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
    ProductStatus,
    StockItemStatus,
)
from .orders import Order, OrderItem, Payment
from .products import Product
from .stock import Brand, ProductStockItem, StockItem, StockItemBrand, StockMovement

register_soft_delete_listeners(Base)

__all__ = [
    # Tables
    "Product",
    "Order",
    "OrderItem",
    "Payment",
    "Brand",
    "StockItem",
    "StockItemBrand",
    "ProductStockItem",
    "StockMovement",
    # Enums
    "BusinessType",
    "ProductStatus",
    "OrderStatus",
    "OrderType",
    "BusinessModel",
    "PaymentMethod",
    "PaymentStatus",
    "StockItemStatus",
    "MovementType",
]
