"""
Repositories for the bakery tables and the cascade graph that links them.

Orders are the only parents in the cascade graph: deleting an order soft
deletes its items and its payment. Products, brands and stock items have no
soft delete dependents.
"""

import logging
from typing import Dict, List, Optional, Type

from sqlalchemy.orm import Session

from .config import BakeryConfig, get_config
from .database import transaction
from .models import (
    Brand,
    Order,
    OrderItem,
    Payment,
    Product,
    ProductStockItem,
    StockItem,
    StockItemBrand,
)
from .soft_delete.cascade import CascadeGraph, CascadePropagator
from .soft_delete.lifecycle import LifecycleOperations
from .soft_delete.repository import SoftDeleteRepository
from .soft_delete.scopes import Scope, ScopeLike
from .soft_delete.services import SoftDeleteService

logger = logging.getLogger(__name__)

BAKERY_CASCADE_GRAPH = CascadeGraph.from_mapping(
    {
        Order: [OrderItem.order_id, Payment.order_id],
    }
)


def build_lifecycle(
    session: Session, config: Optional[BakeryConfig] = None
) -> LifecycleOperations:
    """Lifecycle operations wired to the bakery cascade graph."""
    config = config or get_config()
    propagator = CascadePropagator(
        BAKERY_CASCADE_GRAPH, enabled=config.cascade_delete_enabled
    )
    return LifecycleOperations(
        session,
        propagator=propagator,
        enforce_uniqueness=config.enforce_active_uniqueness,
    )


class BakeryRepository(SoftDeleteRepository):
    """Repository whose default lifecycle follows the bakery cascade graph."""

    def __init__(
        self,
        session: Session,
        lifecycle: Optional[LifecycleOperations] = None,
        config: Optional[BakeryConfig] = None,
    ):
        super().__init__(session, lifecycle=lifecycle or build_lifecycle(session, config))


class ProductRepository(BakeryRepository):
    model = Product

    def find_by_name(
        self, name: str, scope: ScopeLike = Scope.DEFAULT
    ) -> List[Product]:
        return self.find_all(scope=scope, name=name)


class OrderRepository(BakeryRepository):
    model = Order

    def find_by_order_number(
        self, order_number: str, scope: ScopeLike = Scope.DEFAULT
    ) -> Optional[Order]:
        orders = self.find_all(scope=scope, order_number=order_number)
        return orders[0] if orders else None

    def restore_with_dependents(self, order_id: str) -> Optional[Order]:
        """
        Restore an order and the items and payment its cascade deleted.

        Dependents deleted on their own before the order stay deleted.

        Returns:
            The restored order, or None when it is missing or active
        """
        propagator = self.lifecycle.propagator or CascadePropagator(BAKERY_CASCADE_GRAPH)

        with transaction(self.session):
            order = self.find_by_id(order_id, scope=Scope.WITH_DELETED)
            if order is None or not order.is_deleted:
                return None
            deleted_at = order.deleted_at
            self.lifecycle.restore(order)
            restored = propagator.restore_dependents(order, self.lifecycle, deleted_at)

        logger.debug("Restored order %s with %d dependents", order_id, len(restored))
        return order


class OrderItemRepository(BakeryRepository):
    model = OrderItem

    def find_by_order_id(
        self, order_id: str, scope: ScopeLike = Scope.DEFAULT
    ) -> List[OrderItem]:
        return self.find_all(scope=scope, order_id=order_id)


class PaymentRepository(BakeryRepository):
    model = Payment

    def find_by_order_id(
        self, order_id: str, scope: ScopeLike = Scope.DEFAULT
    ) -> Optional[Payment]:
        payments = self.find_all(scope=scope, order_id=order_id)
        return payments[0] if payments else None


class BrandRepository(BakeryRepository):
    model = Brand


class StockItemRepository(BakeryRepository):
    model = StockItem


class StockItemBrandRepository(BakeryRepository):
    model = StockItemBrand

    def find_by_stock_item_id(
        self, stock_item_id: str, scope: ScopeLike = Scope.DEFAULT
    ) -> List[StockItemBrand]:
        return self.find_all(scope=scope, stock_item_id=stock_item_id)


class ProductStockItemRepository(BakeryRepository):
    model = ProductStockItem

    def find_by_product_id(
        self, product_id: str, scope: ScopeLike = Scope.DEFAULT
    ) -> List[ProductStockItem]:
        return self.find_all(scope=scope, product_id=product_id)


REPOSITORY_REGISTRY: Dict[str, Type[BakeryRepository]] = {
    "product": ProductRepository,
    "order": OrderRepository,
    "order-item": OrderItemRepository,
    "payment": PaymentRepository,
    "brand": BrandRepository,
    "stock-item": StockItemRepository,
    "stock-item-brand": StockItemBrandRepository,
    "product-stock-item": ProductStockItemRepository,
}


def create_service(
    session: Session, config: Optional[BakeryConfig] = None
) -> SoftDeleteService:
    """Soft delete service over every bakery repository."""
    config = config or get_config()
    return SoftDeleteService(
        session,
        REPOSITORY_REGISTRY,
        lifecycle=build_lifecycle(session, config),
        config=config,
    )
