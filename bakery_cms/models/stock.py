"""Stock items, brands, recipe lines and stock movements."""

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base
from ..soft_delete.mixins import SoftDeleteMixin
from .base import IdMixin, TimestampMixin, enum_type
from .enums import MovementType, StockItemStatus

if TYPE_CHECKING:
    from .products import Product


class Brand(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "brands"
    __active_unique__ = (("name",),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class StockItem(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    """
    Raw material kept in stock.

    ``status`` is derived from the quantity and reorder threshold on every
    insert and update.
    """

    __tablename__ = "stock_items"
    __active_unique__ = (("name",),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit_of_measure: Mapped[str] = mapped_column(String(50), nullable=False)
    current_quantity: Mapped[Decimal] = mapped_column(
        Numeric(10, 3), nullable=False, default=Decimal("0")
    )
    reorder_threshold: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 3), nullable=True
    )
    status: Mapped[StockItemStatus] = mapped_column(
        enum_type(StockItemStatus), nullable=False, default=StockItemStatus.AVAILABLE
    )

    def compute_status(self) -> StockItemStatus:
        quantity = self.current_quantity or Decimal("0")
        if quantity == 0:
            return StockItemStatus.OUT_OF_STOCK
        if self.reorder_threshold is not None and quantity <= self.reorder_threshold:
            return StockItemStatus.LOW_STOCK
        return StockItemStatus.AVAILABLE


def _refresh_stock_status(mapper: Any, connection: Any, target: StockItem) -> None:
    target.status = target.compute_status()


event.listen(StockItem, "before_insert", _refresh_stock_status)
event.listen(StockItem, "before_update", _refresh_stock_status)


class StockItemBrand(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Price of a stock item from one brand."""

    __tablename__ = "stock_item_brands"
    __active_unique__ = (("stock_item_id", "brand_id"),)

    stock_item_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("stock_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    brand_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("brands.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    price_before_tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    price_after_tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    is_preferred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    stock_item: Mapped["StockItem"] = relationship()
    brand: Mapped["Brand"] = relationship()


class ProductStockItem(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Recipe line: how much of a stock item one unit of a product uses."""

    __tablename__ = "product_stock_items"
    __active_unique__ = (("product_id", "stock_item_id"),)

    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stock_item_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("stock_items.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    preferred_brand_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("brands.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    product: Mapped["Product"] = relationship()
    stock_item: Mapped["StockItem"] = relationship()
    preferred_brand: Mapped[Optional["Brand"]] = relationship()


class StockMovement(IdMixin, TimestampMixin, Base):
    """Append-only record of a stock quantity change. Never soft deleted."""

    __tablename__ = "stock_movements"

    stock_item_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("stock_items.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    type: Mapped[MovementType] = mapped_column(enum_type(MovementType), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    previous_quantity: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    new_quantity: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    stock_item: Mapped["StockItem"] = relationship()
