"""Orders, their line items and payments."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base
from ..soft_delete.mixins import SoftDeleteMixin
from .base import IdMixin, TimestampMixin, enum_type
from .enums import (
    BusinessModel,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
)

if TYPE_CHECKING:
    from .products import Product


class Order(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    """
    Customer order.

    Soft deleting an order cascades to its items and payment; physically
    removing it leaves that to the ON DELETE CASCADE foreign keys.
    """

    __tablename__ = "orders"
    __active_unique__ = (("order_number",),)

    order_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    order_type: Mapped[OrderType] = mapped_column(
        enum_type(OrderType), nullable=False, default=OrderType.TEMPORARY
    )
    business_model: Mapped[BusinessModel] = mapped_column(
        enum_type(BusinessModel), nullable=False
    )
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    status: Mapped[OrderStatus] = mapped_column(
        enum_type(OrderStatus), nullable=False, default=OrderStatus.DRAFT
    )
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Order {self.order_number!r} {self.status}>"


class OrderItem(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "order_items"
    __active_unique__ = (("order_id", "product_id"),)

    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    order: Mapped["Order"] = relationship()
    product: Mapped["Product"] = relationship()


class Payment(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Payment for an order, at most one active per order."""

    __tablename__ = "payments"
    __active_unique__ = (("order_id",),)

    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(enum_type(PaymentMethod), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        enum_type(PaymentStatus), nullable=False, default=PaymentStatus.PENDING
    )
    transaction_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    order: Mapped["Order"] = relationship()
