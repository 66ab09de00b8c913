"""Product catalogue table."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base
from ..soft_delete.mixins import SoftDeleteMixin
from .base import IdMixin, TimestampMixin, enum_type
from .enums import BusinessType, ProductStatus


class Product(IdMixin, TimestampMixin, SoftDeleteMixin, Base):
    """A sellable bakery product. Deleting it never touches orders."""

    __tablename__ = "products"
    __active_unique__ = (("name",),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    business_type: Mapped[BusinessType] = mapped_column(
        enum_type(BusinessType), nullable=False
    )
    status: Mapped[ProductStatus] = mapped_column(
        enum_type(ProductStatus), nullable=False, default=ProductStatus.AVAILABLE
    )
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Product {self.name!r}>"
