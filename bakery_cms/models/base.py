"""Column helpers shared by the bakery tables."""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import Type

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from ..soft_delete.lifecycle import utcnow


def new_id() -> str:
    return str(uuid.uuid4())


def enum_type(enum_class: Type[PyEnum]) -> Enum:
    """Store an enum by its value rather than its member name."""
    return Enum(
        enum_class,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        validate_strings=True,
        length=20,
    )


class IdMixin:
    """UUID string primary key."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """
    Creation and modification timestamps.

    ``updated_at`` moves on content updates only; soft delete and restore
    leave it alone.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
