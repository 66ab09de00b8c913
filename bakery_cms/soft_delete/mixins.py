"""
SQLAlchemy mixins for soft delete functionality.

A soft-deletable table carries a nullable ``deleted_at`` timestamp. A null
value means the row is active; any other value hides it from default queries.
Two provenance columns remember which parent cascade removed a dependent row;
the rows of one cascade share the parent's ``deleted_at``.
"""

from datetime import datetime
from typing import Any, Dict, Optional, Type

from sqlalchemy import DateTime, String, event
from sqlalchemy.orm import Mapped, Query, Session, mapped_column, object_session

from ..config import get_config
from .exceptions import HardDeleteNotAllowed
from .scopes import Scope, ScopeLike, scoped_query

# Session.info key set while LifecycleOperations.force_destroy runs
FORCE_DELETE_KEY = "bakery_cms.force_delete"

SOFT_DELETE_FIELDS = (
    "deleted_at",
    "cascade_deleted_from_type",
    "cascade_deleted_from_id",
)


class SoftDeleteMixin:
    """
    Mixin to add soft delete columns to SQLAlchemy models.

    Provides:
    - ``deleted_at`` nullable timestamp (indexed)
    - Cascade provenance fields
    - Scoped query helpers

    Subclasses may declare business keys that must be unique among active
    rows:

        class Brand(SoftDeleteMixin, Base):
            __tablename__ = "brands"
            __active_unique__ = (("name",),)
    """

    __active_unique__ = ()  # tuple of field-name tuples

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    cascade_deleted_from_type: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True
    )
    cascade_deleted_from_id: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def mark_deleted(self, when: datetime, cascade_from: Optional[Any] = None) -> None:
        """
        Set the deletion marker without touching the session.

        Args:
            when: Deletion timestamp
            cascade_from: Parent entity when deleted as part of a cascade
        """
        self.deleted_at = when
        if cascade_from is not None:
            self.cascade_deleted_from_type = type(cascade_from).__name__
            self.cascade_deleted_from_id = str(cascade_from.id)
        else:
            self.cascade_deleted_from_type = None
            self.cascade_deleted_from_id = None

    def clear_deleted(self) -> None:
        """Clear the deletion marker and its provenance."""
        self.deleted_at = None
        self.cascade_deleted_from_type = None
        self.cascade_deleted_from_id = None

    def was_cascade_deleted_by(self, parent: Any) -> bool:
        """Whether this row was deleted by ``parent``'s cascade."""
        return (
            self.deleted_at is not None
            and self.cascade_deleted_from_type == type(parent).__name__
            and self.cascade_deleted_from_id == str(parent.id)
        )

    @classmethod
    def scoped(cls, session: Session, scope: ScopeLike = Scope.DEFAULT) -> Query[Any]:
        """Return a query over this model restricted to ``scope``."""
        return scoped_query(session, cls, scope=scope)

    @classmethod
    def query_active(cls, session: Session) -> Query[Any]:
        """Return query for active (non-deleted) records only."""
        return cls.scoped(session, Scope.DEFAULT)

    @classmethod
    def query_deleted(cls, session: Session) -> Query[Any]:
        """Return query for deleted records only."""
        return cls.scoped(session, Scope.ONLY_DELETED)

    @classmethod
    def query_all(cls, session: Session) -> Query[Any]:
        """Return query for all records including deleted."""
        return cls.scoped(session, Scope.WITH_DELETED)

    def to_dict(self, include_deleted_fields: bool = True) -> Dict[str, Any]:
        """
        Convert model to dictionary representation.

        Args:
            include_deleted_fields: Whether to include soft delete fields

        Returns:
            Dictionary representation of the model
        """
        result: Dict[str, Any] = {}

        table = getattr(self, "__table__", None)
        if table is None:
            return result

        for column in table.columns:
            value = getattr(self, column.key, None)
            if isinstance(value, datetime):
                value = value.isoformat()
            result[column.key] = value

        if not include_deleted_fields:
            for field in SOFT_DELETE_FIELDS:
                result.pop(field, None)

        return result


def guard_hard_delete(mapper: Any, connection: Any, target: Any) -> None:
    """
    Refuse physical deletes of active rows.

    Connected to SQLAlchemy's before_delete event. A row may be physically
    removed once it is soft deleted, or at any time inside the force path.
    """
    if not isinstance(target, SoftDeleteMixin) or target.deleted_at is not None:
        return

    session = object_session(target)
    if session is not None and session.info.get(FORCE_DELETE_KEY):
        return

    if get_config().allow_hard_delete_of_active:
        return

    raise HardDeleteNotAllowed(type(target).__name__, str(getattr(target, "id", "unknown")))


def register_soft_delete_listeners(base_class: Type[Any]) -> None:
    """
    Register SQLAlchemy event listeners for soft delete functionality.

    Args:
        base_class: The declarative base class
    """
    for mapper in base_class.registry.mappers:
        model = mapper.class_
        if issubclass(model, SoftDeleteMixin) and not event.contains(
            model, "before_delete", guard_hard_delete
        ):
            event.listen(model, "before_delete", guard_hard_delete)
