"""
Repository facade over soft-deletable models.

Callers see ``delete(id) -> bool`` and ``restore(id) -> entity | None``;
scopes, cascades and transactions stay behind this interface.
"""

import logging
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from ..database import transaction
from .lifecycle import LifecycleOperations
from .mixins import SOFT_DELETE_FIELDS
from .scopes import Scope, ScopeLike, scoped_query
from .uniqueness import ensure_unique_among_active

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class SoftDeleteRepository(Generic[ModelT]):
    """
    CRUD plus soft delete lifecycle for one model.

    Subclasses set ``model``; it can also be passed to the constructor.
    """

    model: Type[ModelT]

    def __init__(
        self,
        session: Session,
        model: Optional[Type[ModelT]] = None,
        lifecycle: Optional[LifecycleOperations] = None,
    ):
        if model is not None:
            self.model = model
        if getattr(self, "model", None) is None:
            raise ValueError(f"{type(self).__name__} has no model configured")

        self.session = session
        self.lifecycle = lifecycle or LifecycleOperations(session)

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def find_by_id(self, entity_id: Any, scope: ScopeLike = Scope.DEFAULT) -> Optional[ModelT]:
        return scoped_query(self.session, self.model, scope=scope, id=entity_id).first()

    def find_all(
        self, *criteria: Any, scope: ScopeLike = Scope.DEFAULT, **filters: Any
    ) -> List[ModelT]:
        return scoped_query(
            self.session, self.model, *criteria, scope=scope, **filters
        ).all()

    def count(self, *criteria: Any, scope: ScopeLike = Scope.DEFAULT, **filters: Any) -> int:
        return scoped_query(
            self.session, self.model, *criteria, scope=scope, **filters
        ).count()

    def create(self, **attributes: Any) -> ModelT:
        """
        Insert a new active row.

        Raises:
            ActiveUniqueViolation: If an active row holds one of its business keys
        """
        entity = self.model(**attributes)
        with transaction(self.session):
            if self.lifecycle.enforce_uniqueness:
                ensure_unique_among_active(self.session, entity)
            self.session.add(entity)
            self.session.flush()
        return entity

    def update(self, entity_id: Any, **fields: Any) -> Optional[ModelT]:
        """
        Update an active row.

        Deletion markers are not fields; use ``delete`` and ``restore``.

        Returns:
            The updated entity, or None when no active row has ``entity_id``

        Raises:
            ValueError: If ``fields`` names a soft delete column
        """
        protected = sorted(set(fields) & set(SOFT_DELETE_FIELDS))
        if protected:
            raise ValueError(
                f"Cannot update {', '.join(protected)} on {self.entity_name}; "
                "use delete() or restore()"
            )

        with transaction(self.session):
            entity = self.find_by_id(entity_id)
            if entity is None:
                return None
            for name, value in fields.items():
                setattr(entity, name, value)
            if hasattr(entity, "updated_at"):
                entity.updated_at = self.lifecycle.clock()
            if self.lifecycle.enforce_uniqueness:
                ensure_unique_among_active(self.session, entity, exclude_id=entity.id)
            self.session.flush()
        return entity

    def delete(self, entity_id: Any) -> bool:
        """
        Soft delete an active row together with its cascade dependents.

        Returns:
            False when no active row has ``entity_id``
        """
        with transaction(self.session):
            entity = self.find_by_id(entity_id)
            if entity is None:
                return False
            self.lifecycle.soft_destroy(entity)
        return True

    def restore(self, entity_id: Any) -> Optional[ModelT]:
        """
        Restore a deleted row.

        Dependents deleted by its cascade stay deleted.

        Returns:
            The restored entity, or None when the row is missing or active
        """
        with transaction(self.session):
            entity = self.find_by_id(entity_id, scope=Scope.WITH_DELETED)
            if entity is None:
                return None
            return self.lifecycle.restore(entity)

    def force_delete(self, entity_id: Any) -> bool:
        """
        Physically remove a row in either state.

        Returns:
            False when no row has ``entity_id``
        """
        with transaction(self.session):
            entity = self.find_by_id(entity_id, scope=Scope.WITH_DELETED)
            if entity is None:
                return False
            self.lifecycle.force_destroy(entity)
        return True
