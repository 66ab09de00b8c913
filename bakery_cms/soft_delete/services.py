"""
Service layer for soft delete operations.

Resolves entity types by name through a registry of repositories and wraps
delete, restore and purge into result records for operators.
"""

import logging
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.orm import Session

from ..config import BakeryConfig, get_config
from ..database import transaction
from .exceptions import RestoreNotAllowed, UnknownEntityType
from .lifecycle import LifecycleOperations
from .models import DeleteResult, EntityRef, RestoreResult, SoftDeleteReport
from .repository import SoftDeleteRepository
from .scopes import Scope, ScopeLike

logger = logging.getLogger(__name__)


def _ref(entity: Any) -> EntityRef:
    return EntityRef(type=type(entity).__name__, id=str(entity.id))


class SoftDeleteService:
    """
    Soft delete operations addressed by entity type name.

    Example:
        >>> service = SoftDeleteService(session, {"order": OrderRepository})
        >>> service.delete_entity("order", order_id).records_affected
        4
    """

    def __init__(
        self,
        session: Session,
        registry: Optional[Dict[str, Type[SoftDeleteRepository]]] = None,
        lifecycle: Optional[LifecycleOperations] = None,
        config: Optional[BakeryConfig] = None,
    ):
        """
        Initialize the soft delete service.

        Args:
            session: SQLAlchemy database session
            registry: Entity type name -> repository class
            lifecycle: Shared lifecycle operations, usually carrying a
                cascade propagator
            config: Configuration; defaults to the global configuration
        """
        self.session = session
        self.config = config or get_config()
        self.lifecycle = lifecycle or LifecycleOperations(
            session, enforce_uniqueness=self.config.enforce_active_uniqueness
        )
        self._registry: Dict[str, Type[SoftDeleteRepository]] = {}

        for entity_type, repository_class in (registry or {}).items():
            self.register_entity(entity_type, repository_class)

    def register_entity(
        self, entity_type: str, repository_class: Type[SoftDeleteRepository]
    ) -> None:
        """Register a repository class under an entity type name."""
        self._registry[entity_type] = repository_class

    @property
    def entity_types(self) -> List[str]:
        return sorted(self._registry)

    def repository_for(self, entity_type: str) -> SoftDeleteRepository:
        """
        Build the repository registered for ``entity_type``.

        Raises:
            UnknownEntityType: If nothing is registered under that name
        """
        try:
            repository_class = self._registry[entity_type]
        except KeyError:
            raise UnknownEntityType(entity_type) from None
        return repository_class(self.session, lifecycle=self.lifecycle)

    def _get_entity_class(self, class_name: str) -> Optional[Type[Any]]:
        for repository_class in self._registry.values():
            if repository_class.model.__name__ == class_name:
                return repository_class.model
        return None

    def delete_entity(self, entity_type: str, entity_id: str) -> DeleteResult:
        """
        Soft delete a row and its cascade dependents.

        Returns:
            Result with ``success=False`` when no active row has ``entity_id``
        """
        repository = self.repository_for(entity_type)
        affected: List[Any] = []

        def record(entity: Any, lifecycle: Any) -> None:
            affected.append(entity)

        self.lifecycle.on_soft_destroy.insert(0, record)
        try:
            deleted = repository.delete(entity_id)
        finally:
            self.lifecycle.on_soft_destroy.remove(record)

        if not deleted:
            logger.info("No active %s %s to delete", entity_type, entity_id)
            return DeleteResult(success=False, entity_type=entity_type, entity_id=entity_id)

        primary = affected[0] if affected else None
        result = DeleteResult(
            success=True,
            entity_type=entity_type,
            entity_id=entity_id,
            records_affected=len(affected),
            deleted_at=primary.deleted_at if primary is not None else None,
            cascade_deleted=[_ref(entity) for entity in affected[1:]],
        )

        logger.info(
            "Deleted %s %s (%d records affected)",
            entity_type,
            entity_id,
            result.records_affected,
        )
        return result

    def restore_entity(
        self, entity_type: str, entity_id: str, with_dependents: bool = False
    ) -> RestoreResult:
        """
        Restore a deleted row, optionally with its cascade dependents.

        Raises:
            RestoreNotAllowed: If the row was cascade deleted and its parent
                is still deleted
        """
        repository = self.repository_for(entity_type)
        result = RestoreResult(success=False, entity_type=entity_type, entity_id=entity_id)

        with transaction(self.session):
            entity = repository.find_by_id(entity_id, scope=Scope.WITH_DELETED)
            if entity is None or not entity.is_deleted:
                logger.info("No deleted %s %s to restore", entity_type, entity_id)
                return result

            self._check_can_restore(entity)
            deleted_at = entity.deleted_at
            self.lifecycle.restore(entity)

            dependents: List[Any] = []
            propagator = self.lifecycle.propagator
            if with_dependents and propagator is not None:
                dependents = propagator.restore_dependents(
                    entity, self.lifecycle, deleted_at
                )

        result.success = True
        result.records_restored = 1 + len(dependents)
        result.restored_dependents = [_ref(row) for row in dependents]

        logger.info(
            "Restored %s %s (%d records restored)",
            entity_type,
            entity_id,
            result.records_restored,
        )
        return result

    def _check_can_restore(self, entity: Any) -> None:
        """Refuse to restore a cascade-deleted row while its parent is deleted."""
        parent_type = entity.cascade_deleted_from_type
        parent_id = entity.cascade_deleted_from_id
        if not parent_type or not parent_id:
            return

        parent_class = self._get_entity_class(parent_type)
        if parent_class is None:
            return

        parent = self.session.get(parent_class, parent_id)
        if parent is not None and parent.is_deleted:
            raise RestoreNotAllowed(
                str(entity.id),
                f"parent {parent_type} {parent_id} must be restored first",
            )

    def purge_entity(self, entity_type: str, entity_id: str) -> bool:
        """Physically remove a row; dependents follow the ON DELETE rules."""
        purged = self.repository_for(entity_type).force_delete(entity_id)
        if purged:
            logger.info("Purged %s %s", entity_type, entity_id)
        return purged

    def list_entities(self, entity_type: str, scope: ScopeLike = Scope.DEFAULT) -> List[Any]:
        return self.repository_for(entity_type).find_all(scope=scope)

    def generate_report(self, entity_types: Optional[List[str]] = None) -> SoftDeleteReport:
        """
        Count active and deleted rows per entity type.

        Args:
            entity_types: Types to include; defaults to every registered type
        """
        report = SoftDeleteReport()
        for entity_type in entity_types or self.entity_types:
            repository = self.repository_for(entity_type)
            report.add_counts(
                entity_type,
                active=repository.count(scope=Scope.DEFAULT),
                deleted=repository.count(scope=Scope.ONLY_DELETED),
            )
        return report
