"""
Lifecycle operations on soft-deletable rows.

    ACTIVE --soft_destroy--> DELETED --restore--> ACTIVE
    ACTIVE | DELETED --force_destroy--> REMOVED

Soft destroy and restore are plain UPDATEs of ``deleted_at``. Force destroy
is the only path that issues a physical DELETE.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from sqlalchemy.orm import Session

from .mixins import FORCE_DELETE_KEY
from .uniqueness import ensure_unique_among_active

logger = logging.getLogger(__name__)

Hook = Callable[[Any, "LifecycleOperations"], None]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleOperations:
    """
    Soft destroy, restore and force destroy over one session.

    Hooks registered in ``on_soft_destroy`` and ``on_restore`` run after the
    entity's own write has been flushed. A cascade propagator attaches itself
    as a soft destroy hook.
    """

    def __init__(
        self,
        session: Session,
        propagator: Optional[Any] = None,
        clock: Callable[[], datetime] = utcnow,
        enforce_uniqueness: bool = True,
    ):
        self.session = session
        self.clock = clock
        self.enforce_uniqueness = enforce_uniqueness
        self.on_soft_destroy: List[Hook] = []
        self.on_restore: List[Hook] = []
        self.propagator = propagator

        if propagator is not None:
            propagator.attach(self)

    def soft_destroy(
        self,
        entity: Any,
        cascade_from: Optional[Any] = None,
        when: Optional[datetime] = None,
    ) -> Any:
        """
        Mark ``entity`` deleted.

        Already-deleted entities are returned unchanged.

        Args:
            entity: Soft-deletable instance
            cascade_from: Parent whose cascade triggered this call
            when: Deletion timestamp; a cascade passes the parent's so every
                row it removes carries the same value

        Returns:
            The entity
        """
        if entity.is_deleted:
            return entity

        entity.mark_deleted(when or self.clock(), cascade_from=cascade_from)
        self.session.flush()
        logger.debug("Soft deleted %s %s", type(entity).__name__, entity.id)

        for hook in self.on_soft_destroy:
            hook(entity, self)

        return entity

    def restore(self, entity: Any) -> Optional[Any]:
        """
        Clear the deletion marker of ``entity``.

        Returns None and writes nothing when the entity is not deleted.

        Raises:
            ActiveUniqueViolation: If an active row now holds its business key
        """
        if not entity.is_deleted:
            return None

        if self.enforce_uniqueness:
            ensure_unique_among_active(self.session, entity, exclude_id=entity.id)

        entity.clear_deleted()
        self.session.flush()
        logger.debug("Restored %s %s", type(entity).__name__, entity.id)

        for hook in self.on_restore:
            hook(entity, self)

        return entity

    def force_destroy(self, entity: Any) -> None:
        """
        Physically remove ``entity``.

        No cascade hooks run; dependents follow the database ON DELETE rules.
        """
        entity_id = entity.id
        self.session.info[FORCE_DELETE_KEY] = True
        try:
            self.session.delete(entity)
            self.session.flush()
        finally:
            self.session.info.pop(FORCE_DELETE_KEY, None)
        logger.debug("Force deleted %s %s", type(entity).__name__, entity_id)
