"""
Uniqueness of business keys among active rows.

Deleted rows may share a business key freely; at most one active row may
hold it. The check runs in the caller's transaction right before the write.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from .exceptions import ActiveUniqueViolation
from .scopes import Scope, scoped_query

logger = logging.getLogger(__name__)


def ensure_unique_among_active(
    session: Session, entity: Any, exclude_id: Optional[Any] = None
) -> None:
    """
    Check every ``__active_unique__`` key of ``entity`` against active rows.

    Keys with a None component are skipped.

    Args:
        session: SQLAlchemy session
        entity: Instance about to be inserted, updated or restored
        exclude_id: Primary key to ignore (the entity itself)

    Raises:
        ActiveUniqueViolation: If another active row holds one of the keys
    """
    model = type(entity)

    for fields in getattr(model, "__active_unique__", ()):
        values = {name: getattr(entity, name) for name in fields}
        if any(value is None for value in values.values()):
            continue

        criteria = []
        if exclude_id is not None:
            criteria.append(model.id != exclude_id)

        conflict = scoped_query(
            session, model, *criteria, scope=Scope.DEFAULT, **values
        ).first()

        if conflict is not None:
            logger.debug(
                "Active %s %s already holds %s", model.__name__, conflict.id, values
            )
            raise ActiveUniqueViolation(model.__name__, values, str(conflict.id))
