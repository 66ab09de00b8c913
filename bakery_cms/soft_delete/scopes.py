"""
Query scopes for soft-deletable models.

Every soft-deletable model can be read through exactly three views:

- ``default``: active rows only (``deleted_at IS NULL``)
- ``withDeleted``: every row, no predicate on ``deleted_at``
- ``onlyDeleted``: deleted rows only (``deleted_at IS NOT NULL``)

Caller criteria are ANDed with the scope predicate. Building a scoped query
has no side effects.
"""

from enum import Enum
from typing import Any, Optional, Type, Union

from sqlalchemy.orm import Query, Session
from sqlalchemy.sql.elements import ColumnElement

from .exceptions import InvalidScopeError


class Scope(str, Enum):
    """Closed set of scope names."""

    DEFAULT = "default"
    WITH_DELETED = "withDeleted"
    ONLY_DELETED = "onlyDeleted"


ScopeLike = Union[Scope, str]


def resolve_scope(scope: ScopeLike) -> Scope:
    """
    Turn a scope name into a Scope member.

    Args:
        scope: Scope member or one of its string values

    Returns:
        Matching Scope

    Raises:
        InvalidScopeError: If the name is not part of the closed set
    """
    if isinstance(scope, Scope):
        return scope
    try:
        return Scope(scope)
    except ValueError:
        raise InvalidScopeError(scope) from None


def scope_criterion(model: Type[Any], scope: ScopeLike) -> Optional[ColumnElement[bool]]:
    """Return the predicate a scope adds for ``model``, or None for withDeleted."""
    resolved = resolve_scope(scope)
    if resolved is Scope.DEFAULT:
        return model.deleted_at.is_(None)
    if resolved is Scope.ONLY_DELETED:
        return model.deleted_at.is_not(None)
    return None


def apply_scope(query: Query[Any], model: Type[Any], scope: ScopeLike) -> Query[Any]:
    """AND a scope predicate onto an existing query."""
    criterion = scope_criterion(model, scope)
    if criterion is None:
        return query
    return query.filter(criterion)


def scoped_query(
    session: Session,
    model: Type[Any],
    *criteria: Any,
    scope: ScopeLike = Scope.DEFAULT,
    **filters: Any,
) -> Query[Any]:
    """
    Build a query over ``model`` restricted to ``scope``.

    Args:
        session: SQLAlchemy session
        model: Soft-deletable mapped class
        *criteria: Additional SQL expressions
        scope: Scope name, defaults to the active-only view
        **filters: Equality filters applied with ``filter_by``

    Returns:
        Query combining the scope predicate with the caller's criteria

    Raises:
        InvalidScopeError: If ``scope`` is not a known scope name
    """
    query = apply_scope(session.query(model), model, scope)
    if criteria:
        query = query.filter(*criteria)
    if filters:
        query = query.filter_by(**filters)
    return query
