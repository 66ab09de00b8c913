"""Exceptions for soft delete operations."""

from typing import Any, Mapping, Optional, Sequence


class SoftDeleteError(Exception):
    """Base exception for soft delete operations."""

    def __init__(self, message: str, entity_id: Optional[str] = None):
        self.entity_id = entity_id
        super().__init__(message)


class InvalidScopeError(SoftDeleteError):
    """Raised when a query asks for a scope outside the closed set."""

    def __init__(self, scope: Any):
        self.scope = scope
        super().__init__(
            f"Unknown scope {scope!r}; expected one of "
            "'default', 'withDeleted', 'onlyDeleted'"
        )


class CascadeCycleError(SoftDeleteError):
    """Raised when the cascade graph loops back onto itself."""

    def __init__(self, path: Sequence[str]):
        self.path = list(path)
        super().__init__(f"Cascade cycle detected: {' -> '.join(self.path)}")


class ActiveUniqueViolation(SoftDeleteError):
    """Raised when a write would leave two active rows with one business key."""

    def __init__(
        self,
        entity_type: str,
        values: Mapping[str, Any],
        conflicting_id: Optional[str] = None,
    ):
        self.entity_type = entity_type
        self.values = dict(values)
        self.conflicting_id = conflicting_id
        key = ", ".join(f"{name}={value!r}" for name, value in self.values.items())
        super().__init__(
            f"An active {entity_type} already exists with {key}",
            entity_id=conflicting_id,
        )


class HardDeleteNotAllowed(SoftDeleteError):
    """Raised when an active row is physically deleted outside the force path."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        super().__init__(
            f"Hard delete attempted on active {entity_type} {entity_id}. "
            "Soft delete it first or use force_destroy().",
            entity_id=entity_id,
        )


class RestoreNotAllowed(SoftDeleteError):
    """Raised when a cascade-deleted row is restored before its parent."""

    def __init__(self, entity_id: str, reason: str):
        super().__init__(
            f"Entity {entity_id} cannot be restored: {reason}",
            entity_id=entity_id,
        )


class UnknownEntityType(SoftDeleteError):
    """Raised when the service has no repository registered for a type."""

    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        super().__init__(f"Entity type {entity_type} not found")
