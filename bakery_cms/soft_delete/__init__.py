"""
Soft Delete Module - timestamp-based logical deletion.

Provides the mixin, query scopes, lifecycle operations, cascade propagation
and repository facade used by every soft-deletable bakery table.
"""

from .cascade import CascadeGraph, CascadePropagator, CascadeRule
from .exceptions import (
    ActiveUniqueViolation,
    CascadeCycleError,
    HardDeleteNotAllowed,
    InvalidScopeError,
    RestoreNotAllowed,
    SoftDeleteError,
    UnknownEntityType,
)
from .lifecycle import LifecycleOperations, utcnow
from .mixins import SoftDeleteMixin, register_soft_delete_listeners
from .models import DeleteResult, RestoreResult, SoftDeleteReport
from .repository import SoftDeleteRepository
from .scopes import Scope, apply_scope, resolve_scope, scoped_query
from .services import SoftDeleteService
from .uniqueness import ensure_unique_among_active

__all__ = [
    # Mixins
    "SoftDeleteMixin",
    "register_soft_delete_listeners",
    # Scopes
    "Scope",
    "resolve_scope",
    "apply_scope",
    "scoped_query",
    # Lifecycle
    "LifecycleOperations",
    "utcnow",
    "ensure_unique_among_active",
    # Cascade
    "CascadeRule",
    "CascadeGraph",
    "CascadePropagator",
    # Repository and service
    "SoftDeleteRepository",
    "SoftDeleteService",
    # Models
    "DeleteResult",
    "RestoreResult",
    "SoftDeleteReport",
    # Exceptions
    "SoftDeleteError",
    "InvalidScopeError",
    "CascadeCycleError",
    "ActiveUniqueViolation",
    "HardDeleteNotAllowed",
    "RestoreNotAllowed",
    "UnknownEntityType",
]
