"""
Cascade propagation of soft deletes.

The cascade graph is an explicit adjacency map from a parent model to the
foreign keys that point at it:

    graph = CascadeGraph.from_mapping({Order: [OrderItem.order_id, Payment.order_id]})

Soft deleting a parent soft deletes every active dependent, recursively.
Every row removed by one cascade carries the parent's ``deleted_at``, so the
rows of one cascade can be told apart from those of an earlier cascade of the
same parent. Restoring is never automatic; ``restore_dependents`` is called
explicitly and only touches rows deleted by that parent's cascade.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type

from sqlalchemy.orm import Session

from .exceptions import CascadeCycleError
from .scopes import Scope, scoped_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CascadeRule:
    """A dependent model and the name of its foreign key to the parent."""

    dependent: Type[Any]
    foreign_key: str

    def criterion(self, parent: Any) -> Any:
        return getattr(self.dependent, self.foreign_key) == parent.id


class CascadeGraph:
    """Adjacency map parent model -> cascade rules, kept acyclic."""

    def __init__(self, rules: Optional[Mapping[Type[Any], Iterable[CascadeRule]]] = None):
        self._rules: Dict[Type[Any], List[CascadeRule]] = {}
        for parent, parent_rules in (rules or {}).items():
            for rule in parent_rules:
                self.add_rule(parent, rule)

    @classmethod
    def from_mapping(cls, mapping: Mapping[Type[Any], Sequence[Any]]) -> "CascadeGraph":
        """
        Build a graph from mapped foreign key attributes.

        Args:
            mapping: Parent model -> list of attributes such as ``OrderItem.order_id``
        """
        graph = cls()
        for parent, attributes in mapping.items():
            for attribute in attributes:
                graph.add_rule(parent, CascadeRule(attribute.class_, attribute.key))
        return graph

    def add_rule(self, parent: Type[Any], rule: CascadeRule) -> None:
        """
        Add an edge parent -> dependent.

        Raises:
            ValueError: If the dependent has no such attribute
            CascadeCycleError: If the edge would close a cycle
        """
        if not hasattr(rule.dependent, rule.foreign_key):
            raise ValueError(
                f"{rule.dependent.__name__} has no attribute {rule.foreign_key!r}"
            )

        path = self._find_path(rule.dependent, parent)
        if path is not None:
            raise CascadeCycleError([parent.__name__] + [m.__name__ for m in path])

        self._rules.setdefault(parent, []).append(rule)

    def _find_path(self, start: Type[Any], target: Type[Any]) -> Optional[List[Type[Any]]]:
        """Depth-first search for a path start -> ... -> target."""
        stack = [(start, [start])]
        seen = set()
        while stack:
            node, path = stack.pop()
            if node is target:
                return path
            if node in seen:
                continue
            seen.add(node)
            for rule in self._rules.get(node, ()):
                stack.append((rule.dependent, path + [rule.dependent]))
        return None

    def dependents_of(self, model: Type[Any]) -> List[CascadeRule]:
        return list(self._rules.get(model, ()))

    def validate(self) -> None:
        """Re-check the whole graph for cycles."""
        for parent, rules in self._rules.items():
            for rule in rules:
                path = self._find_path(rule.dependent, parent)
                if path is not None:
                    raise CascadeCycleError(
                        [parent.__name__] + [m.__name__ for m in path]
                    )

    def __contains__(self, model: Type[Any]) -> bool:
        return model in self._rules


class CascadePropagator:
    """Walks the cascade graph on behalf of LifecycleOperations."""

    def __init__(self, graph: CascadeGraph, enabled: bool = True):
        self.graph = graph
        self.enabled = enabled
        self._path: List[str] = []

    def attach(self, lifecycle: Any) -> None:
        """Register as a soft destroy hook on ``lifecycle``."""
        if self.cascade_destroy not in lifecycle.on_soft_destroy:
            lifecycle.on_soft_destroy.append(self.cascade_destroy)

    def cascade_destroy(self, parent: Any, lifecycle: Any) -> List[Any]:
        """
        Soft delete every active dependent of ``parent``.

        Each dependent records ``parent`` as its cascade origin, takes the
        parent's ``deleted_at`` and in turn cascades to its own dependents
        through the lifecycle hook.

        Returns:
            Direct dependents deleted by this call
        """
        if not self.enabled:
            return []

        name = type(parent).__name__
        if name in self._path:
            raise CascadeCycleError(self._path + [name])

        deleted: List[Any] = []
        self._path.append(name)
        try:
            for rule in self.graph.dependents_of(type(parent)):
                rows = scoped_query(
                    lifecycle.session, rule.dependent, rule.criterion(parent)
                ).all()
                for row in rows:
                    lifecycle.soft_destroy(
                        row, cascade_from=parent, when=parent.deleted_at
                    )
                    deleted.append(row)
        finally:
            self._path.pop()

        if deleted:
            logger.debug(
                "Cascaded delete of %s %s to %d dependents",
                name,
                parent.id,
                len(deleted),
            )
        return deleted

    def deleted_dependents(
        self,
        parent: Any,
        session: Session,
        deleted_at: Optional[datetime] = None,
        recursive: bool = False,
    ) -> List[Any]:
        """
        Return the dependents deleted by ``parent``'s cascade.

        Rows deleted independently of the parent, or by an earlier cascade of
        the same parent, are not included.

        Args:
            parent: Parent entity
            session: Session to query
            deleted_at: Timestamp of the cascade; defaults to the parent's
                ``deleted_at``, so pass it when the parent is already restored
            recursive: Also collect the dependents' own cascade rows
        """
        deleted_at = deleted_at or parent.deleted_at
        if deleted_at is None:
            return []

        rows: List[Any] = []
        for rule in self.graph.dependents_of(type(parent)):
            matches = scoped_query(
                session,
                rule.dependent,
                rule.criterion(parent),
                rule.dependent.deleted_at == deleted_at,
                scope=Scope.ONLY_DELETED,
                cascade_deleted_from_type=type(parent).__name__,
                cascade_deleted_from_id=str(parent.id),
            ).all()
            for row in matches:
                rows.append(row)
                if recursive:
                    rows.extend(
                        self.deleted_dependents(row, session, deleted_at, recursive=True)
                    )
        return rows

    def restore_dependents(
        self, parent: Any, lifecycle: Any, deleted_at: Optional[datetime] = None
    ) -> List[Any]:
        """
        Restore the rows deleted by ``parent``'s cascade, recursively.

        ``deleted_at`` identifies the cascade as in ``deleted_dependents``.

        Returns:
            Every restored row
        """
        restored: List[Any] = []
        deleted_at = deleted_at or parent.deleted_at
        for row in self.deleted_dependents(parent, lifecycle.session, deleted_at):
            if lifecycle.restore(row) is not None:
                restored.append(row)
                restored.extend(self.restore_dependents(row, lifecycle, deleted_at))
        return restored
