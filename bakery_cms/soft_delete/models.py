"""
Result and report models for soft delete operations.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class EntityRef(BaseModel):
    """Type and id of an affected row."""

    type: str = Field(..., description="Entity class name")
    id: str = Field(..., description="Entity primary key")


class DeleteResult(BaseModel):
    """Outcome of a soft delete issued through the service."""

    success: bool = Field(..., description="Whether an active row was deleted")
    entity_type: str = Field(..., description="Registered entity type")
    entity_id: str = Field(..., description="ID of the requested row")
    records_affected: int = Field(
        0, description="Rows moved into the deleted state, dependents included", ge=0
    )
    deleted_at: Optional[datetime] = Field(None, description="Deletion timestamp")
    cascade_deleted: List[EntityRef] = Field(
        default_factory=list, description="Dependents deleted by the cascade"
    )


class RestoreResult(BaseModel):
    """Outcome of a restore issued through the service."""

    success: bool = Field(..., description="Whether a deleted row was restored")
    entity_type: str = Field(..., description="Registered entity type")
    entity_id: str = Field(..., description="ID of the requested row")
    records_restored: int = Field(0, description="Rows restored, dependents included", ge=0)
    restored_dependents: List[EntityRef] = Field(
        default_factory=list, description="Dependents restored alongside"
    )


class EntityCounts(BaseModel):
    """Active and deleted row counts for one entity type."""

    active: int = Field(0, ge=0)
    deleted: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return self.active + self.deleted


class SoftDeleteReport(BaseModel):
    """Per-entity soft delete statistics."""

    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the report was generated",
    )
    by_type: Dict[str, EntityCounts] = Field(
        default_factory=dict, description="Counts by entity type"
    )
    total_active: int = Field(0, description="Active rows across all types")
    total_deleted: int = Field(0, description="Deleted rows across all types")

    def add_counts(self, entity_type: str, active: int, deleted: int) -> None:
        """Add one entity type to the report statistics."""
        counts = self.by_type.setdefault(entity_type, EntityCounts())
        counts.active += active
        counts.deleted += deleted
        self.total_active += active
        self.total_deleted += deleted
