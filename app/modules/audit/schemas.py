"""Audit journal schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field


class AuditEntryRead(BaseModel):
    """One lifecycle transition as recorded in the journal."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    action: str
    entity_type: str
    entity_id: str | None
    actor_id: UUID | None
    payload: dict[str, Any]
    occurred_at: datetime = Field(validation_alias="created_at")

    @computed_field
    @property
    def by_system(self) -> bool:
        """True for entries written by the completion sweep rather than a user."""
        return self.actor_id is None
