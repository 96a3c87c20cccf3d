"""Audit event schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from aaprp.models.audit_event import ActorType


class AuditEventRead(BaseModel):
    """Schema for reading audit event data."""

    id: str
    actor_type: ActorType
    actor_id: str | None
    actor_email: str | None
    action: str
    action_category: str | None
    entity_type: str
    entity_id: str | None
    from_status: str | None
    to_status: str | None
    metadata: dict[str, Any] | None = Field(None, validation_alias="event_metadata")
    description: str | None
    request_id: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuditEventFilter(BaseModel):
    """Filter parameters for querying audit events."""

    entity_id: str | None = None
    entity_type: str | None = None
    actor_id: str | None = None
    action: str | None = None
    action_category: str | None = None
    limit: int = Field(default=100, le=500)
    offset: int = Field(default=0, ge=0)
