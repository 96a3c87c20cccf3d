"""Append-only audit trail for assessment lifecycle events."""

from enum import Enum

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from aaprp.db.base import Base, TimestampMixin


class ActorType(str, Enum):
    """Type of actor performing the action."""

    SYSTEM = "system"
    USER = "user"


class AuditEvent(Base, TimestampMixin):
    """Immutable record of something that happened to an assessment.

    There are no update or delete paths for this model.
    """

    __tablename__ = "audit_events"

    actor_type: Mapped[ActorType] = mapped_column(
        String(50),
        nullable=False,
    )
    actor_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,  # Null for system actions
    )
    actor_email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    action: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    action_category: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,  # "lifecycle", "response", "questionnaire"
    )

    entity_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    entity_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
        index=True,
    )

    # Status change, for lifecycle events
    from_status: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    to_status: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )

    event_metadata: Mapped[dict | None] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    request_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<AuditEvent {self.action} by {self.actor_type}:{self.actor_id} "
            f"on {self.entity_type}:{self.entity_id}>"
        )
