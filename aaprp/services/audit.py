"""Append-only audit trail: writers and read-only queries."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from aaprp.core.logging import audit_logger
from aaprp.db.base import parse_id
from aaprp.models.audit_event import ActorType, AuditEvent
from aaprp.schemas.audit_event import AuditEventFilter
from aaprp.services.access import Actor

logger = logging.getLogger(__name__)


async def write_audit_event(
    session: AsyncSession,
    actor_type: ActorType,
    actor_id: str | None,
    action: str,
    entity_type: str,
    entity_id: str | None,
    metadata: dict[str, Any] | None = None,
    actor_email: str | None = None,
    action_category: str | None = None,
    description: str | None = None,
    from_status: str | None = None,
    to_status: str | None = None,
    request_id: str | None = None,
) -> AuditEvent:
    """Write an audit event to the database.

    Events are append-only and cannot be modified or deleted.

    Args:
        session: Database session
        actor_type: Type of actor (system, user)
        actor_id: ID of the acting user
        action: Action performed (e.g. "assessment.submitted")
        entity_type: Type of entity affected (e.g. "assessment")
        entity_id: ID of the affected entity
        metadata: Additional context as JSON
        actor_email: Email of the actor (for easier querying)
        action_category: Category of action (lifecycle, response, questionnaire)
        description: Human-readable description
        from_status: Status before a lifecycle transition
        to_status: Status after a lifecycle transition
        request_id: Request correlation ID

    Returns:
        Created AuditEvent instance
    """
    event = AuditEvent(
        actor_type=actor_type.value,
        actor_id=actor_id,
        actor_email=actor_email,
        action=action,
        action_category=action_category,
        entity_type=entity_type,
        entity_id=entity_id,
        from_status=from_status,
        to_status=to_status,
        event_metadata=metadata,
        description=description,
        request_id=request_id,
    )

    session.add(event)
    await session.commit()
    await session.refresh(event)

    audit_logger.log(
        action=action,
        actor_type=actor_type.value,
        actor_id=actor_id or "system",
        entity_type=entity_type,
        entity_id=entity_id or "none",
        metadata=metadata,
        from_status=from_status,
        to_status=to_status,
    )

    return event


class AuditSink:
    """Fire-and-forget audit writer.

    Each event is written through a fresh session so that a failed write
    never rolls back or expires the caller's objects. Any failure is logged
    and swallowed.
    Events carry the sink's request id unless one is passed explicitly.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        request_id: str | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.request_id = request_id

    async def record(
        self,
        actor: Actor | None,
        action: str,
        entity_type: str,
        entity_id: str | None,
        metadata: dict[str, Any] | None = None,
        action_category: str | None = None,
        from_status: str | None = None,
        to_status: str | None = None,
        request_id: str | None = None,
    ) -> AuditEvent | None:
        """Record an event; returns None if it could not be written."""
        try:
            async with self.session_factory() as session:
                return await write_audit_event(
                    session=session,
                    actor_type=ActorType.USER if actor else ActorType.SYSTEM,
                    actor_id=actor.id if actor else None,
                    actor_email=actor.email if actor else None,
                    action=action,
                    action_category=action_category,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    metadata=metadata,
                    from_status=from_status,
                    to_status=to_status,
                    request_id=request_id or self.request_id,
                )
        except Exception:
            logger.exception(
                "Failed to write audit event %s for %s:%s", action, entity_type, entity_id
            )
            return None


class AuditService:
    """Read-only queries over audit events.

    Events are created via ``write_audit_event`` or ``AuditSink``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_events(self, filters: AuditEventFilter) -> list[AuditEvent]:
        """Query audit events with optional filters, newest first."""
        query = select(AuditEvent).order_by(AuditEvent.created_at.desc())

        # Malformed ids match nothing
        if filters.entity_id:
            entity_key = parse_id(filters.entity_id)
            if entity_key is None:
                return []
            query = query.where(AuditEvent.entity_id == entity_key)
        if filters.entity_type:
            query = query.where(AuditEvent.entity_type == filters.entity_type)
        if filters.actor_id:
            actor_key = parse_id(filters.actor_id)
            if actor_key is None:
                return []
            query = query.where(AuditEvent.actor_id == actor_key)
        if filters.action:
            query = query.where(AuditEvent.action == filters.action)
        if filters.action_category:
            query = query.where(AuditEvent.action_category == filters.action_category)

        query = query.offset(filters.offset).limit(filters.limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_entity_history(
        self,
        entity_type: str,
        entity_id: str,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get audit history for a specific entity, oldest first."""
        entity_key = parse_id(entity_id)
        if entity_key is None:
            return []

        result = await self.session.execute(
            select(AuditEvent)
            .where(AuditEvent.entity_type == entity_type)
            .where(AuditEvent.entity_id == entity_key)
            .order_by(AuditEvent.created_at.asc())
            .limit(limit)
        )
        return list(result.scalars().all())
