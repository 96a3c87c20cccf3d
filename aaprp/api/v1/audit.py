"""Audit event endpoints.

This module intentionally provides READ-ONLY access to audit events.
Events are written internally by the services.
"""

from fastapi import APIRouter, Depends, Query, status

from aaprp.api.deps import DbSession, require_permissions
from aaprp.schemas.audit_event import AuditEventFilter, AuditEventRead
from aaprp.services.access import Permission
from aaprp.services.audit import AuditService

router = APIRouter(dependencies=[Depends(require_permissions(Permission.AUDIT_READ))])


@router.get(
    "/events",
    response_model=list[AuditEventRead],
    status_code=status.HTTP_200_OK,
    summary="List audit events",
)
async def list_audit_events(
    session: DbSession,
    entity_id: str | None = None,
    entity_type: str | None = None,
    actor_id: str | None = None,
    action: str | None = None,
    action_category: str | None = None,
    limit: int = Query(100, ge=1),
    offset: int = Query(0, ge=0),
) -> list[AuditEventRead]:
    """Query audit events with optional filters, newest first."""
    filters = AuditEventFilter(
        entity_id=entity_id,
        entity_type=entity_type,
        actor_id=actor_id,
        action=action,
        action_category=action_category,
        limit=min(limit, 500),
        offset=offset,
    )
    events = await AuditService(session).get_events(filters)
    return [AuditEventRead.model_validate(e) for e in events]


@router.get(
    "/events/{entity_type}/{entity_id}",
    response_model=list[AuditEventRead],
    status_code=status.HTTP_200_OK,
    summary="Get entity audit history",
)
async def get_entity_history(
    entity_type: str,
    entity_id: str,
    session: DbSession,
    limit: int = Query(100, ge=1, le=500),
) -> list[AuditEventRead]:
    """Audit history of one entity, oldest first."""
    events = await AuditService(session).get_entity_history(entity_type, entity_id, limit=limit)
    return [AuditEventRead.model_validate(e) for e in events]
