"""Tests for append-only audit event functionality."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.models.audit_event import ActorType
from aaprp.schemas.audit_event import AuditEventFilter
from aaprp.services.audit import AuditService, AuditSink, write_audit_event


@pytest.mark.asyncio
async def test_write_audit_event(async_session: AsyncSession) -> None:
    """Test writing an audit event."""
    entity_id = str(uuid4())
    event = await write_audit_event(
        session=async_session,
        actor_type=ActorType.SYSTEM,
        actor_id=None,
        action="questionnaire.imported",
        entity_type="questionnaire",
        entity_id=entity_id,
        metadata={"code": "ANS_USOAP_CMA"},
        description="Bundled questionnaire imported",
    )

    assert event.id is not None
    assert event.actor_type == ActorType.SYSTEM.value
    assert event.action == "questionnaire.imported"
    assert event.entity_type == "questionnaire"
    assert event.entity_id == entity_id
    assert event.event_metadata == {"code": "ANS_USOAP_CMA"}
    assert event.created_at is not None


@pytest.mark.asyncio
async def test_sink_records_actor(audit_sink: AuditSink, async_session: AsyncSession, manager) -> None:
    """Test that the sink writes through its own session and keeps actor details."""
    entity_id = str(uuid4())
    await audit_sink.record(
        actor=manager,
        action="assessment.submit",
        action_category="lifecycle",
        entity_type="assessment",
        entity_id=entity_id,
        from_status="DRAFT",
        to_status="SUBMITTED",
    )

    events = await AuditService(async_session).get_events(AuditEventFilter(entity_id=entity_id))

    assert len(events) == 1
    assert events[0].actor_type == ActorType.USER.value
    assert events[0].actor_id == manager.id
    assert events[0].actor_email == manager.email
    assert (events[0].from_status, events[0].to_status) == ("DRAFT", "SUBMITTED")


@pytest.mark.asyncio
async def test_audit_service_filters(async_session: AsyncSession) -> None:
    """Test audit service filtering capabilities."""
    first = str(uuid4())
    second = str(uuid4())
    user_id = str(uuid4())

    await write_audit_event(
        session=async_session,
        actor_type=ActorType.USER,
        actor_id=user_id,
        action="assessment.created",
        action_category="lifecycle",
        entity_type="assessment",
        entity_id=first,
    )
    await write_audit_event(
        session=async_session,
        actor_type=ActorType.USER,
        actor_id=user_id,
        action="assessment.responses_saved",
        action_category="response",
        entity_type="assessment",
        entity_id=first,
    )
    await write_audit_event(
        session=async_session,
        actor_type=ActorType.SYSTEM,
        actor_id=None,
        action="questionnaire.imported",
        entity_type="questionnaire",
        entity_id=second,
    )

    service = AuditService(async_session)

    events = await service.get_events(AuditEventFilter(entity_id=first))
    assert len(events) == 2

    events = await service.get_events(AuditEventFilter(entity_type="questionnaire"))
    assert len(events) == 1

    events = await service.get_events(AuditEventFilter(action_category="response"))
    assert [e.action for e in events] == ["assessment.responses_saved"]

    events = await service.get_events(AuditEventFilter(actor_id=user_id))
    assert len(events) == 2


@pytest.mark.asyncio
async def test_sink_carries_request_id(session_factory, async_session: AsyncSession, manager) -> None:
    """Test that events recorded by a request-scoped sink keep the request id."""
    entity_id = str(uuid4())
    sink = AuditSink(session_factory, request_id="req-41c2")

    await sink.record(
        actor=manager,
        action="assessment.created",
        action_category="lifecycle",
        entity_type="assessment",
        entity_id=entity_id,
    )

    events = await AuditService(async_session).get_entity_history("assessment", entity_id)
    assert [e.request_id for e in events] == ["req-41c2"]


@pytest.mark.asyncio
async def test_malformed_ids_match_nothing(async_session: AsyncSession) -> None:
    """Test that ids which are not UUIDs return no events instead of failing."""
    service = AuditService(async_session)

    assert await service.get_events(AuditEventFilter(entity_id="ASM-1")) == []
    assert await service.get_events(AuditEventFilter(actor_id="root")) == []
    assert await service.get_entity_history("assessment", "ASM-1") == []


def test_audit_endpoint_no_post_method(client: TestClient) -> None:
    """Test that audit endpoint does not allow POST (append-only enforcement)."""
    response = client.post(
        "/api/v1/audit/events",
        json={
            "actor_type": "system",
            "action": "assessment.submit",
            "entity_type": "assessment",
        },
    )

    assert response.status_code == 405


def test_audit_endpoint_no_put_method(client: TestClient) -> None:
    """Test that audit history does not allow PUT."""
    response = client.put(
        f"/api/v1/audit/events/assessment/{uuid4()}",
        json={"action": "modified"},
    )

    assert response.status_code == 405


def test_audit_endpoint_no_delete_method(client: TestClient) -> None:
    """Test that audit history does not allow DELETE."""
    response = client.delete(f"/api/v1/audit/events/assessment/{uuid4()}")

    assert response.status_code == 405


def test_audit_endpoint_no_patch_method(client: TestClient) -> None:
    """Test that audit history does not allow PATCH."""
    response = client.patch(
        f"/api/v1/audit/events/assessment/{uuid4()}",
        json={"action": "modified"},
    )

    assert response.status_code == 405


def test_audit_routes_are_read_only() -> None:
    """Every registered audit route is GET only."""
    from aaprp.api.v1.audit import router

    for route in router.routes:
        assert route.methods == {"GET"}
