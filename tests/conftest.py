"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from typing import Annotated
from uuid import uuid4

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from aaprp.api.deps import get_audit_sink, get_request_id
from aaprp.core.security import create_access_token
from aaprp.db.base import Base
from aaprp.db.session import get_db
from aaprp.main import app
from aaprp.models.questionnaire import Question, Questionnaire, QuestionnaireKind
from aaprp.services.access import Actor, OrganizationAccessPolicy, Role
from aaprp.services.assessment import AssessmentService
from aaprp.services.audit import AuditSink


# Use SQLite for testing (simpler than spinning up postgres)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ORG_ID = str(uuid4())
OTHER_ORG_ID = str(uuid4())


@pytest.fixture(scope="function")
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture(scope="function")
async def async_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def audit_sink(session_factory) -> AuditSink:
    """Audit sink writing through its own sessions on the test engine."""
    return AuditSink(session_factory)


@pytest.fixture
def access_policy() -> OrganizationAccessPolicy:
    return OrganizationAccessPolicy()


@pytest.fixture
def service(
    async_session: AsyncSession,
    access_policy: OrganizationAccessPolicy,
    audit_sink: AuditSink,
) -> AssessmentService:
    """Assessment service wired to the test session."""
    return AssessmentService(async_session, access_policy, audit_sink)


# Actors


@pytest.fixture
def manager() -> Actor:
    """Safety manager of the assessed organization."""
    return Actor(
        id=str(uuid4()),
        role=Role.SAFETY_MANAGER,
        organization_id=ORG_ID,
        email="safety.manager@ansp.example",
    )


@pytest.fixture
def other_manager() -> Actor:
    """Safety manager of an unrelated organization."""
    return Actor(
        id=str(uuid4()),
        role=Role.SAFETY_MANAGER,
        organization_id=OTHER_ORG_ID,
        email="safety.manager@other-ansp.example",
    )


@pytest.fixture
def lead_reviewer() -> Actor:
    return Actor(id=str(uuid4()), role=Role.LEAD_REVIEWER, email="lead@aaprp.example")


@pytest.fixture
def peer_reviewer() -> Actor:
    return Actor(id=str(uuid4()), role=Role.PEER_REVIEWER, email="peer@aaprp.example")


@pytest.fixture
def admin() -> Actor:
    return Actor(id=str(uuid4()), role=Role.SYSTEM_ADMIN, email="admin@aaprp.example")


@pytest.fixture
def staff() -> Actor:
    """Read-only member of the assessed organization."""
    return Actor(id=str(uuid4()), role=Role.STAFF, organization_id=ORG_ID)


@pytest.fixture
def steering() -> Actor:
    return Actor(id=str(uuid4()), role=Role.STEERING_COMMITTEE)


# Questionnaires


@pytest.fixture
async def audit_questionnaire(async_session: AsyncSession) -> Questionnaire:
    """Audit-area questionnaire with questions in areas ATS, ATS, MET, MET."""
    layout = [
        ("ANS 7.001", "ATS", "CE_1", True),
        ("ANS 7.035", "ATS", "CE_6", False),
        ("ANS 7.301", "MET", "CE_3", False),
        ("ANS 7.345", "MET", "CE_7", True),
    ]
    questionnaire = Questionnaire(
        id=str(uuid4()),
        code="ANS_USOAP_CMA",
        kind=QuestionnaireKind.AUDIT_AREA_BASED.value,
        version="2024.1",
        title_en="ANS Protocol Questions",
        is_active=True,
        questions=[
            Question(
                id=str(uuid4()),
                external_id=external_id,
                text_en=f"Protocol question {external_id}",
                audit_area=area,
                critical_element=element,
                is_priority=priority,
                weight=1.0,
                is_active=True,
                sort_order=index,
            )
            for index, (external_id, area, element, priority) in enumerate(layout)
        ],
    )
    async_session.add(questionnaire)
    await async_session.commit()
    await async_session.refresh(questionnaire)
    return questionnaire


@pytest.fixture
async def maturity_questionnaire(async_session: AsyncSession) -> Questionnaire:
    """CANSO SoE questionnaire with two questions in each of two components."""
    layout = [
        ("SoE 1.1", "SAFETY_POLICY_OBJECTIVES", "SA_1_1"),
        ("SoE 1.2", "SAFETY_POLICY_OBJECTIVES", "SA_1_2"),
        ("SoE 2.1", "SAFETY_RISK_MANAGEMENT", "SA_2_1"),
        ("SoE 2.2", "SAFETY_RISK_MANAGEMENT", "SA_2_2"),
    ]
    questionnaire = Questionnaire(
        id=str(uuid4()),
        code="SMS_CANSO_SOE",
        kind=QuestionnaireKind.MATURITY_BASED.value,
        version="2024",
        title_en="CANSO Standard of Excellence in SMS",
        is_active=True,
        questions=[
            Question(
                id=str(uuid4()),
                external_id=external_id,
                text_en=f"Maturity question {external_id}",
                maturity_component=component,
                study_area=study_area,
                is_priority=False,
                weight=1.0,
                is_active=True,
                sort_order=index,
            )
            for index, (external_id, component, study_area) in enumerate(layout)
        ],
    )
    async_session.add(questionnaire)
    await async_session.commit()
    await async_session.refresh(questionnaire)
    return questionnaire


@pytest.fixture
def org_id() -> str:
    return ORG_ID


@pytest.fixture
def questions_in():
    """Questions of a questionnaire in one audit area, in order."""

    def _questions_in(questionnaire: Questionnaire, area: str) -> list[Question]:
        return [q for q in questionnaire.questions if q.audit_area == area]

    return _questions_in


# HTTP


def create_test_token(actor: Actor) -> str:
    """Create a test JWT token for an actor."""
    return create_access_token(
        subject=actor.id,
        additional_claims={
            "role": actor.role.value,
            "organization_id": actor.organization_id,
            "email": actor.email,
        },
    )


def auth_headers_for(actor: Actor) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_test_token(actor)}"}


@pytest.fixture
def headers_for():
    """Build bearer headers for any actor."""
    return auth_headers_for


@pytest.fixture
def manager_headers(manager: Actor) -> dict[str, str]:
    return auth_headers_for(manager)


@pytest.fixture
async def api_client(
    async_session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with the database and audit sink overridden."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    def override_get_audit_sink(
        request_id: Annotated[str | None, Depends(get_request_id)],
    ) -> AuditSink:
        return AuditSink(session_factory, request_id=request_id)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_audit_sink] = override_get_audit_sink

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Plain test client for endpoints that never touch the database."""
    with TestClient(app) as test_client:
        yield test_client
