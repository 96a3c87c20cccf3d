"""Tests for questionnaire import and read access."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.core.exceptions import ConflictError, NotFoundError
from aaprp.db.init_db import seed_questionnaires
from aaprp.questionnaires.loader import parse_questionnaire
from aaprp.services.questionnaire import QuestionnaireService


def definition(version: str):
    return parse_questionnaire(
        {
            "code": "ANS_TEST",
            "kind": "AUDIT_AREA_BASED",
            "version": version,
            "title_en": f"Test protocol {version}",
            "questions": [
                {"external_id": "ANS 2", "text_en": "Second?", "audit_area": "MET"},
                {"external_id": "ANS 1", "text_en": "First?", "audit_area": "ATS"},
            ],
        }
    )


class TestQuestionnaireImport:
    """Tests for QuestionnaireService.import_definition."""

    @pytest.mark.asyncio
    async def test_import_creates_questions_in_file_order(self, async_session: AsyncSession) -> None:
        service = QuestionnaireService(async_session)

        questionnaire = await service.import_definition(definition("1"), "abc123")

        assert questionnaire.is_active is True
        assert questionnaire.definition_hash == "abc123"
        assert [q.external_id for q in questionnaire.questions] == ["ANS 2", "ANS 1"]
        assert [q.sort_order for q in questionnaire.questions] == [0, 1]

    @pytest.mark.asyncio
    async def test_same_version_cannot_be_imported_twice(self, async_session: AsyncSession) -> None:
        """Questionnaire versions are immutable."""
        service = QuestionnaireService(async_session)
        await service.import_definition(definition("1"))

        with pytest.raises(ConflictError):
            await service.import_definition(definition("1"))

    @pytest.mark.asyncio
    async def test_new_version_deactivates_previous(self, async_session: AsyncSession) -> None:
        service = QuestionnaireService(async_session)
        await service.import_definition(definition("1"))
        await service.import_definition(definition("2"))

        active = await service.list_questionnaires(active_only=True)
        everything = await service.list_questionnaires(active_only=False)

        assert [q.version for q in active] == ["2"]
        assert [q.version for q in everything] == ["1", "2"]

    @pytest.mark.asyncio
    async def test_keep_previous_active(self, async_session: AsyncSession) -> None:
        service = QuestionnaireService(async_session)
        await service.import_definition(definition("1"))
        await service.import_definition(definition("2"), deactivate_previous=False)

        active = await service.list_questionnaires(active_only=True)
        assert len(active) == 2

    @pytest.mark.asyncio
    async def test_get_unknown_questionnaire(self, async_session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await QuestionnaireService(async_session).get_questionnaire(
                "00000000-0000-4000-8000-000000000000"
            )

    @pytest.mark.asyncio
    async def test_seed_bundled_is_idempotent(self, async_session: AsyncSession) -> None:
        assert await seed_questionnaires(async_session) == 2
        assert await seed_questionnaires(async_session) == 0


class TestQuestionnaireEndpoints:
    """Tests for the read-only questionnaire API."""

    @pytest.mark.asyncio
    async def test_list_and_detail(
        self,
        api_client: AsyncClient,
        audit_questionnaire,
        manager_headers: dict[str, str],
    ) -> None:
        response = await api_client.get("/api/v1/questionnaires", headers=manager_headers)

        assert response.status_code == 200
        data = response.json()
        assert [q["code"] for q in data] == ["ANS_USOAP_CMA"]

        detail = await api_client.get(
            f"/api/v1/questionnaires/{audit_questionnaire.id}", headers=manager_headers
        )
        assert detail.status_code == 200
        assert len(detail.json()["questions"]) == 4

    @pytest.mark.asyncio
    async def test_unknown_questionnaire_is_structured_404(
        self, api_client: AsyncClient, manager_headers: dict[str, str]
    ) -> None:
        response = await api_client.get(
            "/api/v1/questionnaires/00000000-0000-4000-8000-000000000000",
            headers=manager_headers,
        )
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_questionnaires_are_not_writable(self, api_client: AsyncClient, manager_headers) -> None:
        response = await api_client.post(
            "/api/v1/questionnaires", json={}, headers=manager_headers
        )
        assert response.status_code == 405
