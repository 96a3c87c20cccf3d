"""Read-only questionnaire endpoints.

Questionnaires are imported from definition files, never edited over the API.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from aaprp.api.deps import DbSession, require_permissions
from aaprp.services.access import Permission
from aaprp.services.questionnaire import QuestionnaireService

router = APIRouter(
    prefix="/questionnaires",
    dependencies=[Depends(require_permissions(Permission.QUESTIONNAIRE_READ))],
)


class QuestionRead(BaseModel):
    id: str
    external_id: str
    text_en: str
    text_fr: str | None
    audit_area: str | None
    critical_element: str | None
    maturity_component: str | None
    study_area: str | None
    is_priority: bool
    requires_on_site_evidence: bool
    weight: float
    is_active: bool
    sort_order: int

    model_config = {"from_attributes": True}


class QuestionnaireSummary(BaseModel):
    id: str
    code: str
    kind: str
    version: str
    title_en: str
    title_fr: str | None
    is_active: bool
    definition_hash: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class QuestionnaireDetail(QuestionnaireSummary):
    questions: list[QuestionRead]


@router.get("", response_model=list[QuestionnaireSummary])
async def list_questionnaires(
    session: DbSession,
    include_inactive: bool = False,
) -> list[QuestionnaireSummary]:
    service = QuestionnaireService(session)
    questionnaires = await service.list_questionnaires(active_only=not include_inactive)
    return [QuestionnaireSummary.model_validate(q) for q in questionnaires]


@router.get("/{questionnaire_id}", response_model=QuestionnaireDetail)
async def get_questionnaire(
    questionnaire_id: str,
    session: DbSession,
) -> QuestionnaireDetail:
    service = QuestionnaireService(session)
    return QuestionnaireDetail.model_validate(await service.get_questionnaire(questionnaire_id))
