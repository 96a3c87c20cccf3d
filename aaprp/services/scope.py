"""Database-backed scope resolution."""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.core.exceptions import NotFoundError
from aaprp.db.base import parse_id
from aaprp.models.questionnaire import Questionnaire
from aaprp.scoring.scope import resolve_in_scope_question_ids


class ScopeResolver:
    """Resolve in-scope question ids for a questionnaire and area selection."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_questionnaire(self, questionnaire_id: str) -> Questionnaire:
        key = parse_id(questionnaire_id)
        if key is None:
            raise NotFoundError(f"Questionnaire not found: {questionnaire_id}")

        result = await self.session.execute(
            select(Questionnaire).where(Questionnaire.id == key)
        )
        questionnaire = result.scalar_one_or_none()
        if questionnaire is None:
            raise NotFoundError(f"Questionnaire not found: {questionnaire_id}")
        return questionnaire

    async def resolve(
        self,
        questionnaire_id: str,
        selected_audit_areas: Iterable[str] | None = None,
    ) -> list[str]:
        """Question ids in scope, in questionnaire order."""
        questionnaire = await self.get_questionnaire(questionnaire_id)
        return resolve_in_scope_question_ids(
            questionnaire.kind,
            questionnaire.questions,
            selected_audit_areas,
        )
