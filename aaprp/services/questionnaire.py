"""Questionnaire import and read access."""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.core.exceptions import ConflictError, NotFoundError
from aaprp.db.base import parse_id
from aaprp.models.questionnaire import Question, Questionnaire
from aaprp.questionnaires.loader import QuestionnaireDefinition

logger = logging.getLogger(__name__)


class QuestionnaireService:
    """Questionnaires are written once on import and never edited."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_questionnaires(self, active_only: bool = True) -> list[Questionnaire]:
        query = select(Questionnaire).order_by(Questionnaire.code, Questionnaire.version)
        if active_only:
            query = query.where(Questionnaire.is_active.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())

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

    async def import_definition(
        self,
        definition: QuestionnaireDefinition,
        definition_hash: str | None = None,
        deactivate_previous: bool = True,
    ) -> Questionnaire:
        """Create a new questionnaire version from a validated definition.

        Args:
            definition: Parsed definition
            definition_hash: SHA256 of the source file
            deactivate_previous: Mark older versions of the same code inactive

        Raises:
            ConflictError: If this code and version were already imported
        """
        existing = await self.session.execute(
            select(Questionnaire.id)
            .where(Questionnaire.code == definition.code)
            .where(Questionnaire.version == definition.version)
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(
                f"Questionnaire {definition.code} v{definition.version} already exists"
            )

        if deactivate_previous:
            await self.session.execute(
                update(Questionnaire)
                .where(Questionnaire.code == definition.code)
                .values(is_active=False)
            )

        questionnaire = Questionnaire(
            code=definition.code,
            kind=definition.kind.value,
            version=definition.version,
            title_en=definition.title_en,
            title_fr=definition.title_fr,
            description=definition.description,
            is_active=True,
            definition_hash=definition_hash,
            questions=[
                Question(sort_order=index, **item.model_dump())
                for index, item in enumerate(definition.questions)
            ],
        )
        self.session.add(questionnaire)
        await self.session.commit()
        await self.session.refresh(questionnaire)

        logger.info(
            f"Imported questionnaire {definition.code} v{definition.version} "
            f"({len(definition.questions)} questions)"
        )
        return questionnaire
