"""Response ledger: one row per in-scope question per assessment.

Answers may only change while the assessment is in DRAFT. Every write
ends by refreshing the assessment's cached progress.
"""

import asyncio
import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.core.config import settings
from aaprp.core.exceptions import ForbiddenError, NotFoundError
from aaprp.db.base import parse_id, utc_now
from aaprp.models.assessment import Assessment, AssessmentResponse, AssessmentStatus
from aaprp.models.questionnaire import Question, QuestionnaireKind
from aaprp.schemas.assessment import ResponseSave
from aaprp.scoring.answered import is_answered
from aaprp.scoring.maturity import maturity_ordinal
from aaprp.scoring.progress import ProgressResult
from aaprp.services.access import AccessPolicy, Actor
from aaprp.services.audit import AuditSink
from aaprp.services.records import load_assessment, refresh_progress, scope_for

logger = logging.getLogger(__name__)


def _enum_value(value):
    return getattr(value, "value", value)


class ResponseStore:
    """Reads and writes assessment responses."""

    def __init__(
        self,
        session: AsyncSession,
        access_policy: AccessPolicy,
        audit_sink: AuditSink,
    ) -> None:
        self.session = session
        self.access_policy = access_policy
        self.audit_sink = audit_sink

    def materialize(self, assessment: Assessment, question_ids: Sequence[str]) -> list[AssessmentResponse]:
        """Stage one empty response per question. The caller commits."""
        responses = [
            AssessmentResponse(
                assessment_id=assessment.id,
                question_id=question_id,
                evidence_urls=[],
            )
            for question_id in question_ids
        ]
        self.session.add_all(responses)
        return responses

    async def _editable_assessment(self, actor: Actor, assessment_id: str) -> Assessment:
        assessment = await load_assessment(self.session, assessment_id)

        if not self.access_policy.can_write(actor, assessment):
            raise ForbiddenError("User does not have write access to this assessment")
        if assessment.status != AssessmentStatus.DRAFT.value:
            raise ForbiddenError(
                f"Responses can only be changed while the assessment is DRAFT "
                f"(current status: {assessment.status})"
            )
        return assessment

    async def _in_scope_question(self, assessment: Assessment, question_id: str) -> Question:
        key = parse_id(question_id)
        if key is None:
            raise NotFoundError(f"Question not found in this questionnaire: {question_id}")

        result = await self.session.execute(
            select(Question)
            .where(Question.id == key)
            .where(Question.questionnaire_id == assessment.questionnaire_id)
        )
        question = result.scalar_one_or_none()
        if question is None:
            raise NotFoundError(f"Question not found in this questionnaire: {question_id}")
        if key not in scope_for(assessment):
            raise NotFoundError(f"Question {question.external_id} is not in scope for this assessment")
        return question

    async def _get_or_create(self, assessment: Assessment, question_id: str) -> AssessmentResponse:
        result = await self.session.execute(
            select(AssessmentResponse)
            .where(AssessmentResponse.assessment_id == assessment.id)
            .where(AssessmentResponse.question_id == question_id)
        )
        response = result.scalar_one_or_none()
        if response is None:
            response = AssessmentResponse(
                assessment_id=assessment.id,
                question_id=question_id,
                evidence_urls=[],
            )
            self.session.add(response)
        return response

    def _apply(self, actor: Actor, assessment: Assessment, response: AssessmentResponse, data: ResponseSave) -> None:
        if QuestionnaireKind(assessment.kind) is QuestionnaireKind.MATURITY_BASED:
            level = _enum_value(data.maturity_level)
            response.maturity_level = level
            response.score = maturity_ordinal(level)
            response.compliance_value = None
        else:
            response.compliance_value = _enum_value(data.compliance_value)
            response.maturity_level = None
            response.score = None

        if data.notes is not None:
            response.notes = data.notes
        if data.evidence_urls is not None:
            response.evidence_urls = list(dict.fromkeys(data.evidence_urls))

        if is_answered(assessment.kind, response):
            response.responded_by = actor.id
            response.responded_at = utc_now()
        else:
            response.responded_by = None
            response.responded_at = None

    async def save_response(
        self,
        actor: Actor,
        assessment_id: str,
        data: ResponseSave,
    ) -> tuple[AssessmentResponse, ProgressResult]:
        """Save one answer and refresh progress.

        Raises:
            NotFoundError: Assessment or question missing, or question out of scope
            ForbiddenError: No write access, or assessment not in DRAFT
        """
        assessment = await self._editable_assessment(actor, assessment_id)
        question = await self._in_scope_question(assessment, data.question_id)

        response = await self._get_or_create(assessment, question.id)
        self._apply(actor, assessment, response, data)
        await self.session.commit()
        await self.session.refresh(response)

        progress = await refresh_progress(self.session, assessment)
        return response, progress

    async def save_responses(
        self,
        actor: Actor,
        assessment_id: str,
        items: Sequence[ResponseSave],
    ) -> tuple[list[AssessmentResponse], ProgressResult]:
        """Save several answers atomically, then refresh progress once.

        Every question is checked before anything is written, and all rows
        are committed together.
        """
        assessment = await self._editable_assessment(actor, assessment_id)
        questions = [await self._in_scope_question(assessment, item.question_id) for item in items]

        async def write_all() -> list[AssessmentResponse]:
            saved = []
            for item, question in zip(items, questions):
                response = await self._get_or_create(assessment, question.id)
                self._apply(actor, assessment, response, item)
                saved.append(response)
            await self.session.commit()
            return saved

        try:
            saved = await asyncio.wait_for(write_all(), timeout=settings.bulk_write_timeout_seconds)
        except asyncio.TimeoutError:
            await self.session.rollback()
            logger.error(
                f"Bulk save timed out after {settings.bulk_write_timeout_seconds}s",
                extra={"assessment_id": assessment_id, "user_id": actor.id},
            )
            raise

        for response in saved:
            await self.session.refresh(response)

        progress = await refresh_progress(self.session, assessment)

        await self.audit_sink.record(
            actor=actor,
            action="assessment.responses_saved",
            action_category="response",
            entity_type="assessment",
            entity_id=assessment.id,
            metadata={"count": len(saved), "progress": progress.percent},
        )
        return saved, progress

    async def clear_response(
        self,
        actor: Actor,
        assessment_id: str,
        question_id: str,
    ) -> tuple[AssessmentResponse, ProgressResult]:
        """Reset an answer to unanswered. Notes and evidence are kept."""
        assessment = await self._editable_assessment(actor, assessment_id)
        question = await self._in_scope_question(assessment, question_id)

        response = await self._get_or_create(assessment, question.id)
        response.compliance_value = None
        response.maturity_level = None
        response.score = None
        response.responded_by = None
        response.responded_at = None
        await self.session.commit()
        await self.session.refresh(response)

        progress = await refresh_progress(self.session, assessment)
        return response, progress

    async def add_evidence(
        self,
        actor: Actor,
        assessment_id: str,
        question_id: str,
        url: str,
    ) -> AssessmentResponse:
        """Attach an evidence reference. Duplicates are ignored."""
        assessment = await self._editable_assessment(actor, assessment_id)
        question = await self._in_scope_question(assessment, question_id)

        response = await self._get_or_create(assessment, question.id)
        urls = list(response.evidence_urls or [])
        if url not in urls:
            urls.append(url)
        response.evidence_urls = urls
        await self.session.commit()
        await self.session.refresh(response)
        return response

    async def remove_evidence(
        self,
        actor: Actor,
        assessment_id: str,
        question_id: str,
        url: str,
    ) -> AssessmentResponse:
        """Detach an evidence reference if present."""
        assessment = await self._editable_assessment(actor, assessment_id)
        question = await self._in_scope_question(assessment, question_id)

        response = await self._get_or_create(assessment, question.id)
        response.evidence_urls = [u for u in (response.evidence_urls or []) if u != url]
        await self.session.commit()
        await self.session.refresh(response)
        return response

    async def list_responses(self, assessment: Assessment) -> list[AssessmentResponse]:
        """Responses to the assessment's in-scope questions, in questionnaire order."""
        scope = scope_for(assessment)
        if not scope:
            return []

        result = await self.session.execute(
            select(AssessmentResponse)
            .join(Question, Question.id == AssessmentResponse.question_id)
            .where(AssessmentResponse.assessment_id == assessment.id)
            .where(AssessmentResponse.question_id.in_(scope))
            .order_by(Question.sort_order, Question.external_id)
        )
        return list(result.scalars().all())
