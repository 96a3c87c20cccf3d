"""Assessment service: creation, recompute-on-read views and comparison.

Response writes are delegated to ``ResponseStore`` and status changes to
``LifecycleService``; both are exposed as attributes.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.core.config import settings
from aaprp.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from aaprp.db.base import parse_id, utc_now
from aaprp.models.assessment import Assessment, AssessmentResponse, AssessmentStatus
from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.compare import (
    ImprovementAreas,
    ScoreComparison,
    compare_scores,
    identify_improvement_areas,
)
from aaprp.scoring.ei import EIAxis
from aaprp.scoring.maturity import MaturityAxis
from aaprp.scoring.progress import ProgressResult, compute_progress
from aaprp.scoring.scope import normalize_audit_areas, resolve_in_scope_question_ids
from aaprp.scoring.summary import ScoreSummary, calculate_scores
from aaprp.scoring.validation import SubmissionValidation, validate_for_submission
from aaprp.services.access import AccessPolicy, Actor
from aaprp.services.audit import AuditSink
from aaprp.services.lifecycle import LifecycleService
from aaprp.services.records import load_assessment, load_scored_responses, scope_for
from aaprp.services.responses import ResponseStore
from aaprp.services.scope import ScopeResolver

logger = logging.getLogger(__name__)

# Statuses that block a second assessment of the same questionnaire
OPEN_STATUSES = (
    AssessmentStatus.DRAFT.value,
    AssessmentStatus.SUBMITTED.value,
    AssessmentStatus.UNDER_REVIEW.value,
)

KIND_CODES = {
    QuestionnaireKind.AUDIT_AREA_BASED.value: "EI",
    QuestionnaireKind.MATURITY_BASED.value: "SMS",
}

AXES_BY_KIND = {
    QuestionnaireKind.AUDIT_AREA_BASED.value: {a.value for a in EIAxis},
    QuestionnaireKind.MATURITY_BASED.value: {a.value for a in MaturityAxis},
}


def generate_reference_number(kind: str) -> str:
    """Generate a unique assessment reference number."""
    timestamp = datetime.now().strftime("%Y%m%d")
    unique_id = uuid.uuid4().hex[:6].upper()
    return f"AAPRP-{KIND_CODES[kind]}-{timestamp}-{unique_id}"


@dataclass
class AssessmentComparison:
    current_id: str
    previous_id: str
    overall: ScoreComparison
    categories: ImprovementAreas


@dataclass
class ScoreHistoryEntry:
    """Frozen snapshot of one submitted assessment."""

    assessment_id: str
    reference_number: str
    questionnaire_id: str
    kind: str
    status: str
    overall_score: float | None
    ei_score: float | None
    maturity_level: str | None
    submitted_at: datetime | None
    completed_at: datetime | None


@dataclass
class ScoreHistory:
    organization_id: str
    entries: list[ScoreHistoryEntry]
    # Latest entry against the previous one of the same kind
    latest_change: ScoreComparison | None = None


def build_score_history(organization_id: str, assessments: list[Assessment]) -> ScoreHistory:
    """Order snapshots by submission time and compare the latest two of a kind."""
    entries = [
        ScoreHistoryEntry(
            assessment_id=a.id,
            reference_number=a.reference_number,
            questionnaire_id=a.questionnaire_id,
            kind=a.kind,
            status=a.status,
            overall_score=a.overall_score,
            ei_score=a.ei_score,
            maturity_level=a.maturity_level,
            submitted_at=a.submitted_at,
            completed_at=a.completed_at,
        )
        for a in assessments
    ]

    latest_change = None
    if entries:
        latest = entries[-1]
        earlier = [e for e in entries[:-1] if e.kind == latest.kind]
        if earlier:
            latest_change = compare_scores(latest.overall_score, earlier[-1].overall_score)

    return ScoreHistory(organization_id=organization_id, entries=entries, latest_change=latest_change)


class AssessmentService:
    """Entry point for assessment operations."""

    def __init__(
        self,
        session: AsyncSession,
        access_policy: AccessPolicy,
        audit_sink: AuditSink,
    ) -> None:
        self.session = session
        self.access_policy = access_policy
        self.audit_sink = audit_sink
        self.scope = ScopeResolver(session)
        self.responses = ResponseStore(session, access_policy, audit_sink)
        self.lifecycle = LifecycleService(session, access_policy, audit_sink)

    async def create_assessment(
        self,
        actor: Actor,
        questionnaire_id: str,
        organization_id: str,
        selected_audit_areas: list[str] | None = None,
        title: str | None = None,
    ) -> Assessment:
        """Create a DRAFT assessment with one empty response per in-scope question.

        The assessment and all its responses are committed together.

        Raises:
            NotFoundError: Questionnaire missing or inactive
            ForbiddenError: Actor may not write for the organization
            ConflictError: Organization already has an open assessment
                of this questionnaire
        """
        questionnaire = await self.scope.get_questionnaire(questionnaire_id)
        if not questionnaire.is_active:
            raise NotFoundError(f"Questionnaire is not active: {questionnaire.code} v{questionnaire.version}")

        organization_key = parse_id(organization_id)
        if organization_key is None:
            raise InvalidInputError(f"Invalid organization id: {organization_id}")

        kind = QuestionnaireKind(questionnaire.kind).value
        areas = normalize_audit_areas(kind, selected_audit_areas)

        assessment = Assessment(
            id=str(uuid.uuid4()),
            questionnaire_id=questionnaire.id,
            organization_id=organization_key,
            kind=kind,
            title=title,
            reference_number=generate_reference_number(kind),
            status=AssessmentStatus.DRAFT.value,
            selected_audit_areas=areas,
            progress=0,
            created_by=actor.id,
        )

        if not self.access_policy.can_write(actor, assessment):
            raise ForbiddenError("User does not have permission to create assessments for this organization")

        existing = await self.session.execute(
            select(Assessment.id)
            .where(Assessment.organization_id == organization_key)
            .where(Assessment.questionnaire_id == questionnaire.id)
            .where(Assessment.status.in_(OPEN_STATUSES))
            .limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(
                "Organization already has an open assessment for this questionnaire"
            )

        question_ids = resolve_in_scope_question_ids(kind, questionnaire.questions, areas)
        assessment.in_scope_question_ids = list(question_ids)

        async def write_all() -> None:
            self.session.add(assessment)
            await self.session.flush()
            self.responses.materialize(assessment, question_ids)
            await self.session.commit()

        try:
            await asyncio.wait_for(write_all(), timeout=settings.bulk_write_timeout_seconds)
        except asyncio.TimeoutError:
            await self.session.rollback()
            logger.error(
                f"Creating assessment timed out after {settings.bulk_write_timeout_seconds}s",
                extra={"user_id": actor.id},
            )
            raise

        await self.session.refresh(assessment)

        logger.info(
            f"Created assessment {assessment.reference_number} with {len(question_ids)} questions",
            extra={"assessment_id": assessment.id, "user_id": actor.id},
        )

        await self.audit_sink.record(
            actor=actor,
            action="assessment.created",
            action_category="lifecycle",
            entity_type="assessment",
            entity_id=assessment.id,
            to_status=AssessmentStatus.DRAFT.value,
            metadata={
                "reference_number": assessment.reference_number,
                "questionnaire_id": questionnaire.id,
                "selected_audit_areas": areas,
                "question_count": len(question_ids),
            },
        )
        return assessment

    async def get_assessment(self, actor: Actor, assessment_id: str) -> Assessment:
        """Fetch an assessment the actor may read."""
        assessment = await load_assessment(self.session, assessment_id)
        if not self.access_policy.can_read(actor, assessment):
            raise ForbiddenError("User does not have access to this assessment")
        return assessment

    async def list_assessments(
        self,
        actor: Actor,
        organization_id: str | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Assessment]:
        """Assessments visible to the actor, newest first."""
        query = (
            select(Assessment)
            .where(self.access_policy.read_filter(actor))
            .order_by(Assessment.created_at.desc())
        )
        if organization_id:
            key = parse_id(organization_id)
            if key is None:
                return []
            query = query.where(Assessment.organization_id == key)
        if status:
            query = query.where(Assessment.status == status)

        result = await self.session.execute(query.offset(offset).limit(limit))
        return list(result.scalars().all())

    async def list_responses(self, actor: Actor, assessment_id: str) -> list[AssessmentResponse]:
        assessment = await self.get_assessment(actor, assessment_id)
        return await self.responses.list_responses(assessment)

    async def get_progress(self, actor: Actor, assessment_id: str) -> ProgressResult:
        """Recompute progress from current responses. Does not write."""
        assessment = await self.get_assessment(actor, assessment_id)
        scored = await load_scored_responses(self.session, assessment)
        return compute_progress(assessment.kind, scope_for(assessment), scored)

    async def get_scores(
        self,
        actor: Actor,
        assessment_id: str,
        weighted: bool = False,
        axis: str | None = None,
    ) -> ScoreSummary:
        """Recompute scores from current responses. Does not write."""
        assessment = await self.get_assessment(actor, assessment_id)
        if axis is not None and axis not in AXES_BY_KIND[assessment.kind]:
            raise InvalidInputError(
                f"Unknown breakdown axis for {assessment.kind}: {axis}",
                allowed=sorted(AXES_BY_KIND[assessment.kind]),
            )

        scored = await load_scored_responses(self.session, assessment)
        return calculate_scores(
            assessment.kind,
            scored,
            weighted=weighted,
            axis=axis,
            priority_weight=settings.priority_question_weight,
        )

    async def validate_for_submission(self, actor: Actor, assessment_id: str) -> SubmissionValidation:
        """Report whether the assessment could be submitted now, and what blocks it."""
        assessment = await self.get_assessment(actor, assessment_id)
        scored = await load_scored_responses(self.session, assessment)
        return validate_for_submission(assessment.kind, scored)

    async def compare_assessments(
        self,
        actor: Actor,
        current_id: str,
        previous_id: str,
        threshold: float = 5,
    ) -> AssessmentComparison:
        """Compare freshly computed scores of two assessments of the same kind."""
        current = await self.get_assessment(actor, current_id)
        previous = await self.get_assessment(actor, previous_id)
        if current.kind != previous.kind:
            raise ConflictError("Only assessments of the same questionnaire kind can be compared")

        current_scores = calculate_scores(
            current.kind, await load_scored_responses(self.session, current)
        )
        previous_scores = calculate_scores(
            previous.kind, await load_scored_responses(self.session, previous)
        )

        return AssessmentComparison(
            current_id=current.id,
            previous_id=previous.id,
            overall=compare_scores(current_scores.overall_score, previous_scores.overall_score),
            categories=identify_improvement_areas(
                current_scores.category_scores,
                previous_scores.category_scores,
                threshold=threshold,
            ),
        )

    async def start(self, actor: Actor, assessment_id: str) -> Assessment:
        """Record when work on a DRAFT assessment began. Idempotent."""
        assessment = await load_assessment(self.session, assessment_id)
        if not self.access_policy.can_write(actor, assessment):
            raise ForbiddenError("User does not have write access to this assessment")
        if assessment.status != AssessmentStatus.DRAFT.value:
            raise ForbiddenError("Only DRAFT assessments can be started")

        if assessment.started_at is None:
            assessment.started_at = utc_now()
            await self.session.commit()
            await self.audit_sink.record(
                actor=actor,
                action="assessment.started",
                action_category="lifecycle",
                entity_type="assessment",
                entity_id=assessment.id,
            )
        return assessment

    async def get_organization_history(
        self,
        actor: Actor,
        organization_id: str,
        questionnaire_id: str | None = None,
    ) -> ScoreHistory:
        """Submitted snapshots of an organization, oldest submission first.

        Only assessments that still carry a submission time are included,
        so reopened drafts drop out until they are submitted again.
        """
        key = parse_id(organization_id)
        if key is None:
            return ScoreHistory(organization_id=organization_id, entries=[])

        query = (
            select(Assessment)
            .where(self.access_policy.read_filter(actor))
            .where(Assessment.organization_id == key)
            .where(Assessment.submitted_at.is_not(None))
            .order_by(Assessment.submitted_at.asc())
        )
        if questionnaire_id:
            questionnaire_key = parse_id(questionnaire_id)
            if questionnaire_key is None:
                return ScoreHistory(organization_id=key, entries=[])
            query = query.where(Assessment.questionnaire_id == questionnaire_key)

        result = await self.session.execute(query)
        return build_score_history(key, list(result.scalars().all()))

    async def delete_assessment(self, actor: Actor, assessment_id: str) -> None:
        """Delete a DRAFT assessment and its responses.

        Submitted work is archived, never deleted.

        Raises:
            NotFoundError: Assessment does not exist
            ForbiddenError: No write access, or assessment not in DRAFT
        """
        assessment = await load_assessment(self.session, assessment_id)
        if not self.access_policy.can_write(actor, assessment):
            raise ForbiddenError("User does not have permission to delete this assessment")
        if assessment.status != AssessmentStatus.DRAFT.value:
            raise ForbiddenError(
                f"Only DRAFT assessments can be deleted (current status: {assessment.status}); "
                "archive it instead"
            )

        deleted_id = assessment.id
        reference_number = assessment.reference_number

        await self.session.execute(
            delete(AssessmentResponse).where(AssessmentResponse.assessment_id == deleted_id)
        )
        await self.session.delete(assessment)
        await self.session.commit()

        logger.info(
            f"Deleted draft assessment {reference_number}",
            extra={"assessment_id": deleted_id, "user_id": actor.id},
        )

        await self.audit_sink.record(
            actor=actor,
            action="assessment.deleted",
            action_category="lifecycle",
            entity_type="assessment",
            entity_id=deleted_id,
            from_status=AssessmentStatus.DRAFT.value,
            metadata={"reference_number": reference_number},
        )
