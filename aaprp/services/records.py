"""Loading and snapshot helpers shared by the assessment services."""

import logging
from typing import Any

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.core.exceptions import NotFoundError
from aaprp.db.base import parse_id
from aaprp.models.assessment import Assessment, AssessmentResponse
from aaprp.models.questionnaire import Question
from aaprp.scoring.inputs import ScoredResponse
from aaprp.scoring.progress import ProgressResult, compute_progress
from aaprp.scoring.summary import ScoreSummary

logger = logging.getLogger(__name__)


async def load_assessment(session: AsyncSession, assessment_id: str) -> Assessment:
    """Fetch an assessment or raise NotFoundError. Malformed ids are not found."""
    key = parse_id(assessment_id)
    if key is None:
        raise NotFoundError(f"Assessment not found: {assessment_id}")

    result = await session.execute(select(Assessment).where(Assessment.id == key))
    assessment = result.scalar_one_or_none()
    if assessment is None:
        raise NotFoundError(f"Assessment not found: {assessment_id}")
    return assessment


def scope_for(assessment: Assessment) -> list[str]:
    """The question ids fixed when the assessment was created."""
    return list(assessment.in_scope_question_ids or [])


async def load_scored_responses(
    session: AsyncSession,
    assessment: Assessment,
) -> list[ScoredResponse]:
    """One entry per in-scope question, answered or not, in questionnaire order.

    Responses to questions outside the scope snapshot are never loaded.
    """
    scope = scope_for(assessment)
    if not scope:
        return []

    result = await session.execute(
        select(Question, AssessmentResponse)
        .outerjoin(
            AssessmentResponse,
            and_(
                AssessmentResponse.question_id == Question.id,
                AssessmentResponse.assessment_id == assessment.id,
            ),
        )
        .where(Question.id.in_(scope))
        .order_by(Question.sort_order, Question.external_id)
    )
    return [ScoredResponse.from_models(response, question) for question, response in result.all()]


async def refresh_progress(session: AsyncSession, assessment: Assessment) -> ProgressResult:
    """Recompute progress and write it to the cached column."""
    scored = await load_scored_responses(session, assessment)
    progress = compute_progress(assessment.kind, scope_for(assessment), scored)

    assessment.progress = progress.percent
    await session.commit()

    logger.debug(
        "Progress refreshed",
        extra={"assessment_id": assessment.id, "action": "progress.refresh"},
    )
    return progress


def snapshot_values(scores: ScoreSummary, progress: int) -> dict[str, Any]:
    """Column values that freeze a score summary onto an assessment."""
    return {
        "overall_score": scores.overall_score,
        "ei_score": scores.ei_score,
        "maturity_level": scores.maturity_level,
        "category_scores": dict(scores.category_scores),
        "progress": progress,
    }
