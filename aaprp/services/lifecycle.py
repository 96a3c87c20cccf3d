"""Assessment lifecycle state machine.

    DRAFT        -> SUBMITTED, ARCHIVED
    SUBMITTED    -> UNDER_REVIEW, DRAFT (reopen)
    UNDER_REVIEW -> COMPLETED, SUBMITTED (send back)
    COMPLETED    -> ARCHIVED
    ARCHIVED     -> (terminal)

Guards run in a fixed order: the assessment must exist, the edge must be
in the table, the actor must be allowed, and then any preconditions must
hold. The status write is a compare-and-swap on the expected status, so
of two concurrent transitions only the first to commit wins.
"""

import logging
from typing import Any

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from aaprp.core.config import settings
from aaprp.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    PreconditionFailedError,
)
from aaprp.db.base import utc_now
from aaprp.models.assessment import Assessment, AssessmentStatus
from aaprp.scoring.summary import calculate_scores
from aaprp.scoring.validation import SubmissionValidation, validate_for_submission
from aaprp.services.access import AccessPolicy, Actor, Permission, has_permission
from aaprp.services.audit import AuditSink
from aaprp.services.records import load_assessment, load_scored_responses, snapshot_values

logger = logging.getLogger(__name__)

S = AssessmentStatus

STATUS_TRANSITIONS: dict[AssessmentStatus, frozenset[AssessmentStatus]] = {
    S.DRAFT: frozenset({S.SUBMITTED, S.ARCHIVED}),
    S.SUBMITTED: frozenset({S.UNDER_REVIEW, S.DRAFT}),
    S.UNDER_REVIEW: frozenset({S.COMPLETED, S.SUBMITTED}),
    S.COMPLETED: frozenset({S.ARCHIVED}),
    S.ARCHIVED: frozenset(),
}

# Edge -> named action
TRANSITION_ACTIONS: dict[tuple[AssessmentStatus, AssessmentStatus], str] = {
    (S.DRAFT, S.SUBMITTED): "submit",
    (S.DRAFT, S.ARCHIVED): "archive",
    (S.SUBMITTED, S.UNDER_REVIEW): "start_review",
    (S.SUBMITTED, S.DRAFT): "reopen",
    (S.UNDER_REVIEW, S.COMPLETED): "complete",
    (S.UNDER_REVIEW, S.SUBMITTED): "send_back",
    (S.COMPLETED, S.ARCHIVED): "archive",
}

# Actions needing write access to the owning organization use the access
# policy; the rest need a reviewer permission and read access.
TRANSITION_PERMISSIONS: dict[str, Permission] = {
    "submit": Permission.ASSESSMENT_WRITE,
    "archive": Permission.ASSESSMENT_WRITE,
    "reopen": Permission.ASSESSMENT_WRITE,
    "start_review": Permission.ASSESSMENT_REVIEW,
    "send_back": Permission.ASSESSMENT_REVIEW,
    "complete": Permission.ASSESSMENT_COMPLETE,
}


def can_transition(from_status: str, to_status: str) -> bool:
    """Check whether ``to_status`` is reachable from ``from_status``."""
    return S(to_status) in STATUS_TRANSITIONS[S(from_status)]


class LifecycleService:
    """Moves assessments through their lifecycle."""

    def __init__(
        self,
        session: AsyncSession,
        access_policy: AccessPolicy,
        audit_sink: AuditSink,
    ) -> None:
        self.session = session
        self.access_policy = access_policy
        self.audit_sink = audit_sink

    def _check_permission(self, action: str, actor: Actor, assessment: Assessment) -> None:
        permission = TRANSITION_PERMISSIONS[action]
        if permission is Permission.ASSESSMENT_WRITE:
            allowed = self.access_policy.can_write(actor, assessment)
        else:
            allowed = has_permission(actor, permission) and self.access_policy.can_read(
                actor, assessment
            )
        if not allowed:
            raise ForbiddenError(
                f"User does not have permission to {action.replace('_', ' ')} this assessment"
            )

    async def validate(self, assessment: Assessment) -> SubmissionValidation:
        """Run the submission check against current responses."""
        scored = await load_scored_responses(self.session, assessment)
        return validate_for_submission(assessment.kind, scored)

    async def transition(
        self,
        actor: Actor,
        assessment_id: str,
        target: AssessmentStatus | str,
        reason: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Assessment:
        """Move an assessment to ``target``.

        Raises:
            NotFoundError: Assessment does not exist
            InvalidTransitionError: Edge not in the transition table
            ForbiddenError: Actor may not perform this transition
            PreconditionFailedError: Submission with unanswered questions
            ConflictError: Status changed concurrently
        """
        assessment = await load_assessment(self.session, assessment_id)
        current = S(assessment.status)
        target = S(target)

        if target not in STATUS_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, target.value)

        action = TRANSITION_ACTIONS[(current, target)]
        self._check_permission(action, actor, assessment)

        changes: dict[str, Any] = {}
        metadata: dict[str, Any] = dict(payload or {})
        if reason:
            metadata["reason"] = reason

        if action == "submit":
            changes = await self._submission_changes(assessment)
            metadata["overall_score"] = changes["overall_score"]
        elif action == "reopen":
            changes = {"submitted_at": None}
        elif action == "complete":
            changes = {"completed_at": utc_now()}

        await self._compare_and_swap(assessment, current, target, changes)

        logger.info(
            f"Assessment {assessment.reference_number} {current.value} -> {target.value}",
            extra={"assessment_id": assessment.id, "user_id": actor.id, "action": action},
        )

        await self.audit_sink.record(
            actor=actor,
            action=f"assessment.{action}",
            action_category="lifecycle",
            entity_type="assessment",
            entity_id=assessment.id,
            from_status=current.value,
            to_status=target.value,
            metadata=metadata,
        )

        return assessment

    async def _submission_changes(self, assessment: Assessment) -> dict[str, Any]:
        scored = await load_scored_responses(self.session, assessment)

        validation = validate_for_submission(assessment.kind, scored)
        if not validation.ok:
            raise PreconditionFailedError(
                f"{len(validation.missing)} of {validation.total} in-scope questions "
                "are unanswered",
                missing=validation.missing_as_dicts(),
            )

        scores = calculate_scores(
            assessment.kind,
            scored,
            priority_weight=settings.priority_question_weight,
        )
        return {**snapshot_values(scores, progress=100), "submitted_at": utc_now()}

    async def _compare_and_swap(
        self,
        assessment: Assessment,
        expected: AssessmentStatus,
        target: AssessmentStatus,
        changes: dict[str, Any],
    ) -> None:
        assessment_id = assessment.id
        result = await self.session.execute(
            update(Assessment)
            .where(Assessment.id == assessment_id)
            .where(Assessment.status == expected.value)
            .values(status=target.value, **changes)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            # rollback expires the loaded assessment
            await self.session.rollback()
            raise ConflictError(
                f"Assessment {assessment_id} is no longer {expected.value}",
                expected_status=expected.value,
            )

        await self.session.commit()
        await self.session.refresh(assessment)

    async def submit(self, actor: Actor, assessment_id: str) -> Assessment:
        return await self.transition(actor, assessment_id, S.SUBMITTED)

    async def reopen(self, actor: Actor, assessment_id: str, reason: str) -> Assessment:
        return await self.transition(actor, assessment_id, S.DRAFT, reason=reason)

    async def start_review(self, actor: Actor, assessment_id: str) -> Assessment:
        return await self.transition(actor, assessment_id, S.UNDER_REVIEW)

    async def send_back(self, actor: Actor, assessment_id: str, reason: str | None = None) -> Assessment:
        return await self.transition(actor, assessment_id, S.SUBMITTED, reason=reason)

    async def complete(self, actor: Actor, assessment_id: str) -> Assessment:
        return await self.transition(actor, assessment_id, S.COMPLETED)

    async def archive(self, actor: Actor, assessment_id: str, reason: str | None = None) -> Assessment:
        return await self.transition(actor, assessment_id, S.ARCHIVED, reason=reason)
