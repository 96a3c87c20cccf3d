"""Assessment endpoints.

Domain errors propagate to the application's ``AssessmentError`` handler,
which renders them as structured JSON bodies.
"""

from fastapi import APIRouter, Depends, Query, status

from aaprp.api.deps import Assessments, CurrentActor, require_permissions
from aaprp.models.assessment import AssessmentStatus
from aaprp.schemas.assessment import (
    AssessmentComparisonRead,
    AssessmentCreate,
    AssessmentRead,
    BulkResponseSave,
    BulkSaveResult,
    EvidenceRef,
    ProgressRead,
    ReopenRequest,
    ResponseRead,
    ResponseSave,
    ResponseUpdate,
    SaveResponseResult,
    ScoreHistoryRead,
    ScoresRead,
    TransitionRequest,
    ValidationRead,
)
from aaprp.services.access import Permission

router = APIRouter(
    prefix="/assessments",
    dependencies=[Depends(require_permissions(Permission.ASSESSMENT_READ))],
)


@router.post("", response_model=AssessmentRead, status_code=status.HTTP_201_CREATED)
async def create_assessment(
    request: AssessmentCreate,
    service: Assessments,
    actor: CurrentActor,
) -> AssessmentRead:
    """Create a DRAFT assessment with empty responses for every in-scope question."""
    assessment = await service.create_assessment(
        actor=actor,
        questionnaire_id=str(request.questionnaire_id),
        organization_id=str(request.organization_id),
        selected_audit_areas=request.selected_audit_areas,
        title=request.title,
    )
    return AssessmentRead.model_validate(assessment)


@router.get("", response_model=list[AssessmentRead])
async def list_assessments(
    service: Assessments,
    actor: CurrentActor,
    organization_id: str | None = None,
    status_filter: AssessmentStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> list[AssessmentRead]:
    """List assessments visible to the caller."""
    assessments = await service.list_assessments(
        actor,
        organization_id=organization_id,
        status=status_filter.value if status_filter else None,
        limit=limit,
        offset=offset,
    )
    return [AssessmentRead.model_validate(a) for a in assessments]


@router.get("/history", response_model=ScoreHistoryRead)
async def get_organization_history(
    service: Assessments,
    actor: CurrentActor,
    organization_id: str,
    questionnaire_id: str | None = None,
) -> ScoreHistoryRead:
    """Submitted score snapshots of an organization, oldest first."""
    history = await service.get_organization_history(
        actor, organization_id, questionnaire_id=questionnaire_id
    )
    return ScoreHistoryRead.model_validate(history)


@router.get("/{assessment_id}", response_model=AssessmentRead)
async def get_assessment(
    assessment_id: str,
    service: Assessments,
    actor: CurrentActor,
) -> AssessmentRead:
    """Get an assessment with its cached snapshot fields."""
    return AssessmentRead.model_validate(await service.get_assessment(actor, assessment_id))


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assessment(
    assessment_id: str,
    service: Assessments,
    actor: CurrentActor,
) -> None:
    """Delete a DRAFT assessment and its responses."""
    await service.delete_assessment(actor, assessment_id)


@router.get("/{assessment_id}/responses", response_model=list[ResponseRead])
async def list_responses(
    assessment_id: str,
    service: Assessments,
    actor: CurrentActor,
) -> list[ResponseRead]:
    responses = await service.list_responses(actor, assessment_id)
    return [ResponseRead.model_validate(r) for r in responses]


@router.put("/{assessment_id}/responses/{question_id}", response_model=SaveResponseResult)
async def save_response(
    assessment_id: str,
    question_id: str,
    request: ResponseUpdate,
    service: Assessments,
    actor: CurrentActor,
) -> SaveResponseResult:
    """Save one answer. The assessment must be in DRAFT."""
    response, progress = await service.responses.save_response(
        actor,
        assessment_id,
        ResponseSave(question_id=question_id, **request.model_dump()),
    )
    return SaveResponseResult(
        response=ResponseRead.model_validate(response),
        progress=ProgressRead.model_validate(progress),
    )


@router.post("/{assessment_id}/responses/bulk", response_model=BulkSaveResult)
async def save_responses(
    assessment_id: str,
    request: BulkResponseSave,
    service: Assessments,
    actor: CurrentActor,
) -> BulkSaveResult:
    """Save several answers in one transaction."""
    responses, progress = await service.responses.save_responses(
        actor, assessment_id, request.responses
    )
    return BulkSaveResult(
        responses=[ResponseRead.model_validate(r) for r in responses],
        progress=ProgressRead.model_validate(progress),
    )


@router.delete("/{assessment_id}/responses/{question_id}", response_model=SaveResponseResult)
async def clear_response(
    assessment_id: str,
    question_id: str,
    service: Assessments,
    actor: CurrentActor,
) -> SaveResponseResult:
    """Reset an answer to unanswered."""
    response, progress = await service.responses.clear_response(actor, assessment_id, question_id)
    return SaveResponseResult(
        response=ResponseRead.model_validate(response),
        progress=ProgressRead.model_validate(progress),
    )


@router.post(
    "/{assessment_id}/responses/{question_id}/evidence",
    response_model=ResponseRead,
)
async def add_evidence(
    assessment_id: str,
    question_id: str,
    request: EvidenceRef,
    service: Assessments,
    actor: CurrentActor,
) -> ResponseRead:
    response = await service.responses.add_evidence(actor, assessment_id, question_id, request.url)
    return ResponseRead.model_validate(response)


@router.delete(
    "/{assessment_id}/responses/{question_id}/evidence",
    response_model=ResponseRead,
)
async def remove_evidence(
    assessment_id: str,
    question_id: str,
    service: Assessments,
    actor: CurrentActor,
    url: str = Query(..., min_length=1),
) -> ResponseRead:
    response = await service.responses.remove_evidence(actor, assessment_id, question_id, url)
    return ResponseRead.model_validate(response)


@router.get("/{assessment_id}/progress", response_model=ProgressRead)
async def get_progress(
    assessment_id: str,
    service: Assessments,
    actor: CurrentActor,
) -> ProgressRead:
    """Progress recomputed from the current responses."""
    return ProgressRead.model_validate(await service.get_progress(actor, assessment_id))


@router.get("/{assessment_id}/scores", response_model=ScoresRead)
async def get_scores(
    assessment_id: str,
    service: Assessments,
    actor: CurrentActor,
    weighted: bool = False,
    axis: str | None = None,
) -> ScoresRead:
    """Scores recomputed from the current responses."""
    scores = await service.get_scores(actor, assessment_id, weighted=weighted, axis=axis)
    return ScoresRead.model_validate(scores)


@router.get("/{assessment_id}/validation", response_model=ValidationRead)
async def validate_for_submission(
    assessment_id: str,
    service: Assessments,
    actor: CurrentActor,
) -> ValidationRead:
    """Whether the assessment can be submitted, and which questions block it."""
    return ValidationRead.model_validate(await service.validate_for_submission(actor, assessment_id))


@router.get("/{assessment_id}/compare/{previous_id}", response_model=AssessmentComparisonRead)
async def compare_assessments(
    assessment_id: str,
    previous_id: str,
    service: Assessments,
    actor: CurrentActor,
    threshold: float = Query(5, gt=0),
) -> AssessmentComparisonRead:
    comparison = await service.compare_assessments(
        actor, assessment_id, previous_id, threshold=threshold
    )
    return AssessmentComparisonRead.model_validate(comparison)


@router.post("/{assessment_id}/start", response_model=AssessmentRead)
async def start_assessment(
    assessment_id: str,
    service: Assessments,
    actor: CurrentActor,
) -> AssessmentRead:
    return AssessmentRead.model_validate(await service.start(actor, assessment_id))


@router.post("/{assessment_id}/submit", response_model=AssessmentRead)
async def submit_assessment(
    assessment_id: str,
    service: Assessments,
    actor: CurrentActor,
) -> AssessmentRead:
    """Submit a DRAFT assessment, freezing its scores."""
    assessment = await service.lifecycle.submit(actor, assessment_id)
    return AssessmentRead.model_validate(assessment)


@router.post("/{assessment_id}/reopen", response_model=AssessmentRead)
async def reopen_assessment(
    assessment_id: str,
    request: ReopenRequest,
    service: Assessments,
    actor: CurrentActor,
) -> AssessmentRead:
    """Return a SUBMITTED assessment to DRAFT."""
    assessment = await service.lifecycle.reopen(actor, assessment_id, request.reason)
    return AssessmentRead.model_validate(assessment)


@router.post("/{assessment_id}/transition", response_model=AssessmentRead)
async def transition_assessment(
    assessment_id: str,
    request: TransitionRequest,
    service: Assessments,
    actor: CurrentActor,
) -> AssessmentRead:
    """Move an assessment along any edge of the lifecycle."""
    assessment = await service.lifecycle.transition(
        actor, assessment_id, request.target_status, reason=request.reason
    )
    return AssessmentRead.model_validate(assessment)
