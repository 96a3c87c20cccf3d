"""Pydantic schemas for assessments, responses and results."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from aaprp.models.assessment import AssessmentStatus, ComplianceValue, MaturityLevel


class AssessmentCreate(BaseModel):
    """Schema for creating an assessment."""

    questionnaire_id: UUID
    organization_id: UUID
    selected_audit_areas: list[str] = Field(
        default_factory=list,
        description="Audit-area codes in scope; empty means all areas",
    )
    title: str | None = Field(None, max_length=255)


class AssessmentRead(BaseModel):
    """Schema for reading an assessment with its cached snapshot."""

    id: str
    reference_number: str
    questionnaire_id: str
    organization_id: str
    kind: str
    title: str | None
    status: str
    selected_audit_areas: list[str]
    progress: int
    overall_score: float | None
    ei_score: float | None
    maturity_level: str | None
    category_scores: dict[str, float | None] | None
    started_at: datetime | None
    submitted_at: datetime | None
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ResponseUpdate(BaseModel):
    """Answer body. Only the field for the assessment kind is kept."""

    compliance_value: ComplianceValue | None = None
    maturity_level: MaturityLevel | None = None
    notes: str | None = None
    evidence_urls: list[str] | None = None


class ResponseSave(ResponseUpdate):
    """Answer to one question inside a bulk save."""

    question_id: str


class BulkResponseSave(BaseModel):
    """Several answers saved in one transaction."""

    responses: list[ResponseSave] = Field(..., min_length=1)


class EvidenceRef(BaseModel):
    """Opaque evidence reference; storage and validation live elsewhere."""

    url: str = Field(..., min_length=1, max_length=2048)


class ResponseRead(BaseModel):
    """Schema for reading a response."""

    id: str
    assessment_id: str
    question_id: str
    compliance_value: str | None
    maturity_level: str | None
    score: float | None
    notes: str | None
    evidence_urls: list[str]
    responded_by: str | None
    responded_at: datetime | None

    model_config = {"from_attributes": True}


class ProgressRead(BaseModel):
    total: int
    answered: int
    percent: int
    by_category: dict[str, dict[str, int]] = Field(default_factory=dict)

    model_config = {"from_attributes": True}


class SaveResponseResult(BaseModel):
    """A saved response together with the refreshed progress."""

    response: ResponseRead
    progress: ProgressRead


class BulkSaveResult(BaseModel):
    responses: list[ResponseRead]
    progress: ProgressRead


class QuestionRefRead(BaseModel):
    question_id: str
    external_id: str

    model_config = {"from_attributes": True}


class ValidationRead(BaseModel):
    """Submission readiness."""

    ok: bool
    total: int
    answered: int
    missing: list[QuestionRefRead]
    warnings: list[str]

    model_config = {"from_attributes": True}


class EICategoryRead(BaseModel):
    code: str
    satisfactory: int
    applicable: int
    ei_score: float | None

    model_config = {"from_attributes": True}


class EIRead(BaseModel):
    ei_score: float | None
    weighted: bool
    total: int
    satisfactory: int
    not_satisfactory: int
    not_applicable: int
    unanswered: int
    applicable: int
    by_category: dict[str, EICategoryRead]
    priority_ei_score: float | None
    priority_applicable: int

    model_config = {"from_attributes": True}


class MaturityCategoryRead(BaseModel):
    code: str
    answered: int
    average: float
    percentage: float
    level: str

    model_config = {"from_attributes": True}


class MaturityRead(BaseModel):
    level: str | None
    average: float | None
    percentage: float | None
    total: int
    answered: int
    by_category: dict[str, MaturityCategoryRead]
    level_distribution: dict[str, int]
    gap_areas: list[str]

    model_config = {"from_attributes": True}


class ScoresRead(BaseModel):
    """Freshly computed scores for an assessment."""

    kind: str
    overall_score: float | None
    ei_score: float | None
    maturity_level: str | None
    category_scores: dict[str, float | None]
    ei: EIRead | None = None
    maturity: MaturityRead | None = None

    model_config = {"from_attributes": True}


class TransitionRequest(BaseModel):
    """Request to move an assessment to another status."""

    target_status: AssessmentStatus
    reason: str | None = Field(None, max_length=2000)


class ReopenRequest(BaseModel):
    """Request to reopen a submitted assessment."""

    reason: str = Field(..., min_length=10, max_length=2000)


class ScoreComparisonRead(BaseModel):
    current: float
    previous: float
    delta: float
    percentage_change: float
    trend: str

    model_config = {"from_attributes": True}


class ImprovementAreasRead(BaseModel):
    improved: list[str]
    declined: list[str]
    unchanged: list[str]

    model_config = {"from_attributes": True}


class AssessmentComparisonRead(BaseModel):
    current_id: str
    previous_id: str
    overall: ScoreComparisonRead
    categories: ImprovementAreasRead

    model_config = {"from_attributes": True}


class ScoreHistoryEntryRead(BaseModel):
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

    model_config = {"from_attributes": True}


class ScoreHistoryRead(BaseModel):
    """Submitted snapshots of one organization over time."""

    organization_id: str
    entries: list[ScoreHistoryEntryRead]
    latest_change: ScoreComparisonRead | None = None

    model_config = {"from_attributes": True}
