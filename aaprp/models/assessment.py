"""Assessment and response ledger models."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from aaprp.db.base import Base, TimestampMixin
from aaprp.models.questionnaire import QuestionnaireKind


class AssessmentStatus(str, Enum):
    """Lifecycle states of an assessment."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class ComplianceValue(str, Enum):
    """Answer to an audit-area protocol question."""

    SATISFACTORY = "SATISFACTORY"
    NOT_SATISFACTORY = "NOT_SATISFACTORY"
    NOT_APPLICABLE = "NOT_APPLICABLE"
    NOT_REVIEWED = "NOT_REVIEWED"


class MaturityLevel(str, Enum):
    """Answer to a maturity question, A (lowest) to E (highest)."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"


class Assessment(Base, TimestampMixin):
    """One organization's attempt at one questionnaire.

    Score and progress columns are a snapshot written by mutation paths.
    Reads that need fresh values recompute from the responses.
    """

    __tablename__ = "assessments"

    questionnaire_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("questionnaires.id"),
        nullable=False,
        index=True,
    )
    organization_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        nullable=False,
        index=True,
    )
    # Copied from the questionnaire at creation
    kind: Mapped[QuestionnaireKind] = mapped_column(
        String(50),
        nullable=False,
    )
    title: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    reference_number: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
    )
    status: Mapped[AssessmentStatus] = mapped_column(
        String(50),
        default=AssessmentStatus.DRAFT.value,
        nullable=False,
        index=True,
    )

    # Empty list means every audit area is in scope
    selected_audit_areas: Mapped[list] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    # Question ids resolved at creation; never recomputed
    in_scope_question_ids: Mapped[list] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    # Snapshot
    progress: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    overall_score: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )
    ei_score: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )
    maturity_level: Mapped[str | None] = mapped_column(
        String(1),
        nullable=True,
    )
    category_scores: Mapped[dict | None] = mapped_column(
        JSON,
        nullable=True,
    )

    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_by: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Assessment {self.reference_number} status={self.status}>"


class AssessmentResponse(Base, TimestampMixin):
    """Answer ledger row, one per question per assessment.

    Only the answer field matching the assessment kind is ever set.
    Rows are editable only while the assessment is in DRAFT.
    """

    __tablename__ = "assessment_responses"
    __table_args__ = (UniqueConstraint("assessment_id", "question_id"),)

    assessment_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("assessments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("questions.id"),
        nullable=False,
    )

    compliance_value: Mapped[ComplianceValue | None] = mapped_column(
        String(50),
        nullable=True,
    )
    maturity_level: Mapped[MaturityLevel | None] = mapped_column(
        String(1),
        nullable=True,
    )
    # Maturity ordinal 1-5
    score: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    evidence_urls: Mapped[list] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    responded_by: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
    )
    responded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<AssessmentResponse {self.assessment_id[:8]}/{self.question_id[:8]}>"
