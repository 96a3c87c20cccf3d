"""Database models for the AAPRP assessment engine."""

from aaprp.models.assessment import (
    Assessment,
    AssessmentResponse,
    AssessmentStatus,
    ComplianceValue,
    MaturityLevel,
)
from aaprp.models.audit_event import ActorType, AuditEvent
from aaprp.models.questionnaire import Question, Questionnaire, QuestionnaireKind

__all__ = [
    "ActorType",
    "Assessment",
    "AssessmentResponse",
    "AssessmentStatus",
    "AuditEvent",
    "ComplianceValue",
    "MaturityLevel",
    "Question",
    "Questionnaire",
    "QuestionnaireKind",
]
