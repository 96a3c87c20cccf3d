"""Flat view of a response joined with its question's classification."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ScoredResponse:
    """Everything the calculators need to know about one in-scope answer."""
    question_id: str
    external_id: str
    compliance_value: str | None = None
    maturity_level: str | None = None
    audit_area: str | None = None
    critical_element: str | None = None
    maturity_component: str | None = None
    study_area: str | None = None
    is_priority: bool = False
    weight: float = 1.0
    sort_order: int = 0
    has_evidence: bool = False

    @classmethod
    def from_models(cls, response: Any, question: Any) -> "ScoredResponse":
        """Build from an ``AssessmentResponse`` and its ``Question``."""
        return cls(
            question_id=question.id,
            external_id=question.external_id,
            compliance_value=response.compliance_value if response else None,
            maturity_level=response.maturity_level if response else None,
            audit_area=question.audit_area,
            critical_element=question.critical_element,
            maturity_component=question.maturity_component,
            study_area=question.study_area,
            is_priority=question.is_priority,
            weight=question.weight,
            sort_order=question.sort_order,
            has_evidence=bool(response and (response.evidence_urls or response.notes)),
        )
