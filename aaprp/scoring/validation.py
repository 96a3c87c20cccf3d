"""Submission readiness check."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.answered import is_answered
from aaprp.scoring.inputs import ScoredResponse
from aaprp.scoring.progress import percent_of

# Recommended share of answers backed by evidence or notes
MIN_EVIDENCE_PERCENT = {
    QuestionnaireKind.AUDIT_AREA_BASED.value: 80,
    QuestionnaireKind.MATURITY_BASED.value: 75,
}


@dataclass(frozen=True)
class QuestionRef:
    """A question blocking submission."""
    question_id: str
    external_id: str


@dataclass
class SubmissionValidation:
    """Outcome of the submission check."""
    ok: bool
    total: int
    answered: int
    missing: list[QuestionRef] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def missing_as_dicts(self) -> list[dict[str, str]]:
        return [
            {"question_id": ref.question_id, "external_id": ref.external_id}
            for ref in self.missing
        ]


def validate_for_submission(
    kind: str,
    responses: Iterable[ScoredResponse],
) -> SubmissionValidation:
    """Check that every in-scope question is answered.

    ``responses`` must hold exactly one entry per in-scope question; a
    question with no response row is passed with empty answer fields.
    Warnings never block submission.
    """
    kind = QuestionnaireKind(kind).value
    rows = sorted(responses, key=lambda r: (r.sort_order, r.external_id))

    missing = [
        QuestionRef(question_id=r.question_id, external_id=r.external_id)
        for r in rows
        if not is_answered(kind, r)
    ]

    total = len(rows)
    warnings = []
    if total:
        evidence_percent = percent_of(sum(1 for r in rows if r.has_evidence), total)
        minimum = MIN_EVIDENCE_PERCENT[kind]
        if evidence_percent < minimum:
            warnings.append(
                f"Only {evidence_percent}% of questions have evidence or notes. "
                f"Recommended: at least {minimum}%."
            )

    return SubmissionValidation(
        ok=not missing,
        total=total,
        answered=total - len(missing),
        missing=missing,
        warnings=warnings,
    )
