"""Kind-dispatching score summary persisted on the assessment snapshot."""

from collections.abc import Sequence
from dataclasses import dataclass

from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.classification import PRIORITY_QUESTION_WEIGHT
from aaprp.scoring.ei import EIAxis, EIResult, calculate_ei_score
from aaprp.scoring.inputs import ScoredResponse
from aaprp.scoring.maturity import MaturityAxis, MaturityResult, calculate_maturity


@dataclass
class ScoreSummary:
    """Snapshot values plus the full calculator result."""
    kind: str
    overall_score: float | None
    ei_score: float | None
    maturity_level: str | None
    category_scores: dict[str, float | None]
    ei: EIResult | None = None
    maturity: MaturityResult | None = None


def calculate_scores(
    kind: str,
    responses: Sequence[ScoredResponse],
    weighted: bool = False,
    axis: str | None = None,
    priority_weight: float = PRIORITY_QUESTION_WEIGHT,
) -> ScoreSummary:
    """Score in-scope responses with the algorithm for ``kind``.

    ``overall_score`` is the EI percentage for audit-area questionnaires
    and the maturity percentage for maturity questionnaires.
    """
    if QuestionnaireKind(kind) is QuestionnaireKind.MATURITY_BASED:
        maturity = calculate_maturity(responses, axis=axis or MaturityAxis.COMPONENT)
        return ScoreSummary(
            kind=QuestionnaireKind.MATURITY_BASED.value,
            overall_score=maturity.percentage,
            ei_score=None,
            maturity_level=maturity.level,
            category_scores={
                code: score.percentage for code, score in maturity.by_category.items()
            },
            maturity=maturity,
        )

    ei = calculate_ei_score(
        responses,
        weighted=weighted,
        axis=axis or EIAxis.AUDIT_AREA,
        priority_weight=priority_weight,
    )
    return ScoreSummary(
        kind=QuestionnaireKind.AUDIT_AREA_BASED.value,
        overall_score=ei.ei_score,
        ei_score=ei.ei_score,
        maturity_level=None,
        category_scores={code: score.ei_score for code, score in ei.by_category.items()},
        ei=ei,
    )
