"""Effective Implementation (EI) scoring for audit-area questionnaires.

EI is the share of applicable protocol questions that are satisfactorily
implemented:

    EI = satisfactory / (satisfactory + not satisfactory) * 100

NOT_APPLICABLE answers drop out of both sides. Unanswered and
NOT_REVIEWED questions are not applicable either. With no applicable
responses the EI is undefined and reported as ``None``.

The weighted variant gives each applicable question its base weight,
multiplied by the priority multiplier for priority questions.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.answered import is_answered, is_applicable, is_satisfactory
from aaprp.scoring.classification import PRIORITY_QUESTION_WEIGHT, question_weight
from aaprp.scoring.inputs import ScoredResponse
from aaprp.scoring.progress import round_half_up

KIND = QuestionnaireKind.AUDIT_AREA_BASED.value


class EIAxis(str, Enum):
    """Axis for the EI category breakdown."""

    AUDIT_AREA = "audit_area"
    CRITICAL_ELEMENT = "critical_element"


@dataclass
class EICategoryScore:
    """EI for one audit area or critical element."""
    code: str
    satisfactory: int
    applicable: int
    ei_score: float | None


@dataclass
class EIResult:
    """Result of EI scoring."""
    ei_score: float | None
    weighted: bool
    total: int
    satisfactory: int
    not_satisfactory: int
    not_applicable: int
    unanswered: int
    applicable: int
    by_category: dict[str, EICategoryScore] = field(default_factory=dict)
    priority_ei_score: float | None = None
    priority_applicable: int = 0


def _ratio(numerator: float, denominator: float) -> float | None:
    if denominator == 0:
        return None
    return round_half_up(numerator / denominator * 100, 2)


def _group_key(axis: EIAxis) -> Callable[[ScoredResponse], str | None]:
    if axis is EIAxis.CRITICAL_ELEMENT:
        return lambda r: r.critical_element
    return lambda r: r.audit_area


def calculate_ei_score(
    responses: Iterable[ScoredResponse],
    weighted: bool = False,
    axis: EIAxis | str = EIAxis.AUDIT_AREA,
    priority_weight: float = PRIORITY_QUESTION_WEIGHT,
) -> EIResult:
    """Calculate the EI score over in-scope responses.

    Args:
        responses: In-scope responses joined with question classification
        weighted: Apply question weights and the priority multiplier
        axis: Breakdown axis (audit area or critical element)
        priority_weight: Multiplier for priority questions when weighted

    Returns:
        EIResult with overall score, counts and per-category scores
    """
    axis = EIAxis(axis)
    key = _group_key(axis)

    counts = {"satisfactory": 0, "not_satisfactory": 0, "not_applicable": 0, "unanswered": 0}
    numerator = denominator = 0.0
    priority_num = priority_den = 0
    groups: dict[str, list[float]] = {}
    group_counts: dict[str, list[int]] = {}
    total = 0

    for response in responses:
        total += 1
        if not is_answered(KIND, response):
            counts["unanswered"] += 1
            continue
        if not is_applicable(KIND, response):
            counts["not_applicable"] += 1
            continue

        satisfactory = is_satisfactory(response)
        counts["satisfactory" if satisfactory else "not_satisfactory"] += 1

        w = question_weight(response.weight, response.is_priority, priority_weight) if weighted else 1.0
        denominator += w
        if satisfactory:
            numerator += w

        if response.is_priority:
            priority_den += 1
            if satisfactory:
                priority_num += 1

        code = key(response)
        if code is None:
            continue
        sums = groups.setdefault(code, [0.0, 0.0])
        sums[1] += w
        tally = group_counts.setdefault(code, [0, 0])
        tally[1] += 1
        if satisfactory:
            sums[0] += w
            tally[0] += 1

    by_category = {
        code: EICategoryScore(
            code=code,
            satisfactory=group_counts[code][0],
            applicable=group_counts[code][1],
            ei_score=_ratio(sums[0], sums[1]),
        )
        for code, sums in sorted(groups.items())
    }

    return EIResult(
        ei_score=_ratio(numerator, denominator),
        weighted=weighted,
        total=total,
        applicable=counts["satisfactory"] + counts["not_satisfactory"],
        by_category=by_category,
        priority_ei_score=_ratio(priority_num, priority_den),
        priority_applicable=priority_den,
        **counts,
    )
