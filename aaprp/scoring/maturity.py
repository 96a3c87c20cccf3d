"""SMS maturity scoring for CANSO SoE questionnaires.

Each answered question contributes its level's ordinal (A=1 .. E=5).
The overall average is the mean ordinal over answered, in-scope
questions; unanswered questions are left out rather than counted as 0.

Banding (the lower boundary of each band is inclusive):
- avg >= 4.5: E
- avg >= 3.5: D
- avg >= 2.5: C
- avg >= 1.5: B
- otherwise: A
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from aaprp.models.assessment import MaturityLevel
from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.answered import is_answered
from aaprp.scoring.inputs import ScoredResponse
from aaprp.scoring.progress import round_half_up

KIND = QuestionnaireKind.MATURITY_BASED.value

MATURITY_ORDINALS: dict[str, int] = {
    MaturityLevel.A.value: 1,
    MaturityLevel.B.value: 2,
    MaturityLevel.C.value: 3,
    MaturityLevel.D.value: 4,
    MaturityLevel.E.value: 5,
}

MAX_ORDINAL = 5

LEVEL_BANDS = [
    (4.5, MaturityLevel.E),
    (3.5, MaturityLevel.D),
    (2.5, MaturityLevel.C),
    (1.5, MaturityLevel.B),
]

# Categories scoring below this level are reported as gaps
GAP_THRESHOLD = MaturityLevel.C


class MaturityAxis(str, Enum):
    """Axis for the maturity category breakdown."""

    COMPONENT = "maturity_component"
    STUDY_AREA = "study_area"


@dataclass
class MaturityCategoryScore:
    """Maturity for one SMS component or study area."""
    code: str
    answered: int
    average: float
    percentage: float
    level: str


@dataclass
class MaturityResult:
    """Result of maturity scoring."""
    level: str | None
    average: float | None
    percentage: float | None
    total: int
    answered: int
    by_category: dict[str, MaturityCategoryScore] = field(default_factory=dict)
    level_distribution: dict[str, int] = field(default_factory=dict)
    gap_areas: list[str] = field(default_factory=list)


def maturity_ordinal(level: str | None) -> int | None:
    """Numeric value 1-5 of a maturity level, or None."""
    if level is None:
        return None
    return MATURITY_ORDINALS[getattr(level, "value", level)]


def level_for_average(average: float) -> MaturityLevel:
    """Band an average ordinal into a maturity level."""
    for threshold, level in LEVEL_BANDS:
        if average >= threshold:
            return level
    return MaturityLevel.A


def _percentage(average: float) -> float:
    return round_half_up(average / MAX_ORDINAL * 100, 2)


def calculate_maturity(
    responses: Iterable[ScoredResponse],
    axis: MaturityAxis | str = MaturityAxis.COMPONENT,
) -> MaturityResult:
    """Calculate overall and per-category maturity.

    Args:
        responses: In-scope responses joined with question classification
        axis: Breakdown axis (SMS component or study area)

    Returns:
        MaturityResult; level, average and percentage are None when
        nothing is answered
    """
    axis = MaturityAxis(axis)

    ordinals: list[int] = []
    groups: dict[str, list[int]] = {}
    distribution = {level.value: 0 for level in MaturityLevel}
    total = 0

    for response in responses:
        total += 1
        if not is_answered(KIND, response):
            continue

        ordinal = maturity_ordinal(response.maturity_level)
        ordinals.append(ordinal)
        distribution[getattr(response.maturity_level, "value", response.maturity_level)] += 1

        code = getattr(response, axis.value)
        if code is not None:
            groups.setdefault(code, []).append(ordinal)

    if not ordinals:
        return MaturityResult(
            level=None,
            average=None,
            percentage=None,
            total=total,
            answered=0,
            level_distribution=distribution,
        )

    by_category = {}
    for code, values in sorted(groups.items()):
        average = sum(values) / len(values)
        by_category[code] = MaturityCategoryScore(
            code=code,
            answered=len(values),
            average=round_half_up(average, 2),
            percentage=_percentage(average),
            level=level_for_average(average).value,
        )

    gap_rank = MATURITY_ORDINALS[GAP_THRESHOLD.value]
    gap_areas = [
        code for code, score in by_category.items()
        if MATURITY_ORDINALS[score.level] < gap_rank
    ]

    average = sum(ordinals) / len(ordinals)
    return MaturityResult(
        level=level_for_average(average).value,
        average=round_half_up(average, 2),
        percentage=_percentage(average),
        total=total,
        answered=len(ordinals),
        by_category=by_category,
        level_distribution=distribution,
        gap_areas=gap_areas,
    )
