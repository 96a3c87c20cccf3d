"""Completion progress of an assessment."""

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.answered import is_answered


@dataclass
class ProgressResult:
    """Answered/total counts over the in-scope questions."""
    total: int
    answered: int
    percent: int
    by_category: dict[str, dict[str, int]] = field(default_factory=dict)


def round_half_up(value: float, places: int = 0) -> float:
    """Round like a regulator's spreadsheet, not like ``round()``."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percent_of(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    return int(round_half_up(100 * part / whole))


def _category_of(kind: str, response: Any) -> str | None:
    if QuestionnaireKind(kind) is QuestionnaireKind.MATURITY_BASED:
        return response.maturity_component
    return response.audit_area


def compute_progress(
    kind: str,
    in_scope_ids: Collection[str],
    responses: Iterable[Any],
) -> ProgressResult:
    """Compute progress for an assessment.

    Responses whose question is not in scope are ignored, so they can
    never move either count.

    Args:
        kind: Questionnaire kind
        in_scope_ids: Question ids fixed at creation
        responses: Objects with ``question_id``, the answer fields and
            optionally the classification fields

    Returns:
        ProgressResult
    """
    scope = set(in_scope_ids)
    total = len(scope)

    answered_ids: set[str] = set()
    by_category: dict[str, dict[str, int]] = {}

    for response in responses:
        if response.question_id not in scope:
            continue

        category = _category_of(kind, response) if hasattr(response, "audit_area") else None
        answered = is_answered(kind, response)

        if category is not None:
            bucket = by_category.setdefault(category, {"total": 0, "answered": 0})
            bucket["total"] += 1
            if answered:
                bucket["answered"] += 1

        if answered:
            answered_ids.add(response.question_id)

    for bucket in by_category.values():
        bucket["percent"] = percent_of(bucket["answered"], bucket["total"])

    return ProgressResult(
        total=total,
        answered=len(answered_ids),
        percent=percent_of(len(answered_ids), total),
        by_category=by_category,
    )
