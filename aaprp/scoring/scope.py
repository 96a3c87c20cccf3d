"""In-scope question resolution."""

from collections.abc import Iterable, Sequence
from typing import Any

from aaprp.models.questionnaire import QuestionnaireKind


def normalize_audit_areas(kind: str, selected_audit_areas: Iterable[str] | None) -> list[str]:
    """Deduplicate a selection, keeping order. Maturity assessments never keep one."""
    if QuestionnaireKind(kind) is not QuestionnaireKind.AUDIT_AREA_BASED:
        return []
    seen: list[str] = []
    for area in selected_audit_areas or []:
        if area not in seen:
            seen.append(area)
    return seen


def resolve_in_scope_question_ids(
    kind: str,
    questions: Sequence[Any],
    selected_audit_areas: Iterable[str] | None = None,
) -> list[str]:
    """Resolve the ids of the questions an assessment is answerable against.

    An empty selection means every audit area. The selection only narrows
    audit-area questionnaires; maturity questionnaires always take every
    active question.

    Args:
        kind: Questionnaire kind
        questions: Questions of the questionnaire (any object with ``id``,
            ``is_active``, ``audit_area`` and ``sort_order``)
        selected_audit_areas: Audit-area codes chosen at creation

    Returns:
        Question ids in questionnaire order
    """
    areas = set(normalize_audit_areas(kind, selected_audit_areas))

    in_scope = [
        q for q in questions
        if q.is_active and (not areas or q.audit_area in areas)
    ]
    in_scope.sort(key=lambda q: (q.sort_order, q.external_id))
    return [q.id for q in in_scope]
