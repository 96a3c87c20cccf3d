"""Tests for in-scope question resolution."""

from dataclasses import dataclass

from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.scope import normalize_audit_areas, resolve_in_scope_question_ids

AUDIT = QuestionnaireKind.AUDIT_AREA_BASED.value
MATURITY = QuestionnaireKind.MATURITY_BASED.value


@dataclass
class FakeQuestion:
    id: str
    external_id: str
    audit_area: str | None
    sort_order: int
    is_active: bool = True


QUESTIONS = [
    FakeQuestion("q-ats-1", "ANS 7.001", "ATS", 0),
    FakeQuestion("q-ats-2", "ANS 7.035", "ATS", 1),
    FakeQuestion("q-met-1", "ANS 7.301", "MET", 2),
    FakeQuestion("q-met-2", "ANS 7.345", "MET", 3),
    FakeQuestion("q-cns-old", "ANS 7.400", "CNS", 4, is_active=False),
]


class TestResolveInScope:
    """Tests for resolve_in_scope_question_ids."""

    def test_selection_narrows_to_areas(self) -> None:
        ids = resolve_in_scope_question_ids(AUDIT, QUESTIONS, ["ATS"])
        assert ids == ["q-ats-1", "q-ats-2"]

    def test_empty_selection_means_all_active(self) -> None:
        """An empty selection covers every active question."""
        ids = resolve_in_scope_question_ids(AUDIT, QUESTIONS, [])
        assert ids == ["q-ats-1", "q-ats-2", "q-met-1", "q-met-2"]

    def test_none_selection_means_all_active(self) -> None:
        assert len(resolve_in_scope_question_ids(AUDIT, QUESTIONS, None)) == 4

    def test_inactive_questions_never_in_scope(self) -> None:
        assert resolve_in_scope_question_ids(AUDIT, QUESTIONS, ["CNS"]) == []

    def test_unknown_area_selects_nothing(self) -> None:
        assert resolve_in_scope_question_ids(AUDIT, QUESTIONS, ["SAR"]) == []

    def test_order_follows_questionnaire(self) -> None:
        shuffled = list(reversed(QUESTIONS))
        ids = resolve_in_scope_question_ids(AUDIT, shuffled, ["MET", "ATS"])
        assert ids == ["q-ats-1", "q-ats-2", "q-met-1", "q-met-2"]

    def test_maturity_ignores_selection(self) -> None:
        ids = resolve_in_scope_question_ids(MATURITY, QUESTIONS, ["ATS"])
        assert len(ids) == 4


class TestNormalizeAuditAreas:
    """Tests for normalize_audit_areas."""

    def test_duplicates_removed_in_order(self) -> None:
        assert normalize_audit_areas(AUDIT, ["MET", "ATS", "MET"]) == ["MET", "ATS"]

    def test_maturity_selection_dropped(self) -> None:
        assert normalize_audit_areas(MATURITY, ["ATS"]) == []

    def test_none_is_empty(self) -> None:
        assert normalize_audit_areas(AUDIT, None) == []
