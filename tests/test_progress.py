"""Tests for the progress calculator."""

import pytest

from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.inputs import ScoredResponse
from aaprp.scoring.progress import compute_progress, percent_of, round_half_up

AUDIT = QuestionnaireKind.AUDIT_AREA_BASED.value
MATURITY = QuestionnaireKind.MATURITY_BASED.value


def response(question_id: str, area: str, value: str | None = None) -> ScoredResponse:
    return ScoredResponse(
        question_id=question_id,
        external_id=question_id,
        compliance_value=value,
        audit_area=area,
    )


class TestComputeProgress:
    """Tests for compute_progress."""

    def test_zero_scope_is_zero_percent(self) -> None:
        result = compute_progress(AUDIT, [], [])
        assert result.total == 0
        assert result.answered == 0
        assert result.percent == 0

    def test_partial_progress(self) -> None:
        responses = [
            response("q1", "ATS", "SATISFACTORY"),
            response("q2", "ATS"),
            response("q3", "MET", "NOT_APPLICABLE"),
        ]
        result = compute_progress(AUDIT, ["q1", "q2", "q3"], responses)

        assert result.total == 3
        assert result.answered == 2
        assert result.percent == 67
        assert result.by_category["ATS"] == {"total": 2, "answered": 1, "percent": 50}
        assert result.by_category["MET"] == {"total": 1, "answered": 1, "percent": 100}

    def test_complete(self) -> None:
        responses = [response("q1", "ATS", "SATISFACTORY"), response("q2", "ATS", "NOT_SATISFACTORY")]
        result = compute_progress(AUDIT, ["q1", "q2"], responses)
        assert result.percent == 100
        assert result.answered == result.total == 2

    def test_out_of_scope_response_never_counts(self) -> None:
        """Answering a question outside the scope moves neither count."""
        in_scope = [response("q1", "ATS", "SATISFACTORY"), response("q2", "ATS")]
        stray = response("q-met", "MET", "SATISFACTORY")

        before = compute_progress(AUDIT, ["q1", "q2"], in_scope)
        after = compute_progress(AUDIT, ["q1", "q2"], in_scope + [stray])

        assert (after.total, after.answered) == (before.total, before.answered) == (2, 1)
        assert "MET" not in after.by_category

    def test_answered_never_exceeds_total(self) -> None:
        duplicated = [response("q1", "ATS", "SATISFACTORY")] * 3
        result = compute_progress(AUDIT, ["q1"], duplicated)
        assert result.answered <= result.total

    def test_maturity_categories_by_component(self) -> None:
        responses = [
            ScoredResponse(
                question_id="m1",
                external_id="SoE 1.1",
                maturity_level="C",
                maturity_component="SAFETY_ASSURANCE",
            ),
            ScoredResponse(
                question_id="m2",
                external_id="SoE 1.2",
                maturity_component="SAFETY_ASSURANCE",
            ),
        ]
        result = compute_progress(MATURITY, ["m1", "m2"], responses)
        assert result.percent == 50
        assert result.by_category["SAFETY_ASSURANCE"]["answered"] == 1


class TestRounding:
    """Half-up rounding of percentages."""

    def test_half_rounds_up(self) -> None:
        # round() would give 12 here
        assert percent_of(1, 8) == 13

    def test_one_third(self) -> None:
        assert percent_of(1, 3) == 33

    def test_zero_denominator(self) -> None:
        assert percent_of(0, 0) == 0

    @pytest.mark.parametrize(
        ("value", "places", "expected"),
        [(2.5, 0, 3.0), (0.125, 2, 0.13), (66.666, 2, 66.67), (33.333, 2, 33.33)],
    )
    def test_round_half_up(self, value: float, places: int, expected: float) -> None:
        assert round_half_up(value, places) == expected
