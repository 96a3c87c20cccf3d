"""Tests for the submission readiness check."""

from aaprp.models.questionnaire import QuestionnaireKind
from aaprp.scoring.inputs import ScoredResponse
from aaprp.scoring.validation import validate_for_submission

AUDIT = QuestionnaireKind.AUDIT_AREA_BASED.value
MATURITY = QuestionnaireKind.MATURITY_BASED.value


def make(
    external_id: str,
    value: str | None = None,
    sort_order: int = 0,
    has_evidence: bool = True,
) -> ScoredResponse:
    return ScoredResponse(
        question_id=f"id-{external_id}",
        external_id=external_id,
        compliance_value=value,
        audit_area="ATS",
        sort_order=sort_order,
        has_evidence=has_evidence,
    )


class TestValidateForSubmission:
    """Tests for validate_for_submission."""

    def test_all_answered_is_ok(self) -> None:
        result = validate_for_submission(
            AUDIT,
            [make("ANS 7.001", "SATISFACTORY"), make("ANS 7.002", "NOT_APPLICABLE", 1)],
        )
        assert result.ok is True
        assert result.missing == []
        assert result.answered == result.total == 2

    def test_missing_lists_unanswered_in_order(self) -> None:
        result = validate_for_submission(
            AUDIT,
            [
                make("ANS 7.003", None, sort_order=2),
                make("ANS 7.001", "SATISFACTORY", sort_order=0),
                make("ANS 7.002", "NOT_REVIEWED", sort_order=1),
            ],
        )
        assert result.ok is False
        assert [ref.external_id for ref in result.missing] == ["ANS 7.002", "ANS 7.003"]
        assert result.missing_as_dicts() == [
            {"question_id": "id-ANS 7.002", "external_id": "ANS 7.002"},
            {"question_id": "id-ANS 7.003", "external_id": "ANS 7.003"},
        ]

    def test_empty_scope_is_ok(self) -> None:
        result = validate_for_submission(AUDIT, [])
        assert result.ok is True
        assert result.warnings == []

    def test_low_evidence_warns_without_blocking(self) -> None:
        responses = [
            make(f"ANS 7.00{i}", "SATISFACTORY", sort_order=i, has_evidence=(i == 0))
            for i in range(4)
        ]
        result = validate_for_submission(AUDIT, responses)

        assert result.ok is True
        assert len(result.warnings) == 1
        assert "25%" in result.warnings[0]

    def test_maturity_threshold(self) -> None:
        responses = [
            ScoredResponse(
                question_id=f"m{i}",
                external_id=f"SoE {i}",
                maturity_level="C",
                has_evidence=(i < 3),
                sort_order=i,
            )
            for i in range(4)
        ]
        # 75% meets the maturity threshold but not the audit one
        assert validate_for_submission(MATURITY, responses).warnings == []
