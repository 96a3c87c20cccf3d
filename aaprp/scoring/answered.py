"""The answered predicate.

This module is the only definition of "answered". Progress, scoring and
submission validation all call ``is_answered`` so their counts agree.

Audit-area responses count as answered when the compliance value is
SATISFACTORY, NOT_SATISFACTORY or NOT_APPLICABLE. NOT_REVIEWED is an
explicit marker that the question was not looked at and never counts.
Maturity responses count as answered when a level is set.
"""

from typing import Any

from aaprp.models.assessment import ComplianceValue
from aaprp.models.questionnaire import QuestionnaireKind

ANSWERED_COMPLIANCE_VALUES = frozenset(
    {
        ComplianceValue.SATISFACTORY.value,
        ComplianceValue.NOT_SATISFACTORY.value,
        ComplianceValue.NOT_APPLICABLE.value,
    }
)

APPLICABLE_COMPLIANCE_VALUES = frozenset(
    {
        ComplianceValue.SATISFACTORY.value,
        ComplianceValue.NOT_SATISFACTORY.value,
    }
)


def _value(field: Any) -> str | None:
    if field is None:
        return None
    return getattr(field, "value", field)


def is_answered(kind: str, response: Any) -> bool:
    """Whether ``response`` counts toward completion for a questionnaire kind.

    Args:
        kind: Questionnaire kind of the owning assessment
        response: Any object with ``compliance_value`` and ``maturity_level``

    Returns:
        True if the response is answered
    """
    if response is None:
        return False

    if QuestionnaireKind(kind) is QuestionnaireKind.MATURITY_BASED:
        return _value(response.maturity_level) is not None

    return _value(response.compliance_value) in ANSWERED_COMPLIANCE_VALUES


def is_applicable(kind: str, response: Any) -> bool:
    """Whether an audit-area response enters the EI numerator and denominator."""
    return (
        is_answered(kind, response)
        and _value(response.compliance_value) in APPLICABLE_COMPLIANCE_VALUES
    )


def is_satisfactory(response: Any) -> bool:
    return _value(response.compliance_value) == ComplianceValue.SATISFACTORY.value
