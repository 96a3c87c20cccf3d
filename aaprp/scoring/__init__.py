"""Pure scoring, progress and validation functions for assessments."""

from aaprp.scoring.answered import is_answered, is_applicable
from aaprp.scoring.ei import EIAxis, EIResult, calculate_ei_score
from aaprp.scoring.inputs import ScoredResponse
from aaprp.scoring.maturity import MaturityAxis, MaturityResult, calculate_maturity
from aaprp.scoring.progress import ProgressResult, compute_progress
from aaprp.scoring.scope import resolve_in_scope_question_ids
from aaprp.scoring.summary import ScoreSummary, calculate_scores
from aaprp.scoring.validation import QuestionRef, SubmissionValidation, validate_for_submission

__all__ = [
    "is_answered",
    "is_applicable",
    "EIAxis",
    "EIResult",
    "calculate_ei_score",
    "ScoredResponse",
    "MaturityAxis",
    "MaturityResult",
    "calculate_maturity",
    "ProgressResult",
    "compute_progress",
    "resolve_in_scope_question_ids",
    "ScoreSummary",
    "calculate_scores",
    "QuestionRef",
    "SubmissionValidation",
    "validate_for_submission",
]
