"""Domain errors raised by the assessment engine.

Every expected failure is an ``AssessmentError`` subclass. The API layer
turns them into structured JSON bodies through a single exception handler.
"""

from typing import Any


class AssessmentError(Exception):
    """Base class for expected, user-facing failures."""

    code = "assessment_error"
    status_code = 400

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "detail": self.message, **self.details}


class NotFoundError(AssessmentError):
    """Referenced assessment, question or questionnaire does not exist."""

    code = "not_found"
    status_code = 404


class ForbiddenError(AssessmentError):
    """Caller may not perform the action, or the assessment is not editable."""

    code = "forbidden"
    status_code = 403


class InvalidTransitionError(AssessmentError):
    """Requested status is not reachable from the current status."""

    code = "invalid_transition"
    status_code = 409

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(
            f"Cannot transition from {from_status} to {to_status}",
            from_status=from_status,
            to_status=to_status,
        )


class PreconditionFailedError(AssessmentError):
    """Submission attempted while in-scope questions are unanswered."""

    code = "precondition_failed"
    status_code = 422

    def __init__(self, message: str, missing: list[dict[str, Any]]) -> None:
        super().__init__(message, missing=missing)
        self.missing = missing


class ConflictError(AssessmentError):
    """State changed underneath the request, or a duplicate record exists."""

    code = "conflict"
    status_code = 409


class InvalidInputError(AssessmentError):
    """Malformed input, such as a bad questionnaire definition or scoring axis."""

    code = "validation_error"
    status_code = 422
