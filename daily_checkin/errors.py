"""Error types raised by the check-in core."""

from __future__ import annotations


class CheckInError(RuntimeError):
    """Base class for failures surfaced to callers as-is."""

    code = "checkin_error"
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(CheckInError):
    code = "invalid_input"


class QuestionNotFound(CheckInError):
    code = "question_not_found"

    def __init__(self, question_id: str) -> None:
        super().__init__(f"question not found: {question_id}")
        self.question_id = question_id


class DuplicateSubmission(CheckInError):
    code = "duplicate_submission"

    def __init__(self, question_id: str, user_id: str) -> None:
        super().__init__(f"answer already submitted for question {question_id}")
        self.question_id = question_id
        self.user_id = user_id


class Unauthorized(CheckInError):
    code = "unauthorized"


class StoreUnavailable(CheckInError):
    """Transient store failure; the only error worth retrying."""

    code = "store_unavailable"
    retryable = True


__all__ = [
    "CheckInError",
    "InvalidInput",
    "QuestionNotFound",
    "DuplicateSubmission",
    "Unauthorized",
    "StoreUnavailable",
]
