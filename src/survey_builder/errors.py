"""
Error taxonomy for survey construction, presentation and reconstruction.

Only ValidationFailure is recoverable: presenters catch it and re-prompt the
same question. Every other error aborts the interview and propagates to the
caller of SurveyBuilder.build() unchanged.
"""

from typing import Optional


class SurveyError(Exception):
    """Base class for all survey_builder errors."""
    pass


class SchemaError(SurveyError):
    """Raised when an interview tree cannot be constructed (bad bounds, missing prompt, ...)."""
    pass


class AnswerError(SurveyError):
    """Raised when the answer store disagrees with the interview tree."""
    pass


class MissingKey(AnswerError):
    """A question that should have been answered has no entry in the answer store."""

    def __init__(self, path: str):
        self.path = str(path)
        super().__init__(f"Missing answer for '{self.path}'")


class TypeMismatch(AnswerError):
    """A stored value's variant disagrees with the question's expected type."""

    def __init__(self, path: str, expected: str, actual: Optional[str] = None):
        self.path = str(path)
        self.expected = expected
        self.actual = actual
        message = f"Type mismatch for '{self.path}': expected {expected}"
        if actual:
            message += f", got {actual}"
        super().__init__(message)


class ValidationFailure(SurveyError):
    """A bound or custom validator rejected a candidate answer."""

    def __init__(self, path: str, message: str):
        self.path = str(path)
        self.message = message
        super().__init__(f"Validation error for '{self.path}': {message}")


class BackendError(SurveyError):
    """Presenter-level failure; always aborts the whole interview."""
    pass


class ExecutionError(BackendError):
    """The presenter could not complete the interview."""
    pass


class Cancelled(ExecutionError):
    """The user aborted the interview."""

    def __init__(self, message: str = "Interview cancelled by user"):
        super().__init__(message)


class SurveyIOError(BackendError):
    """Underlying input/output failure while presenting."""

    def __init__(self, message: str, cause: Optional[OSError] = None):
        self.cause = cause
        super().__init__(message)
