"""
Validation Engine - per-question and propagated (group) validators.

Validators have the signature:

    def validator(candidate: ResponseValue, answers: Answers, path: ResponsePath) -> None

and reject a candidate by raising ValueError(message), the same convention
pydantic uses for field validators. Returning a non-empty string also
rejects with that message.

Order on submit:
1. Value kind must match the question kind
2. Numeric bounds (inclusive, not bypassable)
3. The question's own on-submit validator
4. Propagated validators of the enclosing model, one call per field
5. An optional whole-interview callback supplied by the presenter

The engine never writes to the answer store; a rejected candidate leaves it
exactly as it was.
"""

import logging
import math
from typing import Any, Optional

from survey_builder.answers import Answers
from survey_builder.errors import ValidationFailure
from survey_builder.interview import (
    Alternatives,
    ElementType,
    FloatKind,
    IntKind,
    ListKind,
    NestedKind,
    Question,
    Validator,
)
from survey_builder.values import ResponsePath, ResponseValue, ValueKind

logger = logging.getLogger(__name__)


def check_value_kind(question: Question, candidate: ResponseValue) -> None:
    """Reject a candidate whose variant differs from what the question stores."""
    expected = question.expected_kind
    if expected is None:
        raise ValidationFailure(question.key, "This question takes no direct answer")
    if candidate.kind != expected:
        raise ValidationFailure(
            question.key,
            f"Expected a {expected.value} value, got {candidate.kind.value}",
        )


def _check_range(path: str, value: Any, minimum: Any, maximum: Any, label: str = "Value") -> None:
    if (minimum is not None or maximum is not None) and isinstance(value, float) and math.isnan(value):
        raise ValidationFailure(path, f"{label} must be a number")
    if minimum is not None and value < minimum:
        raise ValidationFailure(path, f"{label} must be at least {minimum}")
    if maximum is not None and value > maximum:
        raise ValidationFailure(path, f"{label} must be at most {maximum}")


def check_bounds(question: Question, candidate: ResponseValue) -> None:
    """Inclusive min/max checks; list bounds apply element-wise."""
    kind = question.kind
    path = question.key

    if isinstance(kind, (IntKind, FloatKind)):
        _check_range(path, candidate.value, kind.min, kind.max)
        return

    if isinstance(kind, ListKind):
        if kind.element == ElementType.VARIANT:
            count = len(kind.variants.alternatives)
            for index in candidate.value:
                if index >= count:
                    raise ValidationFailure(path, f"Unknown choice {index} (only {count} options)")
            return
        if kind.element in (ElementType.INT, ElementType.FLOAT):
            for position, item in enumerate(candidate.value):
                _check_range(path, item.value, kind.min, kind.max, label=f"Item {position + 1}")


def check_selection(alternatives: Alternatives, index: int) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(alternatives.alternatives):
        raise ValidationFailure(alternatives.key, f"Choose one of 1-{len(alternatives.alternatives)}")


def run_validator(
    validator: Validator,
    candidate: ResponseValue,
    answers: Answers,
    path: ResponsePath,
) -> None:
    """Invoke one validator, translating its rejection into ValidationFailure."""
    try:
        result = validator(candidate, answers, path)
    except ValueError as e:
        raise ValidationFailure(str(path), str(e))
    if isinstance(result, str) and result:
        raise ValidationFailure(str(path), result)
    if result is False:
        raise ValidationFailure(str(path), "Invalid value")


def validate_on_key(question: Question, candidate: ResponseValue, answers: Answers) -> None:
    """Run the question's on-key validator, if any. Presenters call this at their discretion."""
    validator = getattr(question.kind, "validate_on_key", None)
    if validator is not None:
        run_validator(validator, candidate, answers, question.path)


def validate_on_submit(
    question: Question,
    candidate: ResponseValue,
    answers: Answers,
    field_validator: Optional[Validator] = None,
) -> None:
    """Full acceptance check for a candidate answer.

    Raises:
        ValidationFailure: On the first failing check
    """
    if isinstance(question.kind, NestedKind):
        raise ValidationFailure(question.key, "Nested questions are answered through their section")

    check_value_kind(question, candidate)
    check_bounds(question, candidate)

    validator = getattr(question.kind, "validate_on_submit", None)
    if validator is not None:
        run_validator(validator, candidate, answers, question.path)

    for group_validator in question.group_validators:
        run_validator(group_validator, candidate, answers, question.path)

    if field_validator is not None:
        run_validator(field_validator, candidate, answers, question.path)

    logger.debug("Accepted candidate for %s: %s", question.key, candidate)


def is_valid(question: Question, candidate: ResponseValue, answers: Answers) -> bool:
    """Convenience wrapper for presenters that only need a yes/no answer."""
    try:
        validate_on_submit(question, candidate, answers)
    except ValidationFailure:
        return False
    return True


def sum_of_siblings(answers: Answers, path: ResponsePath, candidate: ResponseValue) -> float:
    """Running total of numeric sibling answers plus the candidate.

    Helper for propagated validators expressing "sum of these fields <= N".
    """
    total = candidate.value if candidate.kind in (ValueKind.INT, ValueKind.FLOAT) else 0
    for value in answers.siblings(path).values():
        if value.kind in (ValueKind.INT, ValueKind.FLOAT):
            total += value.value
    return total
