"""
Reconstruction Engine - turns a filled answer store back into a typed value.

Walks the resolved tree (assumed questions included) and reads every
question's path from the store. Flattened model fields are inflated into
nested dicts by their path relative to the Sequence base and validated
into the target pydantic model.
"""

import inspect
import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from survey_builder.answers import Answers
from survey_builder.errors import MissingKey, TypeMismatch
from survey_builder.interview import (
    Alternative,
    Alternatives,
    EmptySection,
    IntKind,
    Interview,
    ListKind,
    NestedKind,
    Question,
    Section,
    Sequence,
)
from survey_builder.values import ValueKind

logger = logging.getLogger(__name__)


def _inflate(data: Dict[str, Any], segments: Tuple[str, ...], value: Any) -> None:
    """Set `value` at a nested position, creating intermediate dicts."""
    current = data
    for segment in segments[:-1]:
        current = current.setdefault(segment, {})
    current[segments[-1]] = value


class Reconstructor:
    def __init__(self, answers: Answers):
        self.answers = answers

    def section(self, section: Section) -> Any:
        if isinstance(section, EmptySection):
            return None
        if isinstance(section, Alternatives):
            return self.alternatives(section)
        return self.sequence(section)

    def sequence(self, section: Sequence) -> Any:
        data: Dict[str, Any] = {}
        for question in section.questions:
            _inflate(data, question.path.relative_to(section.base), self.question(question))

        if section.model is None:
            return data
        try:
            return section.model.model_validate(data)
        except ValidationError as e:
            location = str(section.base) if section.base else section.model.__name__
            raise TypeMismatch(location, expected=section.model.__name__, actual=str(e))

    def alternatives(self, alternatives: Alternatives) -> Any:
        stored = self.answers.get(alternatives.key)
        if stored is None:
            raise MissingKey(alternatives.key)
        index = alternatives.resolve_index(stored)
        return self.branch(alternatives.alternatives[index])

    def branch(self, alt: Alternative) -> Any:
        if isinstance(alt.section, EmptySection):
            if inspect.isclass(alt.target):
                return alt.target()
            if alt.target is not None:
                return alt.target
            return alt.name
        return self.section(alt.section)

    def question(self, question: Question) -> Any:
        kind = question.kind
        if isinstance(kind, NestedKind):
            section = kind.section
            if question.optional and isinstance(section, Alternatives) and section.key not in self.answers:
                return None
            return self.section(section)

        stored = self.answers.get(question.key)
        if stored is None:
            stored = question.assumed
        if stored is None:
            if question.optional:
                return None
            raise MissingKey(question.key)

        expected = question.expected_kind
        if stored.kind != expected:
            raise TypeMismatch(question.key, expected=expected.value, actual=stored.kind.value)

        if isinstance(kind, IntKind):
            if (kind.min is not None and stored.value < kind.min) or (kind.max is not None and stored.value > kind.max):
                raise TypeMismatch(
                    question.key,
                    expected=f"int in [{kind.min}, {kind.max}]",
                    actual=str(stored.value),
                )
            return stored.value

        if stored.kind == ValueKind.LIST:
            return stored.to_python()

        if stored.kind == ValueKind.CHOSEN_VARIANTS:
            return self.chosen(question, kind, stored.value)

        return stored.value

    def chosen(self, question: Question, kind: ListKind, indices: Tuple[int, ...]) -> list:
        branches = kind.variants.alternatives
        values = []
        for index in indices:
            if index >= len(branches):
                raise TypeMismatch(question.key, expected=f"variant index < {len(branches)}", actual=str(index))
            values.append(self.branch(branches[index]))
        return values


def reconstruct(interview: Interview, answers: Answers) -> Any:
    """Build the typed value described by `interview` from `answers`.

    Raises:
        MissingKey: A required question has no stored answer
        TypeMismatch: A stored value disagrees with its question's kind
    """
    reconstructor = Reconstructor(answers)
    results = [reconstructor.section(section) for section in interview.sections]

    result: Optional[Any]
    if len(results) == 1:
        result = results[0]
    elif all(isinstance(item, dict) for item in results):
        result = {}
        for item in results:
            result.update(item)
    else:
        result = results

    logger.debug("Reconstructed %s from %d answers", type(result).__name__, len(answers))
    return result
