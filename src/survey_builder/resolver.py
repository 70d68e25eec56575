"""
Suggestion / Assumption Resolver.

Overlays caller-supplied values onto an interview before it is presented:

- suggestions become question defaults (still asked, still editable,
  still validated) and pre-select default branches
- assumptions are binding: the question is marked as assumed and the
  value is written straight into the pre-filled answer store, so
  presenters skip it

Suggestions are applied first and assumptions last, so an assumption wins
over a suggestion for the same path. The input tree is never modified.
"""

import inspect
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Set, Union

from pydantic import BaseModel

from survey_builder.answers import Answers
from survey_builder.errors import TypeMismatch
from survey_builder.interview import (
    Alternatives,
    ElementType,
    EmptySection,
    Interview,
    ListKind,
    NestedKind,
    Question,
    Section,
    Sequence,
    coerce_value,
)
from survey_builder.values import ResponsePath, ResponseValue

logger = logging.getLogger(__name__)

Overlay = Mapping[str, Any]


@dataclass(frozen=True)
class Resolution:
    """Resolved tree plus the answers pre-filled by assumptions."""
    interview: Interview
    answers: Answers


# =============================================================================
# Decomposition: typed instance -> per-path values
# =============================================================================


def branch_index(alternatives: Alternatives, obj: Any) -> int:
    """Index of the branch that produced `obj` (enum member, model instance or branch name)."""
    for index, alt in enumerate(alternatives.alternatives):
        target = alt.target
        if target is obj:
            return index
        if inspect.isclass(target) and isinstance(obj, target):
            return index
    if isinstance(obj, (str, int)) and not isinstance(obj, bool):
        return alternatives.resolve_index(obj)
    raise TypeMismatch(alternatives.key, expected="one of " + ", ".join(a.name for a in alternatives.alternatives),
                       actual=type(obj).__name__)


def _lookup(obj: Any, segments) -> Any:
    for segment in segments:
        if obj is None:
            return None
        if isinstance(obj, Mapping):
            obj = obj.get(segment)
        else:
            obj = getattr(obj, segment, None)
    return obj


def _decompose_question(question: Question, value: Any, out: Dict[str, Any]) -> None:
    kind = question.kind
    if isinstance(kind, NestedKind):
        _decompose_section(kind.section, value, out)
        return
    if isinstance(kind, ListKind) and kind.element == ElementType.VARIANT:
        indices = []
        for item in value:
            index = branch_index(kind.variants, item)
            indices.append(index)
            _decompose_section(kind.variants.alternatives[index].section, item, out)
        out[question.key] = ResponseValue.chosen_variants(indices)
        return
    out[question.key] = value


def _decompose_section(section: Section, obj: Any, out: Dict[str, Any]) -> None:
    if isinstance(section, EmptySection) or obj is None:
        return
    if isinstance(section, Alternatives):
        index = branch_index(section, obj)
        out[section.key] = ResponseValue.integer(index)
        _decompose_section(section.alternatives[index].section, obj, out)
        return
    for question in section.questions:
        value = _lookup(obj, question.path.relative_to(section.base))
        if value is not None:
            _decompose_question(question, value, out)


def decompose(value: Any, interview: Interview) -> Dict[str, Any]:
    """Split a typed instance into per-path values following the tree's shape.

    Model fields map to their question paths; every enum/union value also
    yields its branch index under the Alternatives selection key.
    """
    out: Dict[str, Any] = {}
    for section in interview.sections:
        _decompose_section(section, value, out)
    return out


def decompose_at(interview: Interview, path: Union[str, ResponsePath], value: Any) -> Dict[str, Any]:
    """Per-path values for `value` placed at `path` (a question or a flattened model field)."""
    path = ResponsePath.coerce(path)
    question = interview.find_question(path)
    if question is not None:
        if isinstance(value, ResponseValue):
            return {question.key: value}
        out: Dict[str, Any] = {}
        if isinstance(question.kind, NestedKind) and not isinstance(value, (BaseModel, Enum)):
            alternatives = question.kind.section
            out[alternatives.key] = value
            return out
        _decompose_question(question, value, out)
        return out
    if isinstance(value, BaseModel):
        out = {}
        for name in type(value).model_fields:
            field_value = getattr(value, name)
            if field_value is not None:
                out.update(decompose_at(interview, path.child(name), field_value))
        return out
    if isinstance(value, Mapping):
        out = {}
        for key, item in value.items():
            out.update(decompose_at(interview, path.child(str(key)), item))
        return out
    return {str(path): value}


# =============================================================================
# Resolution
# =============================================================================


class _Resolver:
    def __init__(self, suggestions: Overlay, assumptions: Overlay):
        self.suggestions = {str(k): v for k, v in suggestions.items()}
        self.assumptions = {str(k): v for k, v in assumptions.items()}
        self.answers = Answers()
        self.used: Set[str] = set()

    def section(self, section: Section, selectable: bool = True) -> Section:
        if isinstance(section, Sequence):
            return replace(section, questions=tuple(self.question(q) for q in section.questions))
        if isinstance(section, Alternatives):
            branches = tuple(replace(alt, section=self.section(alt.section)) for alt in section.alternatives)
            resolved = replace(section, alternatives=branches)
            if selectable:
                resolved = self.selection(resolved)
            return resolved
        return section

    def selection(self, alternatives: Alternatives) -> Alternatives:
        key = alternatives.key
        if key in self.suggestions:
            index = alternatives.resolve_index(self.suggestions[key])
            alternatives = replace(alternatives, default_index=index)
            self.used.add(key)
        if key in self.assumptions:
            index = alternatives.resolve_index(self.assumptions[key])
            alternatives = replace(alternatives, default_index=index)
            self.answers.select_alternative(alternatives.path, index)
            self.used.add(key)
        return alternatives

    def question(self, question: Question) -> Question:
        kind = question.kind
        if isinstance(kind, NestedKind):
            question = replace(question, kind=replace(kind, section=self.section(kind.section)))
        elif isinstance(kind, ListKind) and kind.variants is not None:
            variants = self.section(kind.variants, selectable=False)
            question = replace(question, kind=replace(kind, variants=variants))

        key = question.key
        if key in self.suggestions:
            self.used.add(key)
            suggested = question.with_default(self.suggestions[key])
            if suggested is None:
                logger.debug("Question '%s' takes no default; suggestion ignored", key)
            else:
                question = suggested

        if key in self.assumptions:
            self.used.add(key)
            if isinstance(question.kind, NestedKind):
                alternatives = question.kind.section
                index = alternatives.resolve_index(self.assumptions[key])
                self.answers.select_alternative(alternatives.path, index)
                section = replace(alternatives, default_index=index)
                question = replace(question, kind=replace(question.kind, section=section))
            else:
                value = coerce_value(question, self.assumptions[key])
                self.answers.insert(key, value)
                question = replace(question, assumed=value)
        return question


def resolve(
    interview: Interview,
    suggestions: Optional[Overlay] = None,
    assumptions: Optional[Overlay] = None,
) -> Resolution:
    """Apply suggestions, then assumptions, to a copy of `interview`.

    Args:
        interview: Tree to resolve (left untouched)
        suggestions: Path -> value defaults (plain Python values or ResponseValues)
        assumptions: Path -> binding values

    Returns:
        Resolution with the new tree and the answers pre-filled by assumptions

    Raises:
        TypeMismatch: If an assumption's value cannot be stored by its question
    """
    resolver = _Resolver(suggestions or {}, assumptions or {})
    sections = tuple(resolver.section(section) for section in interview.sections)

    unknown = (set(resolver.suggestions) | set(resolver.assumptions)) - resolver.used
    for key in sorted(unknown):
        logger.debug("No question at '%s'; overlay value ignored", key)

    logger.debug(
        "Resolved interview: %d suggestions, %d assumptions (%d unused)",
        len(resolver.suggestions),
        len(resolver.assumptions),
        len(unknown),
    )
    return Resolution(interview=replace(interview, sections=sections), answers=resolver.answers)
