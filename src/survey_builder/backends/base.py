"""
Presenter interface and the shared interview walk.

Backends depend only on the interview tree and the answer store:
- InterviewBackend is the contract the builder talks to
- WalkingBackend implements the strictly ordered walk and the
  re-prompt loop; concrete presenters only implement the I/O hooks

A backend writes to the answer store only after a candidate passed
validation, one path at a time. It works on a copy of the pre-filled
store, so an aborted interview leaves the caller's store untouched.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from survey_builder.answers import Answers
from survey_builder.config import SurveySettings, get_settings
from survey_builder.errors import ExecutionError, ValidationFailure
from survey_builder.interview import (
    Alternatives,
    ElementType,
    EmptySection,
    Interview,
    ListKind,
    NestedKind,
    Question,
    Section,
    Validator,
)
from survey_builder.validation import check_selection, validate_on_submit
from survey_builder.values import ResponseValue

logger = logging.getLogger(__name__)


class InterviewBackend(ABC):
    """Presents an interview and returns the filled answer store."""

    @abstractmethod
    def execute(
        self,
        interview: Interview,
        answers: Optional[Answers] = None,
        field_validator: Optional[Validator] = None,
    ) -> Answers:
        """
        Present every unanswered question of `interview`.

        Args:
            interview: Resolved tree to present
            answers: Pre-filled store (assumptions); not modified
            field_validator: Optional callback run on every submitted answer

        Returns:
            New store holding the pre-filled and the accepted answers

        Raises:
            ExecutionError: Presenter failure or cancellation; no partial result
        """
        pass


class WalkingBackend(InterviewBackend):
    """Strictly ordered walk over sections, selectors and chosen branches."""

    def __init__(self, settings: Optional[SurveySettings] = None):
        self.settings = settings or get_settings()

    # Hooks -----------------------------------------------------------------

    @abstractmethod
    def ask(self, question: Question, answers: Answers) -> Optional[ResponseValue]:
        """Read one candidate for a leaf question; None skips an optional question.

        May raise ValidationFailure for input that cannot be parsed.
        """
        pass

    @abstractmethod
    def choose(
        self,
        alternatives: Alternatives,
        prompt: Optional[str],
        answers: Answers,
        optional: bool = False,
    ) -> Optional[int]:
        """Read the index of the chosen branch; None skips an optional choice.

        May raise ValidationFailure for input that cannot be parsed.
        """
        pass

    @abstractmethod
    def choose_many(self, question: Question, answers: Answers) -> Optional[ResponseValue]:
        """Read the chosen variants of a multiselect question."""
        pass

    def report_error(self, key: str, error: ValidationFailure) -> None:
        logger.info("Rejected answer for %s: %s", key, error.message)

    def show_message(self, text: str) -> None:
        pass

    # Walk ------------------------------------------------------------------

    def execute(
        self,
        interview: Interview,
        answers: Optional[Answers] = None,
        field_validator: Optional[Validator] = None,
    ) -> Answers:
        store = answers.copy() if answers is not None else Answers()

        if interview.prelude:
            self.show_message(interview.prelude)
        for section in interview.sections:
            self.walk_section(section, store, field_validator)
        if interview.epilogue:
            self.show_message(interview.epilogue)

        logger.debug("Interview complete with %d answers", len(store))
        return store

    def walk_section(self, section: Section, store: Answers, field_validator: Optional[Validator]) -> None:
        if isinstance(section, EmptySection):
            return
        if isinstance(section, Alternatives):
            index = self.select(section, None, store)
            self.walk_section(section.alternatives[index].section, store, field_validator)
            return
        for question in section.questions:
            self.walk_question(question, store, field_validator)

    def walk_question(self, question: Question, store: Answers, field_validator: Optional[Validator]) -> None:
        kind = question.kind
        if isinstance(kind, NestedKind):
            section = kind.section
            if isinstance(section, Alternatives):
                index = self.select(section, question.prompt, store, optional=question.optional)
                if index is None:
                    logger.debug("Skipped optional choice %s", section.key)
                    return
                self.walk_section(section.alternatives[index].section, store, field_validator)
            else:
                self.walk_section(section, store, field_validator)
            return

        value = store.get(question.key)
        if value is None and question.assumed is not None:
            value = question.assumed
            store.insert(question.key, value)
        if value is not None:
            logger.debug("Skipping pre-answered question %s", question.key)
        else:
            value = self.accept(question, store, field_validator)
            if value is None:
                logger.debug("Skipped optional question %s", question.key)
                return
            store.insert(question.key, value)

        if isinstance(kind, ListKind) and kind.element == ElementType.VARIANT:
            for index in value.value:
                self.walk_section(kind.variants.alternatives[index].section, store, field_validator)

    def _count_attempt(self, key: str, attempts: int) -> None:
        limit = self.settings.max_attempts
        if limit is not None and attempts >= limit:
            raise ExecutionError(f"Too many invalid answers for '{key}' ({attempts} attempts)")

    def accept(
        self,
        question: Question,
        store: Answers,
        field_validator: Optional[Validator],
    ) -> Optional[ResponseValue]:
        """Re-prompt until a candidate passes validation; the store is written by the caller."""
        attempts = 0
        while True:
            try:
                if isinstance(question.kind, ListKind) and question.kind.element == ElementType.VARIANT:
                    candidate = self.choose_many(question, store)
                else:
                    candidate = self.ask(question, store)
                if candidate is None:
                    if question.optional:
                        return None
                    raise ValidationFailure(question.key, "An answer is required")
                validate_on_submit(question, candidate, store, field_validator)
                return candidate
            except ValidationFailure as e:
                attempts += 1
                logger.debug("Attempt %d for %s rejected: %s", attempts, question.key, e.message)
                self.report_error(question.key, e)
                self._count_attempt(question.key, attempts)

    def select(
        self,
        alternatives: Alternatives,
        prompt: Optional[str],
        store: Answers,
        optional: bool = False,
    ) -> Optional[int]:
        """Chosen branch index, stored under the selection key; None leaves an optional choice unanswered."""
        stored = store.selected_alternative(alternatives.path)
        if stored is not None:
            return alternatives.resolve_index(stored)

        attempts = 0
        while True:
            try:
                index = self.choose(alternatives, prompt, store, optional)
                if index is None:
                    if optional:
                        return None
                    raise ValidationFailure(alternatives.key, "A choice is required")
                check_selection(alternatives, index)
            except ValidationFailure as e:
                attempts += 1
                self.report_error(alternatives.key, e)
                self._count_attempt(alternatives.key, attempts)
                continue
            store.select_alternative(alternatives.path, index)
            logger.debug("Selected %s for %s", alternatives.alternatives[index].name, alternatives.key)
            return index
