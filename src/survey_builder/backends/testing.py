"""Scripted presenter for tests and non-interactive runs."""

import logging
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Optional, Union

from survey_builder.answers import Answers, selection_key
from survey_builder.backends.base import WalkingBackend
from survey_builder.config import SurveySettings
from survey_builder.errors import ExecutionError, TypeMismatch, ValidationFailure
from survey_builder.interview import Alternatives, Question, coerce_value
from survey_builder.values import ResponsePath, ResponseValue

logger = logging.getLogger(__name__)

PathLike = Union[str, ResponsePath]

_SKIP = object()


class TestBackend(WalkingBackend):
    """Answers questions from a script keyed by path.

    Each path holds a queue of candidates. A rejected candidate is consumed
    and the next one is submitted, so validation retries can be scripted:

        backend = TestBackend().with_int("stats.strength", 25, 18)

    Attributes:
        prompts_shown: Keys of every question and selector presented, in order
        errors: Validation failures reported during the walk
        messages: Prelude/epilogue texts shown
    """

    __test__ = False  # not a pytest test class

    def __init__(self, settings: Optional[SurveySettings] = None, accept_defaults: bool = True):
        super().__init__(settings)
        self.accept_defaults = accept_defaults
        self._script: Dict[str, Deque[Any]] = {}
        self.prompts_shown: List[str] = []
        self.errors: List[ValidationFailure] = []
        self.messages: List[str] = []

    # Script ----------------------------------------------------------------

    def with_answer(self, path: PathLike, *values: Any) -> "TestBackend":
        self._script.setdefault(str(path), deque()).extend(values)
        return self

    def with_string(self, path: PathLike, *values: str) -> "TestBackend":
        return self.with_answer(path, *[ResponseValue.string(v) for v in values])

    def with_int(self, path: PathLike, *values: int) -> "TestBackend":
        return self.with_answer(path, *[ResponseValue.integer(v) for v in values])

    def with_float(self, path: PathLike, *values: float) -> "TestBackend":
        return self.with_answer(path, *[ResponseValue.number(v) for v in values])

    def with_bool(self, path: PathLike, *values: bool) -> "TestBackend":
        return self.with_answer(path, *[ResponseValue.boolean(v) for v in values])

    def with_path(self, path: PathLike, *values: Any) -> "TestBackend":
        return self.with_answer(path, *[ResponseValue.path(v) for v in values])

    def with_list(self, path: PathLike, values: Iterable[Any]) -> "TestBackend":
        return self.with_answer(path, list(values))

    def with_choice(self, path: Optional[PathLike], *choices: Union[int, str]) -> "TestBackend":
        """Script the branch chosen for the Alternatives at `path` (None for the root)."""
        return self.with_answer(selection_key(path), *choices)

    def with_choices(self, path: PathLike, choices: Iterable[Union[int, str]]) -> "TestBackend":
        """Script a multiselect answer (variant indices or names)."""
        return self.with_answer(path, set(choices))

    def with_skip(self, path: PathLike) -> "TestBackend":
        """Leave an optional question (or the choice of an optional enum/union field) unanswered."""
        return self.with_answer(path, _SKIP)

    def remaining(self) -> Dict[str, int]:
        """Unconsumed scripted candidates per path."""
        return {key: len(queue) for key, queue in self._script.items() if queue}

    # Hooks -----------------------------------------------------------------

    def _next(self, key: str) -> Any:
        queue = self._script.get(key)
        if queue:
            return queue.popleft()
        return None

    def _peek(self, key: str) -> Any:
        queue = self._script.get(key)
        if queue:
            return queue[0]
        return None

    def ask(self, question: Question, answers: Answers) -> Optional[ResponseValue]:
        self.prompts_shown.append(question.key)
        item = self._next(question.key)
        if item is _SKIP:
            return None
        if item is None:
            if self.accept_defaults and question.default is not None:
                return coerce_value(question, question.default)
            if question.optional:
                return None
            raise ExecutionError(f"No scripted answer for '{question.key}'")
        try:
            return coerce_value(question, item)
        except TypeMismatch as e:
            raise ValidationFailure(question.key, str(e))

    def choose(
        self,
        alternatives: Alternatives,
        prompt: Optional[str],
        answers: Answers,
        optional: bool = False,
    ) -> Optional[int]:
        self.prompts_shown.append(alternatives.key)
        item = self._next(alternatives.key)
        if item is None and alternatives.path is not None and self._peek(str(alternatives.path)) is _SKIP:
            # with_skip() on the field itself skips its choice
            item = self._next(str(alternatives.path))
        if item is _SKIP:
            return None
        if item is None:
            if self.accept_defaults:
                return alternatives.default_index
            if optional:
                return None
            raise ExecutionError(f"No scripted choice for '{alternatives.key}'")
        if isinstance(item, str):
            try:
                return alternatives.index_of(item)
            except KeyError:
                return -1
        return item

    def choose_many(self, question: Question, answers: Answers) -> Optional[ResponseValue]:
        return self.ask(question, answers)

    def report_error(self, key: str, error: ValidationFailure) -> None:
        super().report_error(key, error)
        self.errors.append(error)

    def show_message(self, text: str) -> None:
        self.messages.append(text)
