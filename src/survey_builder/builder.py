"""
Builder surface: resolve -> present -> reconstruct.

    settings = (
        builder_for(AppSettings)
        .with_suggestions(current)
        .assume_field("port", 8080)
        .with_backend(ConsoleBackend())
        .build()
    )

Nested fields get their own builder object, filled in before build():

    builder = builder_for(Order)
    address = builder.nested("shipping_address")
    address.suggest("city", "Lausanne").assume("country", "CH")
"""

import logging
from typing import Any, Dict, Generic, Optional, TypeVar, Union

from survey_builder.config import SurveySettings, get_settings
from survey_builder.backends.base import InterviewBackend
from survey_builder.derive import interview_for
from survey_builder.errors import ExecutionError
from survey_builder.interview import Interview, Validator
from survey_builder.reconstruct import reconstruct
from survey_builder.resolver import Resolution, decompose, decompose_at, resolve
from survey_builder.values import ResponsePath

logger = logging.getLogger(__name__)

T = TypeVar("T")

PathLike = Union[str, ResponsePath]


class NestedBuilder:
    """Suggestions and assumptions for the fields below one nested field."""

    def __init__(self, parent: "SurveyBuilder", prefix: ResponsePath):
        self.parent = parent
        self.prefix = prefix

    def suggest(self, field: PathLike, value: Any) -> "NestedBuilder":
        self.parent.suggest_field(self.prefix.join(field), value)
        return self

    def assume(self, field: PathLike, value: Any) -> "NestedBuilder":
        self.parent.assume_field(self.prefix.join(field), value)
        return self

    def nested(self, field: PathLike) -> "NestedBuilder":
        return NestedBuilder(self.parent, self.prefix.join(field))


class SurveyBuilder(Generic[T]):
    """Composes resolution, presentation and reconstruction for one target type."""

    def __init__(self, target: Any, settings: Optional[SurveySettings] = None):
        self.target = target
        self.settings = settings
        self._suggested_value: Any = None
        self._suggestions: Dict[str, Any] = {}
        self._assumptions: Dict[str, Any] = {}
        self._backend: Optional[InterviewBackend] = None
        self._field_validator: Optional[Validator] = None

    def with_settings(self, settings: SurveySettings) -> "SurveyBuilder[T]":
        self.settings = settings
        return self

    def with_suggestions(self, value: T) -> "SurveyBuilder[T]":
        """Use a complete instance as defaults for every question."""
        self._suggested_value = value
        return self

    def suggest_field(self, path: PathLike, value: Any) -> "SurveyBuilder[T]":
        self._suggestions.update(decompose_at(self._schema(), path, value))
        return self

    def assume_field(self, path: PathLike, value: Any) -> "SurveyBuilder[T]":
        self._assumptions.update(decompose_at(self._schema(), path, value))
        return self

    def nested(self, field: PathLike) -> NestedBuilder:
        return NestedBuilder(self, ResponsePath.coerce(field))

    def with_backend(self, backend: InterviewBackend) -> "SurveyBuilder[T]":
        self._backend = backend
        return self

    def with_field_validator(self, validator: Validator) -> "SurveyBuilder[T]":
        """Whole-interview validator run on every submitted answer."""
        self._field_validator = validator
        return self

    def _schema(self) -> Interview:
        return interview_for(self.target, self.settings or get_settings())

    def resolution(self) -> Resolution:
        schema = self._schema()
        suggestions: Dict[str, Any] = {}
        if self._suggested_value is not None:
            suggestions.update(decompose(self._suggested_value, schema))
        suggestions.update(self._suggestions)
        return resolve(schema, suggestions, self._assumptions)

    def interview(self) -> Interview:
        """The resolved tree a backend would be given."""
        return self.resolution().interview

    def build(self) -> T:
        """
        Resolve, present and reconstruct.

        Returns:
            Instance of the target type

        Raises:
            ExecutionError: No backend configured, or the presenter failed
            MissingKey, TypeMismatch: The answers disagree with the tree
        """
        if self._backend is None:
            raise ExecutionError("No backend configured; call with_backend() first")

        resolution = self.resolution()
        answers = self._backend.execute(resolution.interview, resolution.answers, self._field_validator)
        logger.debug("Backend %s returned %d answers", type(self._backend).__name__, len(answers))
        return reconstruct(resolution.interview, answers)


def builder_for(target: Any, settings: Optional[SurveySettings] = None) -> SurveyBuilder:
    return SurveyBuilder(target, settings)
