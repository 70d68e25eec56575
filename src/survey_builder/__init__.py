"""
Survey Builder - typed interviews derived from Python types.

A target type (pydantic model, enum or union of models) is turned into an
interview tree, optionally overlaid with suggestions and assumptions,
presented by a backend that fills a flat answer store, and reconstructed
into an instance of the target type:

1. Derivation - derive.interview_for
2. Resolution - resolver.resolve
3. Presentation - backends (ConsoleBackend, TestBackend)
4. Reconstruction - reconstruct.reconstruct
"""

__version__ = "0.4.0"

from survey_builder.answers import SELECTED_ALTERNATIVE_KEY, Answers, selection_key
from survey_builder.backends import ConsoleBackend, InterviewBackend, TestBackend, WalkingBackend
from survey_builder.builder import NestedBuilder, SurveyBuilder, builder_for
from survey_builder.config import SurveySettings, get_settings, load_settings
from survey_builder.derive import (
    Ask,
    Identifier,
    Mask,
    Max,
    Min,
    Multiline,
    Multiselect,
    Validate,
    ValidateOnKey,
    interview_for,
    survey,
)
from survey_builder.errors import (
    AnswerError,
    BackendError,
    Cancelled,
    ExecutionError,
    MissingKey,
    SchemaError,
    SurveyError,
    SurveyIOError,
    TypeMismatch,
    ValidationFailure,
)
from survey_builder.interview import Interview, Question
from survey_builder.reconstruct import reconstruct
from survey_builder.resolver import Resolution, decompose, resolve
from survey_builder.values import ResponsePath, ResponseValue, ValueKind

__all__ = [
    "SELECTED_ALTERNATIVE_KEY",
    "Answers",
    "selection_key",
    "ConsoleBackend",
    "InterviewBackend",
    "TestBackend",
    "WalkingBackend",
    "NestedBuilder",
    "SurveyBuilder",
    "builder_for",
    "SurveySettings",
    "get_settings",
    "load_settings",
    "Ask",
    "Identifier",
    "Mask",
    "Max",
    "Min",
    "Multiline",
    "Multiselect",
    "Validate",
    "ValidateOnKey",
    "interview_for",
    "survey",
    "AnswerError",
    "BackendError",
    "Cancelled",
    "ExecutionError",
    "MissingKey",
    "SchemaError",
    "SurveyError",
    "SurveyIOError",
    "TypeMismatch",
    "ValidationFailure",
    "Interview",
    "Question",
    "reconstruct",
    "Resolution",
    "decompose",
    "resolve",
    "ResponsePath",
    "ResponseValue",
    "ValueKind",
]
