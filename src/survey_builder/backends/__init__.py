"""Presenters that walk an interview and fill the answer store."""

from survey_builder.backends.base import InterviewBackend, WalkingBackend
from survey_builder.backends.console import ConsoleBackend
from survey_builder.backends.testing import TestBackend

__all__ = ["InterviewBackend", "WalkingBackend", "ConsoleBackend", "TestBackend"]
