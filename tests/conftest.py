"""
Pytest fixtures and configuration for survey_builder tests.
Provides common test utilities and shared fixtures.
"""

import io

import pytest
from rich.console import Console

from survey_builder.answers import Answers
from survey_builder.config import SurveySettings, get_settings


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch):
    """Keep SURVEY_* variables from the developer's shell out of the tests."""
    for name in (
        "SURVEY_INFER_PROMPTS",
        "SURVEY_DEFAULT_MASK",
        "SURVEY_MAX_ATTEMPTS",
        "SURVEY_LIST_SEPARATOR",
        "SURVEY_MULTILINE_TERMINATOR",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return SurveySettings()


@pytest.fixture
def answers():
    """An empty answer store."""
    return Answers()


@pytest.fixture
def console_output():
    """In-memory rich console; read back with .file.getvalue()."""
    return Console(file=io.StringIO(), force_terminal=False, width=120)


def make_stream(*lines: str) -> io.StringIO:
    """Input stream feeding one line per argument to a ConsoleBackend."""
    return io.StringIO("".join(line + "\n" for line in lines))


@pytest.fixture
def stream_factory():
    return make_stream
