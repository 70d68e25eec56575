"""Settings for derivation and presentation.

Settings can be built in code, read from environment variables
(SURVEY_INFER_PROMPTS, SURVEY_DEFAULT_MASK, SURVEY_MAX_ATTEMPTS, ...) or
loaded from a YAML file.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from survey_builder.errors import SurveyError

logger = logging.getLogger(__name__)


class SettingsLoadError(SurveyError):
    """Raised when a settings file cannot be loaded or is invalid."""
    pass


class SurveySettings(BaseModel):
    """Process-wide survey settings.

    Attributes:
        infer_prompts: Derive a prompt from the field name when a field has
            neither an Ask marker nor a description.
        default_mask: Mask character used by Mask() markers without one.
        max_attempts: Re-prompt limit per question; None means unlimited.
        list_separator: Separator for list answers typed on one line.
        multiline_terminator: Line that ends multi-line input.
    """

    infer_prompts: bool = False
    default_mask: str = Field(default="*", min_length=1, max_length=1)
    max_attempts: Optional[int] = Field(default=None, ge=1)
    list_separator: str = Field(default=",", min_length=1)
    multiline_terminator: str = ""

    model_config = {"extra": "forbid"}

    @field_validator("list_separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Whitespace-only separators cannot be told apart from padding."""
        if not v.strip():
            raise ValueError("list_separator must contain a visible character")
        return v

    @classmethod
    def from_env(cls, prefix: str = "SURVEY_") -> "SurveySettings":
        """Create settings from environment variables.

        Environment variables:
            {prefix}INFER_PROMPTS: "1"/"true"/"yes" to enable
            {prefix}DEFAULT_MASK: Mask character
            {prefix}MAX_ATTEMPTS: Re-prompt limit
            {prefix}LIST_SEPARATOR: List separator
            {prefix}MULTILINE_TERMINATOR: Terminator line

        Args:
            prefix: Environment variable prefix (default: SURVEY_)

        Returns:
            SurveySettings with values from environment
        """
        kwargs = {}

        infer_prompts = os.getenv(f"{prefix}INFER_PROMPTS")
        if infer_prompts:
            kwargs["infer_prompts"] = infer_prompts.strip().lower() in ("1", "true", "yes", "on")

        default_mask = os.getenv(f"{prefix}DEFAULT_MASK")
        if default_mask:
            kwargs["default_mask"] = default_mask

        max_attempts = os.getenv(f"{prefix}MAX_ATTEMPTS")
        if max_attempts:
            kwargs["max_attempts"] = int(max_attempts)

        list_separator = os.getenv(f"{prefix}LIST_SEPARATOR")
        if list_separator:
            kwargs["list_separator"] = list_separator

        terminator = os.getenv(f"{prefix}MULTILINE_TERMINATOR")
        if terminator is not None:
            kwargs["multiline_terminator"] = terminator

        return cls(**kwargs)


def load_settings(file_path: Union[str, Path]) -> SurveySettings:
    """
    Load settings from a YAML file.

    Args:
        file_path: Path to the YAML settings file

    Returns:
        Validated SurveySettings

    Raises:
        SettingsLoadError: If the file is missing, not YAML, or has invalid keys
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise SettingsLoadError(f"Settings file not found: {file_path}")
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"Invalid YAML in settings file: {e}")

    if not isinstance(data, dict):
        raise SettingsLoadError("Settings file must contain a mapping")

    try:
        settings = SurveySettings(**data)
    except ValidationError as e:
        raise SettingsLoadError(f"Invalid settings in {file_path}: {e}")

    logger.debug("Loaded settings from %s", file_path)
    return settings


@lru_cache(maxsize=1)
def get_settings() -> SurveySettings:
    """Process default settings, read once from the environment."""
    return SurveySettings.from_env()
