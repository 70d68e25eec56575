"""Shared CLI utilities: startup, logging, target and overlay loading."""

import importlib
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv
from rich.logging import RichHandler

from survey_builder.config import SurveySettings, get_settings, load_settings
from survey_builder.errors import SchemaError, SurveyIOError
from survey_builder.values import PATH_SEPARATOR

logger = logging.getLogger(__name__)

_initialized = False


def ensure_initialized() -> None:
    """Load .env from the working directory (once) before settings are read."""
    global _initialized
    if _initialized:
        return
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path)
    _initialized = True


def setup_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging with Rich handler."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = RichHandler(
        console=None,  # Use default stderr
        show_time=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def settings_from_context(settings_path: Optional[Path]) -> SurveySettings:
    if settings_path is not None:
        return load_settings(settings_path)
    return get_settings()


def load_target(target_spec: str) -> Any:
    """Import a target type from 'package.module:Name'.

    Raises:
        SchemaError: If the target string is malformed or the attribute does not exist
    """
    module_name, sep, attr = target_spec.partition(":")
    if not sep or not module_name or not attr:
        raise SchemaError(f"Target must look like 'module:Name', got '{target_spec}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SchemaError(f"Cannot import module '{module_name}': {e}")

    target: Any = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise SchemaError(f"Module '{module_name}' has no attribute '{attr}'")
    return target


def flatten_overlay(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Turn nested YAML mappings into dotted answer paths.

    Example:
        {"payment": {"selected_alternative": "CreditCard"}} ->
        {"payment.selected_alternative": "CreditCard"}
    """
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        path = f"{prefix}{PATH_SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten_overlay(value, path))
        else:
            flat[path] = value
    return flat


def load_overlay(file_path: Optional[Path]) -> Dict[str, Any]:
    """Read a suggestions/assumptions YAML file into dotted paths."""
    if file_path is None:
        return {}
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise SurveyIOError(f"Cannot read {file_path}: {e}", cause=e)
    except yaml.YAMLError as e:
        raise SurveyIOError(f"Invalid YAML in {file_path}: {e}")

    if not isinstance(data, dict):
        raise SurveyIOError(f"{file_path} must contain a mapping")
    overlay = flatten_overlay(data)
    logger.debug("Loaded %d overlay values from %s", len(overlay), file_path)
    return overlay
