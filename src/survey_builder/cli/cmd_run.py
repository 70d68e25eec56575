"""Run command: present an interview in the terminal and print the result."""

from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import BaseModel

from survey_builder.backends.console import ConsoleBackend
from survey_builder.builder import builder_for
from survey_builder.cli._app import app
from survey_builder.cli._common import (
    ensure_initialized,
    load_overlay,
    load_target,
    settings_from_context,
    setup_logging,
)
from survey_builder.cli._console import console, print_err, stdout_console
from survey_builder.errors import Cancelled, SurveyError


def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, Path):
        return str(value)
    return value


@app.command("run", help="Ask the interview for TARGET in the terminal and print the result as JSON.")
def run_interview(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Target type as module:Name"),
    suggest: Optional[Path] = typer.Option(None, "--suggest", help="YAML file of suggested answers"),
    assume: Optional[Path] = typer.Option(None, "--assume", help="YAML file of assumed answers"),
):
    """Run an interview interactively."""
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    try:
        settings = settings_from_context(ctx.obj["settings"])
        builder = builder_for(load_target(target), settings)
        for path, value in load_overlay(suggest).items():
            builder.suggest_field(path, value)
        for path, value in load_overlay(assume).items():
            builder.assume_field(path, value)
        result = builder.with_backend(ConsoleBackend(console=console, settings=settings)).build()
    except Cancelled as e:
        print_err(str(e))
        raise SystemExit(130)
    except SurveyError as e:
        print_err(str(e))
        raise SystemExit(1)

    stdout_console.print_json(data=to_jsonable(result))
