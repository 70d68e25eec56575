"""HTML command: render a target type's interview as a static form."""

from pathlib import Path
from typing import Optional

import typer

from survey_builder.cli._app import app
from survey_builder.cli._common import ensure_initialized, load_target, settings_from_context, setup_logging
from survey_builder.cli._console import print_err, print_ok
from survey_builder.derive import interview_for
from survey_builder.documents.html import to_html
from survey_builder.errors import SurveyError


@app.command("html", help="Render the interview for TARGET as an HTML form.")
def html_document(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Target type as module:Name"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
    title: Optional[str] = typer.Option(None, "--title", help="Document title"),
):
    """Generate a fillable HTML form."""
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    try:
        settings = settings_from_context(ctx.obj["settings"])
        html = to_html(interview_for(load_target(target), settings), title=title)
    except SurveyError as e:
        print_err(str(e))
        raise SystemExit(1)

    if output is None:
        typer.echo(html)
        return

    try:
        output.write_text(html, encoding="utf-8")
    except OSError as e:
        print_err(f"Cannot write {output}: {e}")
        raise SystemExit(1)
    print_ok(f"Wrote {output}")
