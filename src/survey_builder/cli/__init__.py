"""CLI package: Typer-based command-line interface.

Usage:
    survey-builder --help
    survey-builder inspect myapp.models:AppSettings
"""

from survey_builder.cli._app import app

# Register command modules (side-effect imports)
import survey_builder.cli.cmd_inspect  # noqa: F401
import survey_builder.cli.cmd_html  # noqa: F401
import survey_builder.cli.cmd_latex  # noqa: F401
import survey_builder.cli.cmd_run  # noqa: F401

__all__ = ["app"]
