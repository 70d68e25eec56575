"""
LaTeX document generator.

Renders an interview tree as a fillable PDF form (hyperref's Form
environment): text fields for typed input, check boxes for confirmations
and multiselects, and a popdown menu per single choice. Branch questions
follow their choice menu under an "If ..." heading.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader

from survey_builder.documents.nodes import form_nodes, form_title
from survey_builder.interview import Interview

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

_LATEX_SPECIAL = {
    "\\": r"\textbackslash{}",
    "&": r"\&",
    "%": r"\%",
    "$": r"\$",
    "#": r"\#",
    "_": r"\_",
    "{": r"\{",
    "}": r"\}",
    "~": r"\textasciitilde{}",
    "^": r"\textasciicircum{}",
}


def escape_latex(value: Any) -> str:
    """Escape characters that have a meaning in LaTeX source."""
    return "".join(_LATEX_SPECIAL.get(char, char) for char in str(value))


# Braces are everywhere in LaTeX, so the template uses \BLOCK{...} and \VAR{...}
_environment = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    block_start_string=r"\BLOCK{",
    block_end_string="}",
    variable_start_string=r"\VAR{",
    variable_end_string="}",
    comment_start_string=r"\#{",
    comment_end_string="}",
    trim_blocks=True,
    lstrip_blocks=True,
    autoescape=False,
    keep_trailing_newline=True,
)
_environment.filters["tex"] = escape_latex


def to_latex(interview: Interview, title: Optional[str] = None) -> str:
    """Render `interview` as a standalone LaTeX document with a fillable form."""
    nodes = form_nodes(interview)
    title = form_title(interview, title)
    template = _environment.get_template("form.tex.j2")
    latex = template.render(
        title=title,
        prelude=interview.prelude,
        epilogue=interview.epilogue,
        nodes=nodes,
    )
    logger.debug("Rendered LaTeX form '%s' with %d top-level controls", title, len(nodes))
    return latex
