"""
HTML document generator.

Renders a fillable, static HTML form from an interview tree. It does not
collect responses; the form can be served, printed or processed by other
tools. Field names are the answer-store paths, so a submitted form maps
back onto the same keys presenters write.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from survey_builder.documents.nodes import form_nodes, form_title
from survey_builder.interview import Interview

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

_environment = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "j2"]),
    keep_trailing_newline=True,
)


@dataclass
class HtmlOptions:
    title: Optional[str] = None
    include_styles: bool = True
    action: Optional[str] = None


def to_html_with_options(interview: Interview, options: HtmlOptions) -> str:
    nodes = form_nodes(interview)
    title = form_title(interview, options.title)
    template = _environment.get_template("form.html.j2")
    html = template.render(
        title=title,
        prelude=interview.prelude,
        epilogue=interview.epilogue,
        include_styles=options.include_styles,
        action=options.action,
        nodes=nodes,
    )
    logger.debug("Rendered HTML form '%s' with %d top-level controls", title, len(nodes))
    return html


def to_html(interview: Interview, title: Optional[str] = None) -> str:
    """Render `interview` as a standalone HTML form."""
    return to_html_with_options(interview, HtmlOptions(title=title))
