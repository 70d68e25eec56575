"""Read-only consumers that render an interview tree as a document."""

from survey_builder.documents.html import HtmlOptions, to_html, to_html_with_options
from survey_builder.documents.latex import escape_latex, to_latex

__all__ = ["HtmlOptions", "escape_latex", "to_html", "to_html_with_options", "to_latex"]
