"""Inspect command: show the interview derived for a target type."""

from typing import Any, Dict, List

import typer
from rich.tree import Tree

from survey_builder.cli._app import app
from survey_builder.cli._common import ensure_initialized, load_target, settings_from_context, setup_logging
from survey_builder.cli._console import console, output_result, print_err
from survey_builder.derive import interview_for
from survey_builder.errors import SurveyError
from survey_builder.interview import (
    Alternatives,
    ElementType,
    EmptySection,
    Interview,
    ListKind,
    NestedKind,
    Question,
    Section,
)


def describe_kind(question: Question) -> str:
    kind = question.kind
    name = type(kind).__name__.replace("Kind", "").lower()
    details = []
    if isinstance(kind, ListKind):
        name = "multiselect" if kind.element == ElementType.VARIANT else f"list[{kind.element.value}]"
    for attr in ("min", "max"):
        value = getattr(kind, attr, None)
        if value is not None:
            details.append(f"{attr}={value}")
    if getattr(kind, "path", False):
        name = "path"
    if question.optional:
        details.append("optional")
    if question.group_validators:
        details.append("propagated")
    return name + (f" ({', '.join(details)})" if details else "")


def _add_section(tree: Tree, section: Section) -> None:
    if isinstance(section, EmptySection):
        return
    if isinstance(section, Alternatives):
        _add_alternatives(tree, section, section.prompt or "Choose one")
        return
    for question in section.questions:
        _add_question(tree, question)


def _add_alternatives(tree: Tree, alternatives: Alternatives, label: str) -> None:
    node = tree.add(f"[bold]{label}[/bold] [dim]{alternatives.key}[/dim]")
    for index, alt in enumerate(alternatives.alternatives):
        marker = " [green](default)[/green]" if index == alternatives.default_index else ""
        branch = node.add(f"[cyan]{alt.display}[/cyan]{marker}")
        _add_section(branch, alt.section)


def _add_question(tree: Tree, question: Question) -> None:
    kind = question.kind
    if isinstance(kind, NestedKind) and isinstance(kind.section, Alternatives):
        _add_alternatives(tree, kind.section, question.prompt)
        return
    node = tree.add(f"{question.prompt} [dim]{question.key} · {describe_kind(question)}[/dim]")
    if isinstance(kind, ListKind) and kind.variants is not None:
        for alt in kind.variants.alternatives:
            branch = node.add(f"[cyan]{alt.display}[/cyan]")
            _add_section(branch, alt.section)


def interview_rows(interview: Interview) -> List[Dict[str, Any]]:
    rows = []
    for question in interview.iter_questions():
        rows.append({
            "path": question.key,
            "prompt": question.prompt,
            "kind": describe_kind(question),
            "optional": question.optional,
        })
    return rows


@app.command("inspect", help="Show the interview tree derived for TARGET (module:Name).")
def inspect_target(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Target type as module:Name"),
):
    """Print the interview tree for a target type."""
    ensure_initialized()
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    try:
        settings = settings_from_context(ctx.obj["settings"])
        interview = interview_for(load_target(target), settings)
    except SurveyError as e:
        print_err(str(e))
        raise SystemExit(1)

    if ctx.obj["json"]:
        output_result({"target": target, "questions": interview_rows(interview)}, ctx=ctx)
        return

    title = getattr(interview.model, "__name__", target)
    tree = Tree(f"[bold blue]{title}[/bold blue] [dim]({interview.question_count()} questions)[/dim]")
    for section in interview.sections:
        _add_section(tree, section)
    console.print(tree)
