"""
Form nodes shared by the document generators.

Flattens an interview tree into plain dicts (one per control) that the
HTML and LaTeX templates render. Field names are the answer-store paths.
"""

from typing import Any, Dict, List, Optional

from survey_builder.errors import SchemaError
from survey_builder.interview import (
    Alternatives,
    ConfirmKind,
    ElementType,
    EmptySection,
    FloatKind,
    InputKind,
    Interview,
    IntKind,
    ListKind,
    MaskedKind,
    MultilineKind,
    NestedKind,
    Question,
    Section,
)


def dom_id(key: str) -> str:
    return "q-" + key.replace(".", "-")


def _option_nodes(alternatives: Alternatives, checked: List[int]) -> List[Dict[str, Any]]:
    options = []
    for index, alt in enumerate(alternatives.alternatives):
        options.append({
            "value": alt.name,
            "label": alt.display,
            "checked": index in checked,
            "children": section_nodes(alt.section),
        })
    return options


def _choice_node(alternatives: Alternatives, label: Optional[str], optional: bool = False) -> Dict[str, Any]:
    return {
        "control": "choice",
        "id": dom_id(alternatives.key),
        "name": alternatives.key,
        "label": label or alternatives.prompt or "Choose one",
        "required": not optional,
        "options": _option_nodes(alternatives, [] if optional else [alternatives.default_index]),
    }


def question_node(question: Question) -> Dict[str, Any]:
    kind = question.kind
    node: Dict[str, Any] = {
        "id": dom_id(question.key),
        "name": question.key,
        "label": question.prompt,
        "required": not question.optional,
        "value": None,
        "min": None,
        "max": None,
        "step": None,
        "placeholder": None,
    }

    if isinstance(kind, NestedKind):
        if isinstance(kind.section, Alternatives):
            return _choice_node(kind.section, question.prompt, question.optional)
        return {"control": "group", "label": question.prompt, "children": section_nodes(kind.section)}

    if isinstance(kind, InputKind):
        node["control"] = "text"
        node["value"] = kind.default
        if kind.path:
            node["placeholder"] = "/path/to/file"
    elif isinstance(kind, MultilineKind):
        node["control"] = "textarea"
        node["value"] = kind.default or ""
    elif isinstance(kind, MaskedKind):
        node["control"] = "password"
    elif isinstance(kind, IntKind):
        node.update(control="number", value=kind.default, min=kind.min, max=kind.max, step="1")
    elif isinstance(kind, FloatKind):
        node.update(control="number", value=kind.default, min=kind.min, max=kind.max, step="any")
    elif isinstance(kind, ConfirmKind):
        node.update(control="checkbox", checked=kind.default)
    elif isinstance(kind, ListKind) and kind.element == ElementType.VARIANT:
        return {
            "control": "multiselect",
            "id": node["id"],
            "name": question.key,
            "label": question.prompt,
            "options": _option_nodes(kind.variants, list(kind.default or ())),
        }
    elif isinstance(kind, ListKind):
        node["control"] = "text"
        node["placeholder"] = f"Comma-separated {kind.element.value} values"
        if kind.default:
            node["value"] = ", ".join(str(item) for item in kind.default)
    else:
        raise SchemaError(f"No form control for {type(kind).__name__}")
    return node


def section_nodes(section: Section) -> List[Dict[str, Any]]:
    if isinstance(section, EmptySection):
        return []
    if isinstance(section, Alternatives):
        return [_choice_node(section, None)]
    return [question_node(question) for question in section.questions]


def form_nodes(interview: Interview) -> List[Dict[str, Any]]:
    """Top-level control nodes for every section of `interview`, in order."""
    nodes: List[Dict[str, Any]] = []
    for section in interview.sections:
        nodes.extend(section_nodes(section))
    return nodes


def form_title(interview: Interview, title: Optional[str] = None) -> str:
    return title or getattr(interview.model, "__name__", None) or "Survey"
