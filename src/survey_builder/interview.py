"""
Interview Tree - the schema describing what must be asked.

An Interview is an ordered list of Sections:
- EmptySection: nothing to ask (a unit enum variant)
- Sequence: questions asked in order (a model's fields, nested models flattened)
- Alternatives: a single choice between named branches (an enum), each branch
  holding its own subordinate Section

Every tree object is a frozen dataclass. Resolution produces a new tree via
dataclasses.replace; nothing is mutated once presentation starts.

QuestionKind mapping to answer variants:
- InputKind -> string (or path when InputKind.path is set)
- MultilineKind, MaskedKind -> string
- IntKind -> int, FloatKind -> float, ConfirmKind -> bool
- ListKind -> list (primitive elements) or chosen_variants (element=variant)
- NestedKind -> no direct answer; its section is walked in place
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePath
from typing import Any, Callable, Iterator, Optional, Tuple, Union

from survey_builder.answers import Answers, selection_key
from survey_builder.errors import SchemaError, TypeMismatch
from survey_builder.values import ResponsePath, ResponseValue, ValueKind, child_path


Validator = Callable[[ResponseValue, Answers, ResponsePath], Any]


def _check_bounds(kind_name: str, minimum: Any, maximum: Any) -> None:
    if minimum is not None and maximum is not None and minimum > maximum:
        raise SchemaError(f"{kind_name}: min ({minimum}) is greater than max ({maximum})")


@dataclass(frozen=True)
class InputKind:
    """Single-line text. With path=True the answer is a filesystem path."""

    default: Optional[Any] = None
    validate_on_key: Optional[Validator] = None
    validate_on_submit: Optional[Validator] = None
    path: bool = False


@dataclass(frozen=True)
class MultilineKind:
    default: Optional[str] = None
    validate_on_key: Optional[Validator] = None
    validate_on_submit: Optional[Validator] = None


@dataclass(frozen=True)
class MaskedKind:
    """Password-style input. Masked questions never carry a default."""

    mask: str = "*"
    validate_on_key: Optional[Validator] = None
    validate_on_submit: Optional[Validator] = None

    def __post_init__(self):
        if len(self.mask) != 1:
            raise SchemaError(f"Mask must be a single character, got {self.mask!r}")


@dataclass(frozen=True)
class IntKind:
    default: Optional[int] = None
    min: Optional[int] = None
    max: Optional[int] = None
    validate_on_key: Optional[Validator] = None
    validate_on_submit: Optional[Validator] = None

    def __post_init__(self):
        _check_bounds("IntKind", self.min, self.max)


@dataclass(frozen=True)
class FloatKind:
    default: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    validate_on_key: Optional[Validator] = None
    validate_on_submit: Optional[Validator] = None

    def __post_init__(self):
        _check_bounds("FloatKind", self.min, self.max)


@dataclass(frozen=True)
class ConfirmKind:
    default: bool = False


class ElementType(str, Enum):
    """Element type of a ListKind question."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    VARIANT = "variant"


@dataclass(frozen=True)
class ListKind:
    """A list of primitives, or an AnyOf multi-select when element is VARIANT.

    For VARIANT lists `variants` holds the Alternatives describing each
    selectable item; min/max then bound the element values of INT/FLOAT lists
    only.
    """

    element: ElementType = ElementType.STRING
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None
    default: Optional[Tuple[Any, ...]] = None
    variants: Optional["Alternatives"] = None
    validate_on_key: Optional[Validator] = None
    validate_on_submit: Optional[Validator] = None

    def __post_init__(self):
        object.__setattr__(self, "element", ElementType(self.element))
        if self.default is not None:
            object.__setattr__(self, "default", tuple(self.default))
        _check_bounds("ListKind", self.min, self.max)
        if self.element == ElementType.VARIANT and self.variants is None:
            raise SchemaError("ListKind with variant elements requires variants")
        if self.element != ElementType.VARIANT and self.variants is not None:
            raise SchemaError("Only variant lists may carry variants")


@dataclass(frozen=True)
class NestedKind:
    """A subordinate section (typically the Alternatives of an enum field)."""

    section: "Section"


QuestionKind = Union[InputKind, MultilineKind, MaskedKind, IntKind, FloatKind, ConfirmKind, ListKind, NestedKind]

# Stable, total enumeration for document generators and presenters.
QUESTION_KINDS = (InputKind, MultilineKind, MaskedKind, IntKind, FloatKind, ConfirmKind, ListKind, NestedKind)


@dataclass(frozen=True)
class Question:
    """One presentable prompt plus its kind and constraints."""

    name: str
    prompt: str
    kind: QuestionKind
    id: Optional[str] = None
    path: Optional[ResponsePath] = None
    optional: bool = False
    group_validators: Tuple[Validator, ...] = ()
    assumed: Optional[ResponseValue] = None

    def __post_init__(self):
        if not self.prompt or not self.prompt.strip():
            raise SchemaError(f"Question '{self.name}' has no prompt")
        if not isinstance(self.kind, QUESTION_KINDS):
            raise SchemaError(f"Question '{self.name}' has unknown kind {type(self.kind).__name__}")
        path = self.path if self.path is not None else ResponsePath((self.name,))
        path = ResponsePath.coerce(path)
        if path.name != self.name:
            raise SchemaError(f"Question path '{path}' does not end with its name '{self.name}'")
        object.__setattr__(self, "path", path)
        object.__setattr__(self, "group_validators", tuple(self.group_validators))

    @property
    def ident(self) -> str:
        """Machine id, defaulting to the field name."""
        return self.id or self.name

    @property
    def key(self) -> str:
        return str(self.path)

    @property
    def expected_kind(self) -> Optional[ValueKind]:
        return expected_value_kind(self.kind)

    @property
    def default(self) -> Any:
        if isinstance(self.kind, NestedKind):
            section = self.kind.section
            return section.default_index if isinstance(section, Alternatives) else None
        return getattr(self.kind, "default", None)

    def with_default(self, value: ResponseValue) -> Optional["Question"]:
        """Copy of this question pre-filled with `value`; None if the kind takes no default."""
        kind = self.kind
        if isinstance(kind, MaskedKind):
            return None
        if isinstance(kind, NestedKind):
            if not isinstance(kind.section, Alternatives):
                return None
            index = kind.section.resolve_index(value)
            return replace(self, kind=replace(kind, section=replace(kind.section, default_index=index)))
        coerced = coerce_value(self, value)
        if isinstance(kind, ListKind):
            return replace(self, kind=replace(kind, default=tuple(coerced.to_python())))
        return replace(self, kind=replace(kind, default=coerced.value))


@dataclass(frozen=True)
class EmptySection:
    """No questions (a unit enum variant)."""
    pass


@dataclass(frozen=True)
class Sequence:
    """Questions asked in declared order.

    `base` is the path under which `model`'s fields live; reconstruction
    inflates question paths relative to it.
    """

    questions: Tuple[Question, ...] = ()
    model: Optional[type] = None
    base: Optional[ResponsePath] = None

    def __post_init__(self):
        object.__setattr__(self, "questions", tuple(self.questions))
        if self.base is not None:
            object.__setattr__(self, "base", ResponsePath.coerce(self.base))
        seen = set()
        for question in self.questions:
            if question.key in seen:
                raise SchemaError(f"Duplicate question path '{question.key}'")
            seen.add(question.key)


@dataclass(frozen=True)
class Alternative:
    """A named branch of an Alternatives node.

    `target` is what reconstruction produces for this branch: an enum member,
    a model class to instantiate from the branch's Sequence, or None.
    """

    name: str
    section: "Section" = field(default_factory=EmptySection)
    label: Optional[str] = None
    target: Any = None

    @property
    def display(self) -> str:
        return self.label or self.name


@dataclass(frozen=True)
class Alternatives:
    """Single choice (OneOf) between branches; `path` scopes the selection key."""

    alternatives: Tuple[Alternative, ...]
    default_index: int = 0
    path: Optional[ResponsePath] = None
    prompt: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "alternatives", tuple(self.alternatives))
        if self.path is not None:
            object.__setattr__(self, "path", ResponsePath.coerce(self.path))
        if not self.alternatives:
            raise SchemaError("Alternatives requires at least one branch")
        names = [alt.name for alt in self.alternatives]
        if len(set(names)) != len(names):
            raise SchemaError(f"Duplicate alternative names: {names}")
        if not 0 <= self.default_index < len(self.alternatives):
            raise SchemaError(
                f"Default index {self.default_index} out of range for {len(self.alternatives)} alternatives"
            )

    @property
    def key(self) -> str:
        return selection_key(self.path)

    def branch_path(self, index: int) -> ResponsePath:
        return child_path(self.path, self.alternatives[index].name)

    def index_of(self, name: str) -> int:
        for index, alt in enumerate(self.alternatives):
            if alt.name == name:
                return index
        raise KeyError(name)

    def resolve_index(self, value: Union[ResponseValue, int, str]) -> int:
        """Branch index from a stored selection (int index or branch name)."""
        if isinstance(value, ResponseValue):
            if value.kind == ValueKind.INT:
                value = value.value
            elif value.kind == ValueKind.STRING:
                value = value.value
            else:
                raise TypeMismatch(self.key, expected="int or string", actual=value.kind.value)
        if isinstance(value, bool):
            raise TypeMismatch(self.key, expected="int or string", actual="bool")
        if isinstance(value, int):
            if not 0 <= value < len(self.alternatives):
                raise TypeMismatch(self.key, expected=f"index in [0, {len(self.alternatives) - 1}]", actual=str(value))
            return value
        try:
            return self.index_of(value)
        except KeyError:
            raise TypeMismatch(self.key, expected="a known alternative name", actual=repr(value))


Section = Union[EmptySection, Sequence, Alternatives]


@dataclass(frozen=True)
class Interview:
    """The full tree for one root type."""

    sections: Tuple[Section, ...]
    prelude: Optional[str] = None
    epilogue: Optional[str] = None
    model: Any = None

    def __post_init__(self):
        object.__setattr__(self, "sections", tuple(self.sections))

    def iter_questions(self) -> Iterator[Question]:
        for section in self.sections:
            yield from iter_questions(section)

    def iter_alternatives(self) -> Iterator[Alternatives]:
        for section in self.sections:
            yield from iter_alternatives(section)

    def find_question(self, path: Union[str, ResponsePath]) -> Optional[Question]:
        key = str(path)
        for question in self.iter_questions():
            if question.key == key:
                return question
        return None

    def question_count(self) -> int:
        return sum(1 for _ in self.iter_questions())


def iter_questions(section: Section) -> Iterator[Question]:
    """Every question in `section`, recursing into nested kinds and all branches."""
    if isinstance(section, Sequence):
        for question in section.questions:
            yield question
            if isinstance(question.kind, NestedKind):
                yield from iter_questions(question.kind.section)
            elif isinstance(question.kind, ListKind) and question.kind.variants is not None:
                yield from iter_questions(question.kind.variants)
    elif isinstance(section, Alternatives):
        for alt in section.alternatives:
            yield from iter_questions(alt.section)


def iter_alternatives(section: Section) -> Iterator[Alternatives]:
    if isinstance(section, Alternatives):
        yield section
        for alt in section.alternatives:
            yield from iter_alternatives(alt.section)
    elif isinstance(section, Sequence):
        for question in section.questions:
            if isinstance(question.kind, NestedKind):
                yield from iter_alternatives(question.kind.section)
            elif isinstance(question.kind, ListKind) and question.kind.variants is not None:
                yield from iter_alternatives(question.kind.variants)


def expected_value_kind(kind: QuestionKind) -> Optional[ValueKind]:
    """The ResponseValue variant a question of this kind stores."""
    if isinstance(kind, InputKind):
        return ValueKind.PATH if kind.path else ValueKind.STRING
    if isinstance(kind, (MultilineKind, MaskedKind)):
        return ValueKind.STRING
    if isinstance(kind, IntKind):
        return ValueKind.INT
    if isinstance(kind, FloatKind):
        return ValueKind.FLOAT
    if isinstance(kind, ConfirmKind):
        return ValueKind.BOOL
    if isinstance(kind, ListKind):
        return ValueKind.CHOSEN_VARIANTS if kind.element == ElementType.VARIANT else ValueKind.LIST
    if isinstance(kind, NestedKind):
        return None
    raise SchemaError(f"Unknown question kind: {type(kind).__name__}")


def _coerce_element(element: ElementType, item: Any, path: str) -> ResponseValue:
    if isinstance(item, ResponseValue):
        item = item.value
    if element == ElementType.STRING and isinstance(item, str):
        return ResponseValue.string(item)
    if element == ElementType.INT and isinstance(item, int) and not isinstance(item, bool):
        return ResponseValue.integer(item)
    if element == ElementType.FLOAT and isinstance(item, (int, float)) and not isinstance(item, bool):
        return ResponseValue.number(item)
    raise TypeMismatch(path, expected=f"list of {element.value}", actual=type(item).__name__)


def coerce_value(question: Question, obj: Any) -> ResponseValue:
    """Convert a plain Python value (or ResponseValue) into the variant `question` stores.

    Only lossless conversions are performed: int -> float, str -> path,
    variant names -> indices. Anything else raises TypeMismatch.
    """
    expected = question.expected_kind
    path = question.key
    if expected is None:
        raise TypeMismatch(path, expected="a branch selection", actual=type(obj).__name__)
    if isinstance(obj, ResponseValue):
        if obj.kind == expected:
            return obj
        if expected == ValueKind.FLOAT and obj.kind == ValueKind.INT:
            return ResponseValue.number(obj.value)
        if expected == ValueKind.PATH and obj.kind == ValueKind.STRING:
            return ResponseValue.path(obj.value)
        if expected == ValueKind.CHOSEN_VARIANTS and obj.kind == ValueKind.LIST:
            obj = obj.to_python()
        elif expected == ValueKind.LIST and obj.kind == ValueKind.LIST:
            obj = obj.value
        else:
            raise TypeMismatch(path, expected=expected.value, actual=obj.kind.value)

    if expected == ValueKind.STRING and isinstance(obj, str):
        return ResponseValue.string(obj)
    if expected == ValueKind.PATH and isinstance(obj, (str, PurePath)):
        return ResponseValue.path(obj)
    if expected == ValueKind.INT and isinstance(obj, int) and not isinstance(obj, bool):
        return ResponseValue.integer(obj)
    if expected == ValueKind.FLOAT and isinstance(obj, (int, float)) and not isinstance(obj, bool):
        return ResponseValue.number(obj)
    if expected == ValueKind.BOOL and isinstance(obj, bool):
        return ResponseValue.boolean(obj)
    if expected == ValueKind.LIST and isinstance(obj, (list, tuple)):
        element = question.kind.element
        return ResponseValue.items([_coerce_element(element, item, path) for item in obj])
    if expected == ValueKind.CHOSEN_VARIANTS and isinstance(obj, (list, tuple, set, frozenset)):
        variants = question.kind.variants
        indices = []
        for item in obj:
            if isinstance(item, str):
                try:
                    indices.append(variants.index_of(item))
                except KeyError:
                    raise TypeMismatch(path, expected="a known variant name", actual=repr(item))
            else:
                indices.append(item)
        try:
            return ResponseValue.chosen_variants(indices)
        except TypeError as e:
            raise TypeMismatch(path, expected="variant indices", actual=str(e))
    raise TypeMismatch(path, expected=expected.value, actual=type(obj).__name__)
