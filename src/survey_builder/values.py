"""
Answer values and the dotted addressing scheme shared by every tree node.

A ResponseValue is a tagged union: exactly one ValueKind and a payload of the
matching Python type. A ResponsePath is the only link between a question in
the interview tree and its entry in the answer store.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any, Iterable, Optional, Tuple, Union

from survey_builder.errors import TypeMismatch

if TYPE_CHECKING:
    from survey_builder.answers import Answers


PATH_SEPARATOR = "."


class ValueKind(str, Enum):
    """Variants of ResponseValue."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    PATH = "path"
    LIST = "list"
    CHOSEN_VARIANTS = "chosen_variants"
    NESTED = "nested"


@dataclass(frozen=True)
class ResponseValue:
    """A single accepted (or candidate) answer.

    Payload types per kind:
        STRING -> str, INT -> int (never bool), FLOAT -> float, BOOL -> bool,
        PATH -> pathlib.Path, LIST -> tuple[ResponseValue, ...],
        CHOSEN_VARIANTS -> sorted tuple of distinct variant indices,
        NESTED -> Answers
    """

    kind: ValueKind
    value: Any

    def __post_init__(self):
        kind = ValueKind(self.kind)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "value", _normalize_payload(kind, self.value))

    # Constructors -------------------------------------------------------

    @classmethod
    def string(cls, value: str) -> "ResponseValue":
        return cls(ValueKind.STRING, value)

    @classmethod
    def integer(cls, value: int) -> "ResponseValue":
        return cls(ValueKind.INT, value)

    @classmethod
    def number(cls, value: float) -> "ResponseValue":
        return cls(ValueKind.FLOAT, value)

    @classmethod
    def boolean(cls, value: bool) -> "ResponseValue":
        return cls(ValueKind.BOOL, value)

    @classmethod
    def path(cls, value: Union[str, PurePath]) -> "ResponseValue":
        return cls(ValueKind.PATH, value)

    @classmethod
    def items(cls, values: Iterable[Any]) -> "ResponseValue":
        return cls(ValueKind.LIST, values)

    @classmethod
    def chosen_variants(cls, indices: Iterable[int]) -> "ResponseValue":
        return cls(ValueKind.CHOSEN_VARIANTS, indices)

    @classmethod
    def nested(cls, answers: "Answers") -> "ResponseValue":
        return cls(ValueKind.NESTED, answers)

    @classmethod
    def from_python(cls, obj: Any) -> "ResponseValue":
        """Infer the variant from a plain Python value.

        Sets become CHOSEN_VARIANTS; lists and tuples become LIST.
        """
        from survey_builder.answers import Answers

        if isinstance(obj, ResponseValue):
            return obj
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            return cls.integer(obj)
        if isinstance(obj, float):
            return cls.number(obj)
        if isinstance(obj, str):
            return cls.string(obj)
        if isinstance(obj, PurePath):
            return cls.path(obj)
        if isinstance(obj, (set, frozenset)):
            return cls.chosen_variants(obj)
        if isinstance(obj, (list, tuple)):
            return cls.items(obj)
        if isinstance(obj, Answers):
            return cls.nested(obj)
        if isinstance(obj, dict):
            return cls.nested(Answers.from_dict(obj))
        raise TypeError(f"Cannot convert {type(obj).__name__} to a ResponseValue")

    # Accessors ----------------------------------------------------------

    def expect(self, kind: ValueKind, path: Any = "<value>") -> Any:
        """Return the payload if this value has the given kind, else raise TypeMismatch."""
        if self.kind != kind:
            raise TypeMismatch(str(path), expected=kind.value, actual=self.kind.value)
        return self.value

    def to_python(self) -> Any:
        if self.kind == ValueKind.LIST:
            return [item.to_python() for item in self.value]
        if self.kind == ValueKind.CHOSEN_VARIANTS:
            return list(self.value)
        if self.kind == ValueKind.NESTED:
            return self.value.to_dict()
        return self.value

    def __str__(self) -> str:
        if self.kind == ValueKind.LIST:
            return "[" + ", ".join(str(item) for item in self.value) + "]"
        if self.kind == ValueKind.CHOSEN_VARIANTS:
            return "{" + ", ".join(str(i) for i in self.value) + "}"
        return str(self.value)


def _normalize_payload(kind: ValueKind, value: Any) -> Any:
    from survey_builder.answers import Answers

    if kind == ValueKind.STRING:
        if not isinstance(value, str):
            raise TypeError(f"String value must be str, got {type(value).__name__}")
        return value
    if kind == ValueKind.INT:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Int value must be int, got {type(value).__name__}")
        return value
    if kind == ValueKind.FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"Float value must be a number, got {type(value).__name__}")
        return float(value)
    if kind == ValueKind.BOOL:
        if not isinstance(value, bool):
            raise TypeError(f"Bool value must be bool, got {type(value).__name__}")
        return value
    if kind == ValueKind.PATH:
        if not isinstance(value, (str, PurePath)):
            raise TypeError(f"Path value must be str or Path, got {type(value).__name__}")
        return Path(value)
    if kind == ValueKind.LIST:
        return tuple(ResponseValue.from_python(item) for item in value)
    if kind == ValueKind.CHOSEN_VARIANTS:
        indices = set()
        for index in value:
            if isinstance(index, bool) or not isinstance(index, int) or index < 0:
                raise TypeError(f"Variant index must be a non-negative int, got {index!r}")
            indices.add(index)
        return tuple(sorted(indices))
    if kind == ValueKind.NESTED:
        if not isinstance(value, Answers):
            raise TypeError(f"Nested value must be Answers, got {type(value).__name__}")
        return value
    raise TypeError(f"Unknown value kind: {kind}")


@dataclass(frozen=True)
class ResponsePath:
    """Non-empty sequence of field-name segments, e.g. ("home", "village")."""

    segments: Tuple[str, ...]

    def __post_init__(self):
        segments = tuple(self.segments)
        if not segments:
            raise ValueError("ResponsePath must have at least one segment")
        for segment in segments:
            if not isinstance(segment, str) or not segment:
                raise ValueError(f"Invalid path segment: {segment!r}")
            if PATH_SEPARATOR in segment:
                raise ValueError(f"Path segment must not contain '{PATH_SEPARATOR}': {segment!r}")
        object.__setattr__(self, "segments", segments)

    @classmethod
    def parse(cls, text: str) -> "ResponsePath":
        """Parse "home.village" into ResponsePath(("home", "village"))."""
        return cls(tuple(text.split(PATH_SEPARATOR)))

    @classmethod
    def coerce(cls, path: Union[str, "ResponsePath", Iterable[str]]) -> "ResponsePath":
        if isinstance(path, ResponsePath):
            return path
        if isinstance(path, str):
            return cls.parse(path)
        return cls(tuple(path))

    @property
    def name(self) -> str:
        return self.segments[-1]

    def parent(self) -> Optional["ResponsePath"]:
        """Drop the last segment; None for a top-level path."""
        if len(self.segments) == 1:
            return None
        return ResponsePath(self.segments[:-1])

    def child(self, name: str) -> "ResponsePath":
        return ResponsePath(self.segments + (name,))

    def join(self, other: Union[str, "ResponsePath"]) -> "ResponsePath":
        return ResponsePath(self.segments + ResponsePath.coerce(other).segments)

    def is_within(self, base: Optional["ResponsePath"]) -> bool:
        if base is None:
            return True
        return self.segments[:len(base.segments)] == base.segments

    def relative_to(self, base: Optional["ResponsePath"]) -> Tuple[str, ...]:
        if base is None:
            return self.segments
        if not self.is_within(base):
            raise ValueError(f"'{self}' is not inside '{base}'")
        return self.segments[len(base.segments):]

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return PATH_SEPARATOR.join(self.segments)


def child_path(base: Optional[ResponsePath], name: str) -> ResponsePath:
    """Path of `name` under `base`, where a None base is the interview root."""
    if base is None:
        return ResponsePath((name,))
    return base.child(name)
