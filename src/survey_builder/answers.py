"""
Answer Store: a flat, path-keyed map of accepted values.

Keys are dotted path strings. Every Alternatives node also records which
branch was chosen under a path-scoped reserved key (see selection_key), so
reconstruction never has to re-derive it.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from survey_builder.errors import MissingKey, TypeMismatch
from survey_builder.values import PATH_SEPARATOR, ResponsePath, ResponseValue, ValueKind


SELECTED_ALTERNATIVE_KEY = "selected_alternative"

PathLike = Union[str, ResponsePath]


def selection_key(base: Optional[PathLike]) -> str:
    """Reserved key recording the chosen branch of the Alternatives node at `base`.

    Examples:
        selection_key(None) -> "selected_alternative"
        selection_key("payment") -> "payment.selected_alternative"
    """
    if base is None:
        return SELECTED_ALTERNATIVE_KEY
    return f"{base}{PATH_SEPARATOR}{SELECTED_ALTERNATIVE_KEY}"


class Answers:
    """Flat answer store shared by presenters and the reconstruction engine."""

    def __init__(self, values: Optional[Dict[str, ResponseValue]] = None):
        self._values: Dict[str, ResponseValue] = {}
        for key, value in (values or {}).items():
            self.insert(key, value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Answers":
        """Build a store from plain Python values keyed by dotted path."""
        return cls({key: ResponseValue.from_python(value) for key, value in data.items()})

    # Mapping protocol ---------------------------------------------------

    def insert(self, path: PathLike, value: Any) -> None:
        if not isinstance(value, ResponseValue):
            value = ResponseValue.from_python(value)
        self._values[str(path)] = value

    def get(self, path: PathLike) -> Optional[ResponseValue]:
        return self._values.get(str(path))

    def __contains__(self, path: object) -> bool:
        return str(path) in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def items(self) -> List[Tuple[str, ResponseValue]]:
        return list(self._values.items())

    def keys(self) -> List[str]:
        return list(self._values.keys())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Answers):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Answers({self._values!r})"

    def merge(self, other: "Answers") -> None:
        """Copy every entry of `other` into this store (other wins on conflict)."""
        self._values.update(other._values)

    def copy(self) -> "Answers":
        clone = Answers()
        clone._values = dict(self._values)
        return clone

    def to_dict(self) -> Dict[str, Any]:
        return {key: value.to_python() for key, value in self._values.items()}

    # Typed accessors ----------------------------------------------------

    def _require(self, path: PathLike, kind: ValueKind) -> Any:
        value = self.get(path)
        if value is None:
            raise MissingKey(str(path))
        return value.expect(kind, path)

    def as_string(self, path: PathLike) -> str:
        return self._require(path, ValueKind.STRING)

    def as_int(self, path: PathLike) -> int:
        return self._require(path, ValueKind.INT)

    def as_float(self, path: PathLike) -> float:
        return self._require(path, ValueKind.FLOAT)

    def as_bool(self, path: PathLike) -> bool:
        return self._require(path, ValueKind.BOOL)

    def as_path(self, path: PathLike):
        return self._require(path, ValueKind.PATH)

    def as_list(self, path: PathLike) -> List[Any]:
        return [item.to_python() for item in self._require(path, ValueKind.LIST)]

    def as_chosen_variants(self, path: PathLike) -> Tuple[int, ...]:
        return self._require(path, ValueKind.CHOSEN_VARIANTS)

    def as_nested(self, path: PathLike) -> "Answers":
        return self._require(path, ValueKind.NESTED)

    # Alternatives -------------------------------------------------------

    def select_alternative(self, base: Optional[PathLike], index: int) -> None:
        self.insert(selection_key(base), ResponseValue.integer(index))

    def selected_alternative(self, base: Optional[PathLike]) -> Optional[ResponseValue]:
        return self.get(selection_key(base))

    # Sibling lookup for propagated validators -----------------------------

    def siblings(self, path: PathLike) -> Dict[str, ResponseValue]:
        """Accepted answers directly under path.parent(), excluding `path` itself.

        Keys are the sibling field names. Answers nested deeper than one level
        below the parent (and reserved selection keys) are not included.
        """
        path = ResponsePath.coerce(path)
        parent = path.parent()
        result = {}
        for key, value in self._values.items():
            candidate = ResponsePath.parse(key)
            if candidate == path or candidate.parent() != parent:
                continue
            if candidate.name == SELECTED_ALTERNATIVE_KEY:
                continue
            result[candidate.name] = value
        return result
