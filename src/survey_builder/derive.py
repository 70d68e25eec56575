"""
Schema derivation - builds Interview trees from Python type declarations.

Target types are pydantic models, enum.Enum classes and unions of pydantic
models. Field attributes are attached with typing.Annotated markers:

    class CharacterStats(BaseModel):
        strength: Annotated[int, Ask("Strength (1-20):"), Min(1), Max(20)]
        password: Annotated[str, Ask("Password:"), Mask()]
        bio: Annotated[str, Ask("Biography:"), Multiline(), Validate(check_bio)]

Mapping rules:
- model -> Sequence of one question per field, in declared order; a field
  whose type is itself a model is flattened inline with prefixed paths
- enum.Enum -> Alternatives with one Empty branch per member
- Union[ModelA, ModelB] -> Alternatives whose branches are the models' own
  flattened Sequences (a model without fields becomes an Empty branch)
- Optional[T] -> the question for T, marked optional
- list[Enum] / list[Union[...]] with Multiselect() -> ListKind(element=variant)
- list[str | int | float] -> ListKind of that element type

Prompt precedence: Ask marker, then Field(description=...), then the
humanized field name when SurveySettings.infer_prompts is enabled.
"""

import inspect
import logging
import types
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Annotated, Any, Callable, Dict, List, Optional, Tuple, Union, get_args, get_origin

from annotated_types import Ge, Le
from pydantic import BaseModel
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from survey_builder.config import SurveySettings, get_settings
from survey_builder.errors import SchemaError
from survey_builder.interview import (
    Alternative,
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
    Sequence,
    Validator,
)
from survey_builder.values import ResponsePath, child_path

logger = logging.getLogger(__name__)


# =============================================================================
# Field markers
# =============================================================================


@dataclass(frozen=True)
class Ask:
    """Prompt shown for a field."""
    prompt: str


@dataclass(frozen=True)
class Min:
    value: Union[int, float]


@dataclass(frozen=True)
class Max:
    value: Union[int, float]


@dataclass(frozen=True)
class Mask:
    """Hide typed input; char defaults to SurveySettings.default_mask."""
    char: Optional[str] = None


@dataclass(frozen=True)
class Multiline:
    pass


@dataclass(frozen=True)
class Multiselect:
    """Ask a list of enum variants as one AnyOf question."""
    pass


@dataclass(frozen=True)
class Validate:
    """On-submit validator for a single field."""
    fn: Validator


@dataclass(frozen=True)
class ValidateOnKey:
    """Validator presenters may run on every edit."""
    fn: Validator


@dataclass(frozen=True)
class Identifier:
    """Machine id for a question (defaults to the field name)."""
    id: str


# =============================================================================
# Class options
# =============================================================================


@dataclass(frozen=True)
class SurveyOptions:
    prelude: Optional[str] = None
    epilogue: Optional[str] = None
    validate_fields: Tuple[Validator, ...] = ()
    prompt: Optional[str] = None


_OPTIONS_ATTR = "__survey_options__"


def survey(
    prelude: Optional[str] = None,
    epilogue: Optional[str] = None,
    validate_fields: Union[Validator, Tuple[Validator, ...], None] = None,
    prompt: Optional[str] = None,
) -> Callable[[type], type]:
    """Class decorator attaching survey-level options.

    Args:
        prelude: Text shown before the first question
        epilogue: Text shown after the last question
        validate_fields: Propagated validator(s), run once per field of the class
        prompt: Label used when the class is a branch of a union
    """
    if validate_fields is None:
        validators: Tuple[Validator, ...] = ()
    elif callable(validate_fields):
        validators = (validate_fields,)
    else:
        validators = tuple(validate_fields)

    def decorate(cls: type) -> type:
        setattr(cls, _OPTIONS_ATTR, SurveyOptions(prelude, epilogue, validators, prompt))
        return cls

    return decorate


def options_for(cls: type) -> SurveyOptions:
    """Options declared directly on `cls` (not inherited)."""
    return cls.__dict__.get(_OPTIONS_ATTR) or SurveyOptions()


# =============================================================================
# Type inspection helpers
# =============================================================================


def _unwrap_annotated(tp: Any) -> Tuple[Any, List[Any]]:
    metadata: List[Any] = []
    while get_origin(tp) is Annotated:
        args = get_args(tp)
        tp = args[0]
        metadata.extend(args[1:])
    return tp, metadata


def _union_args(tp: Any) -> Optional[Tuple[Any, ...]]:
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        return get_args(tp)
    return None


def _unwrap_optional(tp: Any) -> Tuple[Any, bool, List[Any]]:
    args = _union_args(tp)
    if args is None or type(None) not in args:
        return tp, False, []
    remaining = tuple(arg for arg in args if arg is not type(None))
    if len(remaining) == 1:
        inner, metadata = _unwrap_annotated(remaining[0])
        return inner, True, metadata
    return Union[remaining], True, []


def is_model(tp: Any) -> bool:
    return inspect.isclass(tp) and issubclass(tp, BaseModel)


def is_enum(tp: Any) -> bool:
    return inspect.isclass(tp) and issubclass(tp, Enum)


def variant_models(tp: Any) -> Optional[Tuple[type, ...]]:
    """Member models of a union of pydantic models, else None."""
    tp, _ = _unwrap_annotated(tp)
    args = _union_args(tp)
    if not args:
        return None
    members = tuple(_unwrap_annotated(arg)[0] for arg in args)
    if all(is_model(member) for member in members):
        return members
    return None


def is_variant_type(tp: Any) -> bool:
    return is_enum(tp) or variant_models(tp) is not None


def humanize(name: str) -> str:
    """'max_connections' -> 'Max connections'"""
    text = name.replace("_", " ").strip()
    return text[:1].upper() + text[1:]


def _marker(metadata: List[Any], marker_type: type) -> Any:
    found = [item for item in metadata if isinstance(item, marker_type)]
    if len(found) > 1:
        raise SchemaError(f"Duplicate {marker_type.__name__} marker")
    return found[0] if found else None


def _bounds(metadata: List[Any]) -> Tuple[Any, Any]:
    minimum = maximum = None
    min_marker = _marker(metadata, Min)
    max_marker = _marker(metadata, Max)
    if min_marker is not None:
        minimum = min_marker.value
    if max_marker is not None:
        maximum = max_marker.value
    for item in metadata:
        if isinstance(item, Ge) and minimum is None:
            minimum = item.ge
        elif isinstance(item, Le) and maximum is None:
            maximum = item.le
    return minimum, maximum


def _field_default(field_info: FieldInfo) -> Any:
    default = field_info.get_default(call_default_factory=True)
    if default is PydanticUndefined or default is None:
        return None
    return default


# =============================================================================
# Builders
# =============================================================================


class InterviewDeriver:
    """Derives interview trees for one settings object."""

    def __init__(self, settings: Optional[SurveySettings] = None):
        self.settings = settings or get_settings()

    # Roots ----------------------------------------------------------------

    def interview(self, tp: Any) -> Interview:
        tp, _ = _unwrap_annotated(tp)
        if is_model(tp):
            options = options_for(tp)
            section = Sequence(questions=self.model_questions(tp, None), model=tp)
            return Interview(
                sections=[section],
                prelude=options.prelude,
                epilogue=options.epilogue,
                model=tp,
            )
        if is_variant_type(tp):
            options = options_for(tp) if inspect.isclass(tp) else SurveyOptions()
            return Interview(
                sections=[self.alternatives(tp, None)],
                prelude=options.prelude,
                epilogue=options.epilogue,
                model=tp,
            )
        raise SchemaError(f"Cannot derive an interview for {tp!r}")

    # Sections -------------------------------------------------------------

    def model_section(self, model: type, base: Optional[ResponsePath]) -> Section:
        questions = self.model_questions(model, base)
        if not questions:
            return EmptySection()
        return Sequence(questions=questions, model=model, base=base)

    def model_questions(self, model: type, base: Optional[ResponsePath]) -> List[Question]:
        options = options_for(model)
        questions: List[Question] = []
        for name, field_info in model.model_fields.items():
            questions.extend(self.field_questions(model, name, field_info, base, options.validate_fields))
        return questions

    def alternatives(
        self,
        tp: Any,
        path: Optional[ResponsePath],
        default: Any = None,
        prompt: Optional[str] = None,
    ) -> Alternatives:
        tp, _ = _unwrap_annotated(tp)
        branches: List[Alternative] = []
        default_index = 0

        if is_enum(tp):
            for index, member in enumerate(tp):
                label = member.value if isinstance(member.value, str) else None
                branches.append(Alternative(name=member.name, label=label, target=member))
                if default is member:
                    default_index = index
        else:
            for index, member_model in enumerate(variant_models(tp)):
                branch_base = child_path(path, member_model.__name__)
                section = self.model_section(member_model, branch_base)
                label = options_for(member_model).prompt
                branches.append(
                    Alternative(name=member_model.__name__, section=section, label=label, target=member_model)
                )
                if isinstance(default, member_model):
                    default_index = index

        return Alternatives(alternatives=branches, default_index=default_index, path=path, prompt=prompt)

    # Fields ---------------------------------------------------------------

    def _prompt(self, model: type, name: str, metadata: List[Any], field_info: FieldInfo) -> str:
        ask = _marker(metadata, Ask)
        if ask is not None and ask.prompt.strip():
            return ask.prompt
        if field_info.description:
            return field_info.description
        if self.settings.infer_prompts:
            return humanize(name)
        raise SchemaError(f"Field '{model.__name__}.{name}' has no prompt (add Ask(...))")

    def field_questions(
        self,
        model: type,
        name: str,
        field_info: FieldInfo,
        base: Optional[ResponsePath],
        group_validators: Tuple[Validator, ...],
    ) -> List[Question]:
        annotation, inner_metadata = _unwrap_annotated(field_info.annotation)
        annotation, optional, optional_metadata = _unwrap_optional(annotation)
        metadata = list(field_info.metadata) + inner_metadata + optional_metadata
        path = child_path(base, name)
        default = _field_default(field_info)

        if is_model(annotation):
            if optional:
                raise SchemaError(f"Field '{model.__name__}.{name}': optional nested models are not supported")
            logger.debug("Flattening %s.%s into %s", model.__name__, name, path)
            return self.model_questions(annotation, path)

        prompt = self._prompt(model, name, metadata, field_info)
        identifier = _marker(metadata, Identifier)

        if is_variant_type(annotation):
            section = self.alternatives(annotation, path, default=default, prompt=prompt)
            kind = NestedKind(section=section)
            group_validators = ()
        else:
            kind = self.field_kind(model, name, annotation, metadata, default, path)
            if isinstance(kind, ConfirmKind):
                group_validators = ()

        question = Question(
            name=name,
            prompt=prompt,
            kind=kind,
            id=identifier.id if identifier else None,
            path=path,
            optional=optional,
            group_validators=group_validators,
        )
        return [question]

    def field_kind(
        self,
        model: type,
        name: str,
        annotation: Any,
        metadata: List[Any],
        default: Any,
        path: ResponsePath,
    ):
        label = f"{model.__name__}.{name}"
        minimum, maximum = _bounds(metadata)
        validate = _marker(metadata, Validate)
        validate_on_key = _marker(metadata, ValidateOnKey)
        on_submit = validate.fn if validate else None
        on_key = validate_on_key.fn if validate_on_key else None
        mask = _marker(metadata, Mask)
        multiline = _marker(metadata, Multiline)
        multiselect = _marker(metadata, Multiselect)

        if mask is not None and multiline is not None:
            raise SchemaError(f"Field '{label}': Mask and Multiline are mutually exclusive")

        if annotation is bool:
            if on_submit or on_key:
                raise SchemaError(f"Field '{label}': confirm questions take no validators")
            return ConfirmKind(default=bool(default) if default is not None else False)

        if annotation is int:
            return IntKind(default, minimum, maximum, on_key, on_submit)

        if annotation is float:
            return FloatKind(default, minimum, maximum, on_key, on_submit)

        if annotation is str:
            if mask is not None:
                return MaskedKind(mask.char or self.settings.default_mask, on_key, on_submit)
            if multiline is not None:
                return MultilineKind(default, on_key, on_submit)
            return InputKind(default, on_key, on_submit)

        if inspect.isclass(annotation) and issubclass(annotation, PurePath):
            return InputKind(default, on_key, on_submit, path=True)

        if get_origin(annotation) in (list, tuple, set, frozenset):
            args = get_args(annotation)
            element, _ = _unwrap_annotated(args[0]) if args else (str, [])
            if is_variant_type(element):
                if multiselect is None:
                    raise SchemaError(f"Field '{label}': lists of variants need the Multiselect() marker")
                variants = self.alternatives(element, path)
                return ListKind(
                    element=ElementType.VARIANT,
                    default=self._variant_default(element, default),
                    variants=variants,
                    validate_on_key=on_key,
                    validate_on_submit=on_submit,
                )
            element_type = {str: ElementType.STRING, int: ElementType.INT, float: ElementType.FLOAT}.get(element)
            if element_type is None:
                raise SchemaError(f"Field '{label}': unsupported list element type {element!r}")
            return ListKind(
                element=element_type,
                min=minimum,
                max=maximum,
                default=tuple(default) if default is not None else None,
                validate_on_key=on_key,
                validate_on_submit=on_submit,
            )

        raise SchemaError(f"Field '{label}': unsupported type {annotation!r}")

    def _variant_default(self, element: Any, default: Any) -> Optional[Tuple[int, ...]]:
        if not default:
            return None
        if is_enum(element):
            members = list(element)
            return tuple(sorted({members.index(item) for item in default}))
        models = variant_models(element)
        return tuple(sorted({models.index(type(item)) for item in default}))


_CACHE: Dict[Tuple[Any, bool, str], Interview] = {}


def interview_for(tp: Any, settings: Optional[SurveySettings] = None) -> Interview:
    """Derive (and cache) the interview tree for a model, enum or union of models."""
    settings = settings or get_settings()
    cache_key = (tp, settings.infer_prompts, settings.default_mask)
    try:
        return _CACHE[cache_key]
    except KeyError:
        pass
    except TypeError:
        return InterviewDeriver(settings).interview(tp)

    interview = InterviewDeriver(settings).interview(tp)
    _CACHE[cache_key] = interview
    logger.debug("Derived interview for %r with %d questions", tp, interview.question_count())
    return interview
