"""Unit tests for deriving interview trees from pydantic models and enums."""

from enum import Enum
from typing import Annotated, List, Optional

import pytest
from pydantic import BaseModel

from survey_builder.config import SurveySettings
from survey_builder.derive import Ask, Mask, Max, Min, Multiline, Validate, humanize, interview_for, survey
from survey_builder.errors import SchemaError
from survey_builder.interview import (
    Alternatives,
    ConfirmKind,
    ElementType,
    EmptySection,
    FloatKind,
    InputKind,
    IntKind,
    ListKind,
    MaskedKind,
    MultilineKind,
    NestedKind,
    Sequence,
)
from tests.fixtures.surveys import (
    Account,
    AppSettings,
    Bounded,
    Budget,
    Cash,
    Checkout,
    CreditCard,
    Described,
    Household,
    Inventory,
    Paint,
    PaymentMethod,
    Playlist,
    Theme,
    Unprompted,
)


class TestModelDerivation:
    """A model becomes one Sequence of questions in declared order."""

    def test_field_order_and_kinds(self):
        interview = interview_for(AppSettings)
        (section,) = interview.sections
        assert isinstance(section, Sequence)
        assert section.model is AppSettings
        assert [q.name for q in section.questions] == [
            "name", "port", "ratio", "debug", "data_dir", "theme", "tags", "notes",
        ]
        kinds = {q.name: q.kind for q in section.questions}
        assert isinstance(kinds["name"], InputKind)
        assert isinstance(kinds["port"], IntKind)
        assert isinstance(kinds["ratio"], FloatKind)
        assert isinstance(kinds["debug"], ConfirmKind)
        assert kinds["data_dir"].path is True
        assert isinstance(kinds["theme"], NestedKind)
        assert kinds["tags"].element == ElementType.STRING

    def test_prelude_and_epilogue(self):
        interview = interview_for(AppSettings)
        assert interview.prelude == "Configure the application."
        assert interview.epilogue == "Settings saved."

    def test_defaults_and_bounds(self):
        interview = interview_for(AppSettings)
        port = interview.find_question("port")
        assert port.kind.default == 8080
        assert (port.kind.min, port.kind.max) == (1, 65535)
        assert interview.find_question("debug").kind.default is False

    def test_identifier_marker(self):
        assert interview_for(AppSettings).find_question("name").ident == "app-name"

    def test_optional_field(self):
        notes = interview_for(AppSettings).find_question("notes")
        assert notes.optional is True
        assert isinstance(notes.kind, InputKind)

    def test_masked_and_multiline(self):
        interview = interview_for(Account)
        password = interview.find_question("password")
        assert isinstance(password.kind, MaskedKind)
        assert password.kind.mask == "*"
        assert password.kind.validate_on_submit is not None
        assert isinstance(interview.find_question("bio").kind, MultilineKind)

    def test_field_constraints_become_bounds(self):
        weight = interview_for(Bounded).find_question("weight")
        assert (weight.kind.min, weight.kind.max) == (0.5, 2.5)

    def test_list_bounds_apply_to_elements(self):
        scores = interview_for(Bounded).find_question("scores")
        assert scores.kind.element == ElementType.INT
        assert (scores.kind.min, scores.kind.max) == (0, 100)

    def test_propagated_validator_attached_to_each_field(self):
        section = interview_for(Budget).sections[0]
        assert all(len(q.group_validators) == 1 for q in section.questions)


class TestFlattening:
    """Nested models are spliced inline with prefixed paths."""

    def test_nested_model_paths(self):
        interview = interview_for(Checkout)
        section = interview.sections[0]
        assert [q.key for q in section.questions] == [
            "customer", "shipping.street", "shipping.city", "payment",
        ]

    def test_union_field_becomes_alternatives(self):
        payment = interview_for(Checkout).find_question("payment")
        alternatives = payment.kind.section
        assert isinstance(alternatives, Alternatives)
        assert alternatives.key == "payment.selected_alternative"
        assert [alt.name for alt in alternatives.alternatives] == ["Cash", "CreditCard", "BankTransfer"]
        assert isinstance(alternatives.alternatives[0].section, EmptySection)
        assert alternatives.alternatives[1].label == "Credit card"

    def test_branch_paths_include_variant_name(self):
        interview = interview_for(Checkout)
        assert interview.find_question("payment.CreditCard.card_number") is not None
        card = interview.find_question("payment").kind.section.alternatives[1].section
        assert str(card.base) == "payment.CreditCard"
        assert card.model is CreditCard


class TestEnumsAndUnions:

    def test_enum_root(self):
        interview = interview_for(Theme)
        (alternatives,) = interview.sections
        assert alternatives.key == "selected_alternative"
        assert [alt.display for alt in alternatives.alternatives] == ["Light", "Dark", "Follow the system"]
        assert alternatives.alternatives[2].target is Theme.SYSTEM

    def test_enum_field_default_selects_branch(self):
        theme = interview_for(AppSettings).find_question("theme")
        assert theme.kind.section.default_index == 1

    def test_union_root(self):
        interview = interview_for(PaymentMethod)
        (alternatives,) = interview.sections
        assert alternatives.path is None
        assert alternatives.alternatives[0].target is Cash
        assert interview.find_question("CreditCard.card_number") is not None

    def test_multiselect_enum(self):
        items = interview_for(Inventory).find_question("items")
        assert isinstance(items.kind, ListKind)
        assert items.kind.element == ElementType.VARIANT
        assert len(items.kind.variants.alternatives) == 6

    def test_multiselect_follow_up_paths(self):
        interview = interview_for(Household)
        assert interview.find_question("pets.Dog.name") is not None
        assert interview.find_question("pets.Cat.indoor") is not None


class TestPrompts:
    """Ask > description > inferred name."""

    def test_description_used_as_prompt(self):
        assert interview_for(Described).find_question("host").prompt == "Server host:"

    def test_ask_wins_over_description(self):
        assert interview_for(Described).find_question("port").prompt == "Port number:"

    def test_missing_prompt_is_error(self):
        with pytest.raises(SchemaError, match="max_connections"):
            interview_for(Unprompted, SurveySettings())

    def test_inferred_prompt(self):
        interview = interview_for(Unprompted, SurveySettings(infer_prompts=True))
        assert interview.find_question("max_connections").prompt == "Max connections"

    def test_humanize(self):
        assert humanize("data_dir") == "Data dir"


class TestSchemaErrors:

    def test_mask_and_multiline_exclusive(self):
        class Broken(BaseModel):
            secret: Annotated[str, Ask("Secret:"), Mask(), Multiline()]

        with pytest.raises(SchemaError, match="mutually exclusive"):
            interview_for(Broken)

    def test_min_greater_than_max(self):
        class Broken(BaseModel):
            level: Annotated[int, Ask("Level:"), Min(10), Max(1)]

        with pytest.raises(SchemaError):
            interview_for(Broken)

    def test_duplicate_validators(self):
        def check(candidate, answers, path):
            pass

        class Broken(BaseModel):
            name: Annotated[str, Ask("Name:"), Validate(check), Validate(check)]

        with pytest.raises(SchemaError, match="Duplicate"):
            interview_for(Broken)

    def test_enum_list_without_multiselect(self):
        class Broken(BaseModel):
            themes: Annotated[List[Theme], Ask("Themes:")]

        with pytest.raises(SchemaError, match="Multiselect"):
            interview_for(Broken)

    def test_unsupported_type(self):
        class Broken(BaseModel):
            payload: Annotated[dict, Ask("Payload:")]

        with pytest.raises(SchemaError, match="unsupported"):
            interview_for(Broken)

    def test_optional_nested_model(self):
        class Inner(BaseModel):
            x: Annotated[int, Ask("X:")]

        class Broken(BaseModel):
            inner: Optional[Inner] = None

        with pytest.raises(SchemaError, match="optional nested"):
            interview_for(Broken)

    def test_not_a_survey_type(self):
        with pytest.raises(SchemaError):
            interview_for(int)


class TestSurveyDecorator:

    def test_options_not_inherited(self):
        @survey(prelude="Parent")
        class Parent(BaseModel):
            a: Annotated[int, Ask("A:")]

        class Child(Parent):
            pass

        assert interview_for(Parent).prelude == "Parent"
        assert interview_for(Child).prelude is None

    def test_enum_with_non_string_values_uses_names(self):
        class Level(Enum):
            LOW = 1
            HIGH = 2

        interview = interview_for(Level)
        assert [alt.display for alt in interview.sections[0].alternatives] == ["LOW", "HIGH"]


class TestDefaults:

    def test_default_factory_becomes_question_default(self):
        tracks = interview_for(Playlist).find_question("tracks")
        assert tracks.kind.default == ("intro",)

    def test_optional_enum_and_union_are_optional_choices(self):
        interview = interview_for(Paint)
        for name in ("color", "payment"):
            question = interview.find_question(name)
            assert question.optional is True
            assert isinstance(question.kind.section, Alternatives)
