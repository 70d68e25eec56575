"""Unit tests for the interview tree types."""

import pytest

from survey_builder.errors import SchemaError, TypeMismatch
from survey_builder.interview import (
    QUESTION_KINDS,
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
    NestedKind,
    Question,
    Sequence,
    coerce_value,
)
from survey_builder.values import ResponsePath, ResponseValue, ValueKind


def _payment_alternatives():
    card = Sequence(
        questions=[Question("card_number", "Card number:", InputKind(), path="payment.CreditCard.card_number")],
        base=ResponsePath.parse("payment.CreditCard"),
    )
    return Alternatives(
        alternatives=[Alternative("Cash"), Alternative("CreditCard", card, label="Credit card")],
        path=ResponsePath.parse("payment"),
    )


class TestQuestionConstruction:

    def test_empty_prompt_rejected(self):
        with pytest.raises(SchemaError):
            Question("name", "   ", InputKind())

    def test_path_defaults_to_name(self):
        question = Question("name", "Name:", InputKind())
        assert question.key == "name"
        assert question.ident == "name"

    def test_explicit_id(self):
        question = Question("name", "Name:", InputKind(), id="app-name")
        assert question.ident == "app-name"

    def test_path_must_end_with_name(self):
        with pytest.raises(SchemaError):
            Question("name", "Name:", InputKind(), path="other.field")

    def test_min_greater_than_max(self):
        with pytest.raises(SchemaError):
            IntKind(min=10, max=1)

    def test_mask_single_character(self):
        with pytest.raises(SchemaError):
            MaskedKind(mask="**")

    def test_variant_list_requires_variants(self):
        with pytest.raises(SchemaError):
            ListKind(element=ElementType.VARIANT)

    def test_question_kinds_enumeration_is_total(self):
        assert len(QUESTION_KINDS) == 8
        assert NestedKind in QUESTION_KINDS


class TestExpectedKinds:

    @pytest.mark.parametrize("kind,expected", [
        (InputKind(), ValueKind.STRING),
        (InputKind(path=True), ValueKind.PATH),
        (MaskedKind(), ValueKind.STRING),
        (IntKind(), ValueKind.INT),
        (FloatKind(), ValueKind.FLOAT),
        (ConfirmKind(), ValueKind.BOOL),
        (ListKind(element=ElementType.INT), ValueKind.LIST),
    ])
    def test_expected_value_kind(self, kind, expected):
        assert Question("q", "Q?", kind).expected_kind == expected

    def test_nested_takes_no_direct_answer(self):
        question = Question("payment", "Pay:", NestedKind(_payment_alternatives()))
        assert question.expected_kind is None


class TestAlternatives:

    def test_empty_alternatives_rejected(self):
        with pytest.raises(SchemaError):
            Alternatives(alternatives=[])

    def test_duplicate_names_rejected(self):
        with pytest.raises(SchemaError):
            Alternatives(alternatives=[Alternative("A"), Alternative("A")])

    def test_default_index_out_of_range(self):
        with pytest.raises(SchemaError):
            Alternatives(alternatives=[Alternative("A")], default_index=1)

    def test_key_and_branch_path(self):
        alternatives = _payment_alternatives()
        assert alternatives.key == "payment.selected_alternative"
        assert str(alternatives.branch_path(1)) == "payment.CreditCard"

    def test_resolve_index_by_name_or_int(self):
        alternatives = _payment_alternatives()
        assert alternatives.resolve_index("CreditCard") == 1
        assert alternatives.resolve_index(ResponseValue.integer(0)) == 0
        with pytest.raises(TypeMismatch):
            alternatives.resolve_index(5)
        with pytest.raises(TypeMismatch):
            alternatives.resolve_index("Cheque")

    def test_display_falls_back_to_name(self):
        alternatives = _payment_alternatives()
        assert alternatives.alternatives[0].display == "Cash"
        assert alternatives.alternatives[1].display == "Credit card"


class TestInterviewTraversal:

    def test_iter_questions_recurses_into_every_branch(self):
        interview = Interview(sections=[Sequence(questions=[
            Question("customer", "Customer:", InputKind()),
            Question("payment", "Pay:", NestedKind(_payment_alternatives())),
        ])])
        keys = [question.key for question in interview.iter_questions()]
        assert keys == ["customer", "payment", "payment.CreditCard.card_number"]
        assert interview.question_count() == 3
        assert interview.find_question("payment.CreditCard.card_number").name == "card_number"
        assert interview.find_question("missing") is None

    def test_iter_alternatives(self):
        interview = Interview(sections=[_payment_alternatives(), EmptySection()])
        assert [alt.key for alt in interview.iter_alternatives()] == ["payment.selected_alternative"]


class TestCoerceValue:
    """Lossless conversions only."""

    def test_int_widens_to_float(self):
        question = Question("ratio", "Ratio:", FloatKind())
        assert coerce_value(question, 1) == ResponseValue.number(1.0)

    def test_string_to_path(self):
        question = Question("dir", "Dir:", InputKind(path=True))
        assert coerce_value(question, "/srv").kind == ValueKind.PATH

    def test_float_to_int_rejected(self):
        question = Question("level", "Level:", IntKind())
        with pytest.raises(TypeMismatch):
            coerce_value(question, 1.5)

    def test_bool_is_not_int(self):
        question = Question("level", "Level:", IntKind())
        with pytest.raises(TypeMismatch):
            coerce_value(question, True)

    def test_list_elements_checked(self):
        question = Question("scores", "Scores:", ListKind(element=ElementType.INT))
        assert coerce_value(question, [1, 2]).to_python() == [1, 2]
        with pytest.raises(TypeMismatch):
            coerce_value(question, [1, "two"])

    def test_variant_names_become_indices(self):
        variants = Alternatives(alternatives=[Alternative("A"), Alternative("B"), Alternative("C")], path="pick")
        question = Question("pick", "Pick:", ListKind(element=ElementType.VARIANT, variants=variants))
        assert coerce_value(question, ["C", "A"]).value == (0, 2)

    def test_with_default_on_masked_is_none(self):
        question = Question("password", "Password:", MaskedKind())
        assert question.with_default("secret") is None

    def test_with_default_sets_kind_default(self):
        question = Question("port", "Port:", IntKind(min=1))
        assert question.with_default(8080).default == 8080
