"""Unit tests for the static HTML form renderer."""

from survey_builder.derive import interview_for
from survey_builder.documents import HtmlOptions, to_html, to_html_with_options
from survey_builder.interview import (
    Alternative,
    Alternatives,
    ConfirmKind,
    InputKind,
    Interview,
    IntKind,
    Question,
    Sequence,
)
from tests.fixtures.surveys import Account, AppSettings, Bounded, Checkout, Household, Inventory, Paint


class TestControls:
    """Each question kind maps to one form control."""

    def test_text_and_number_inputs(self):
        html = to_html(interview_for(AppSettings))
        assert 'id="q-name" name="name"' in html
        assert 'type="number" id="q-port" name="port" value="8080" min="1" max="65535" step="1" required' in html
        assert 'name="ratio" value="0.5" min="0.0" max="1.0" step="any"' in html

    def test_checkbox_for_confirm(self):
        html = to_html(interview_for(AppSettings))
        assert 'type="checkbox" id="q-debug" name="debug" value="true">' in html

    def test_list_placeholder(self):
        html = to_html(interview_for(Bounded))
        assert 'placeholder="Comma-separated int values"' in html
        assert 'min="0.5" max="2.5" step="any"' in html

    def test_password_and_textarea(self):
        html = to_html(interview_for(Account))
        assert 'type="password" id="q-password" name="password"' in html
        assert '<textarea id="q-bio" name="bio" rows="4" required></textarea>' in html

    def test_optional_question_not_required(self):
        html = to_html(interview_for(AppSettings))
        assert 'name="notes">' in html


class TestAlternatives:

    def test_enum_radio_buttons_with_default(self):
        html = to_html(interview_for(AppSettings))
        assert 'type="radio" name="theme.selected_alternative" value="DARK" checked> Dark' in html
        assert 'value="SYSTEM"> Follow the system' in html

    def test_optional_choice_has_no_preselected_option(self):
        html = to_html(interview_for(Paint))
        assert 'name="color.selected_alternative" value="RED">' in html
        assert " checked" not in html

    def test_branch_fields_nested_in_fieldset(self):
        html = to_html(interview_for(Checkout))
        assert '<fieldset class="branch" data-branch="CreditCard">' in html
        assert 'name="payment.CreditCard.card_number"' in html
        assert 'value="CreditCard"> Credit card' in html
        assert html.index('data-branch="BankTransfer"') < html.index('name="payment.BankTransfer.iban"')

    def test_flattened_nested_model(self):
        html = to_html(interview_for(Checkout))
        assert 'name="shipping.street"' in html
        assert 'id="q-shipping-city"' in html

    def test_empty_branch_has_no_fieldset(self):
        html = to_html(interview_for(Checkout))
        assert 'data-branch="Cash"' not in html


class TestMultiselect:

    def test_checkbox_per_variant(self):
        html = to_html(interview_for(Inventory))
        assert '<fieldset class="multiselect" id="q-items">' in html
        for name in ("SWORD", "SHIELD", "POTION", "MAP", "ROPE", "TORCH"):
            assert f'type="checkbox" name="items" value="{name}"' in html

    def test_variant_follow_ups(self):
        html = to_html(interview_for(Household))
        assert 'name="pets.Dog.name"' in html
        assert 'name="pets.Cat.indoor"' in html


class TestDocument:

    def test_title_defaults_to_model_name(self):
        assert "<title>AppSettings</title>" in to_html(interview_for(AppSettings))

    def test_explicit_title(self):
        html = to_html(interview_for(AppSettings), title="Setup")
        assert "<title>Setup</title>" in html
        assert "<h1>Setup</h1>" in html

    def test_prelude_and_epilogue(self):
        html = to_html(interview_for(AppSettings))
        assert '<p class="prelude">Configure the application.</p>' in html
        assert '<p class="epilogue">Settings saved.</p>' in html

    def test_plain_tree_title_fallback(self):
        interview = Interview(sections=[Sequence(questions=[Question("level", "Level:", IntKind())])])
        assert "<title>Survey</title>" in to_html(interview)

    def test_options(self):
        options = HtmlOptions(title="Form", include_styles=False, action="/submit")
        html = to_html_with_options(interview_for(Account), options)
        assert "<style>" not in html
        assert 'action="/submit"' in html

    def test_text_is_escaped(self):
        interview = Interview(
            sections=[
                Sequence(questions=[
                    Question("name", '<b>Tom & "Jerry"</b>', InputKind(default="<script>")),
                    Question("agree", "Agree?", ConfirmKind(default=True)),
                ]),
                Alternatives(
                    [Alternative("a", label="<i>A</i>"), Alternative("b")],
                    path="pick",
                    prompt="Pick & choose",
                ),
            ],
            prelude="Fill <all> fields",
        )
        html = to_html(interview)
        assert "<b>Tom" not in html
        assert "&lt;b&gt;Tom &amp; &#34;Jerry&#34;&lt;/b&gt;" in html
        assert 'value="&lt;script&gt;"' in html
        assert "&lt;i&gt;A&lt;/i&gt;" in html
        assert "<legend>Pick &amp; choose</legend>" in html
        assert "Fill &lt;all&gt; fields" in html
        assert 'name="agree" value="true" checked>' in html
