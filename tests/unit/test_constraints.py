"""Per-type answer constraint checks."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from forms_service.logic.constraints import (
    DEFAULT_STRATEGIES,
    NUMERIC_RANGE,
    PERMISSIVE,
    bound_errors,
    constraint_hints,
    describe_constraint,
    maximum_help_text,
    maximum_placeholder,
    minimum_help_text,
    minimum_placeholder,
    parse_invariant_date,
    parse_invariant_decimal,
    validate_response_value,
)
from forms_service.models.question_type import QuestionType


# -----------------------------
# Empty values and required-ness
# -----------------------------

@pytest.mark.parametrize("value", [None, "", "   ", "\t\n"])
@pytest.mark.parametrize("code", ["ShortText", "Number", "Date", "Boolean", "SingleChoice"])
def test_blank_value_fails_only_when_required(make_question, code, value):
    options = ("A", "B") if code == "SingleChoice" else ()
    assert validate_response_value(make_question(code, is_required=True, options=options), value) is False
    assert validate_response_value(make_question(code, is_required=False, options=options), value) is True


def test_blank_optional_answer_ignores_bounds(make_question):
    question = make_question("Number", minimum="18", maximum="120")
    assert validate_response_value(question, "") is True


# -----------------------------
# Number
# -----------------------------

@pytest.mark.parametrize(
    "value, expected",
    [
        ("18", True),
        ("120", True),
        ("25", True),
        ("17", False),
        ("17.99", False),
        ("120.01", False),
        ("150", False),
        (" 42 ", True),
        ("+42", True),
        ("abc", False),
        ("1e2", False),
        ("NaN", False),
        ("Infinity", False),
    ],
)
def test_number_range_is_inclusive(make_question, value, expected):
    question = make_question("Number", is_required=True, minimum="18", maximum="120")
    assert validate_response_value(question, value) is expected


def test_number_accepts_group_separators(make_question):
    question = make_question("Number", maximum="2000")
    assert validate_response_value(question, "1,000") is True
    assert validate_response_value(question, "2,000.5") is False


def test_number_without_bounds_only_requires_a_number(make_question):
    question = make_question("Number")
    assert validate_response_value(question, "-5.25") is True
    assert validate_response_value(question, "five") is False


def test_number_unparsable_bound_is_ignored(make_question):
    question = make_question("Number", minimum="abc", maximum="10")
    assert validate_response_value(question, "-1000") is True
    assert validate_response_value(question, "11") is False


def test_parse_invariant_decimal():
    assert parse_invariant_decimal("1,234.50") == Decimal("1234.50")
    assert parse_invariant_decimal(".5") == Decimal("0.5")
    assert parse_invariant_decimal("-") is None
    assert parse_invariant_decimal("1.2.3") is None
    assert parse_invariant_decimal("1 000") is None


# -----------------------------
# Text length
# -----------------------------

def test_short_text_length_bounds(make_question):
    question = make_question("ShortText", minimum="3", maximum="5")
    assert validate_response_value(question, "ab") is False
    assert validate_response_value(question, "abc") is True
    assert validate_response_value(question, "abcde") is True
    assert validate_response_value(question, "abcdef") is False


def test_text_length_counts_untrimmed_characters(make_question):
    question = make_question("LongText", maximum="3")
    assert validate_response_value(question, " ab") is True
    assert validate_response_value(question, " ab ") is False


def test_text_length_counts_code_points(make_question):
    question = make_question("ShortText", maximum="2")
    assert validate_response_value(question, "\U0001F600\U0001F600") is True
    assert validate_response_value(question, "e\u0301\u0301") is False


def test_text_negative_or_non_integer_bounds_are_ignored(make_question):
    question = make_question("ShortText", minimum="-4", maximum="2.5")
    assert validate_response_value(question, "a" * 40) is True


# -----------------------------
# Date
# -----------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2023-06-15", date(2023, 6, 15)),
        ("2023-06-15T23:59:00", date(2023, 6, 15)),
        ("2023-06-15T10:00:00Z", date(2023, 6, 15)),
        ("06/15/2023", date(2023, 6, 15)),
        ("15/06/2023", None),
        ("2023-02-30", None),
        ("yesterday", None),
    ],
)
def test_parse_invariant_date(raw, expected):
    assert parse_invariant_date(raw) == expected


def test_date_range_compares_dates_only(make_question):
    question = make_question("Date", minimum="2020-01-01", maximum="2020-12-31")
    assert validate_response_value(question, "2020-12-31T23:59:59") is True
    assert validate_response_value(question, "01/01/2020") is True
    assert validate_response_value(question, "2019-12-31") is False
    assert validate_response_value(question, "2021-01-01") is False
    assert validate_response_value(question, "not a date") is False


# -----------------------------
# Permissive families and unknown codes
# -----------------------------

@pytest.mark.parametrize("code", ["Boolean", "SingleChoice", "MultipleChoice", "Dropdown", "Ranking"])
def test_permissive_types_accept_any_non_empty_value(make_question, code):
    options = ("A",) if code not in ("Boolean",) else ()
    question = make_question(code, is_required=True, minimum="5", maximum="1", options=options)
    assert validate_response_value(question, "anything at all") is True


def test_unknown_code_is_permissive(make_question):
    question = make_question("ShortText", is_required=True)
    custom = QuestionType(question_type_id="custom", code="Signature", name="Signature", input_type="canvas")
    question = question.model_copy(update={"question_type": custom, "maximum_value": "1"})
    assert validate_response_value(question, "a long signature") is True
    assert DEFAULT_STRATEGIES.resolve("Signature") is PERMISSIVE
    assert DEFAULT_STRATEGIES.is_known("Signature") is False


def test_registered_strategy_applies_to_new_code(make_question):
    strategies = DEFAULT_STRATEGIES.copy()
    strategies.register_strategy("Percentage", NUMERIC_RANGE)
    custom = QuestionType(question_type_id="pct", code="Percentage", name="Percentage", input_type="number")
    question = make_question("Number").model_copy(
        update={"question_type": custom, "minimum_value": "0", "maximum_value": "100"}
    )
    assert validate_response_value(question, "101", strategies) is False
    assert validate_response_value(question, "99.5", strategies) is True
    # The shared default map is untouched
    assert DEFAULT_STRATEGIES.is_known("Percentage") is False


# -----------------------------
# Descriptions, authoring checks and hints
# -----------------------------

def test_describe_constraint_messages(make_question):
    assert describe_constraint(make_question("Number", minimum="18", maximum="120")) == (
        "Value must be a number between 18 and 120"
    )
    assert describe_constraint(make_question("Number", minimum="1.50")) == (
        "Value must be a number greater than or equal to 1.50"
    )
    assert describe_constraint(make_question("ShortText", maximum="50")) == (
        "Response must be at most 50 characters long"
    )
    assert describe_constraint(make_question("LongText", minimum="100")) == (
        "Response must be at least 100 characters long"
    )
    assert describe_constraint(make_question("Date", minimum="06/15/2023", maximum="2024-01-01")) == (
        "Value must be a date between 2023-06-15 and 2024-01-01"
    )


def test_bound_errors_for_malformed_bounds():
    assert bound_errors("Number", "abc", None) == ["MinimumValue 'abc' is not a valid number"]
    assert bound_errors("ShortText", None, "-3") == ["MaximumValue '-3' must be a non-negative integer"]
    assert bound_errors("Date", "soon", "later") == [
        "MinimumValue 'soon' is not a valid date",
        "MaximumValue 'later' is not a valid date",
    ]


def test_bound_errors_for_inverted_bounds():
    assert bound_errors("Number", "120", "18") == [
        "MinimumValue (120) cannot be greater than MaximumValue (18)"
    ]
    assert bound_errors("Date", "2024-01-01", "2023-01-01") == [
        "MinimumValue (2024-01-01) cannot be greater than MaximumValue (2023-01-01)"
    ]


def test_bound_errors_skip_unconstrained_and_empty():
    assert bound_errors("Boolean", "x", "y") == []
    assert bound_errors("Number", None, "  ") == []
    assert bound_errors("Number", "18", "120") == []


def test_authoring_hints_per_code():
    assert minimum_placeholder("Number") == "18"
    assert maximum_placeholder("Number") == "120"
    assert minimum_placeholder("ShortText") == "8 (minimum characters)"
    assert maximum_placeholder("LongText") == "5000 (maximum characters)"
    assert maximum_placeholder("Date") == "2100-12-31"
    assert minimum_help_text("Date") == "Earliest date allowed (ISO format: YYYY-MM-DD)"
    assert maximum_help_text("ShortText") == "Maximum number of characters allowed"
    assert constraint_hints("Dropdown") == {
        "minimum_placeholder": "",
        "maximum_placeholder": "",
        "minimum_help_text": "",
        "maximum_help_text": "",
    }
