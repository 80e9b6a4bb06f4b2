"""Question type catalog snapshots."""

from __future__ import annotations

import logging

from forms_service.logic.type_registry import (
    BUILTIN_QUESTION_TYPES,
    QuestionTypeRegistry,
    parse_application_data,
)
from forms_service.models.question_type import QuestionType, QuestionTypeCode


def test_builtin_catalog_in_display_order(registry):
    codes = [qt.code for qt in registry.all()]
    assert codes == [
        "ShortText",
        "LongText",
        "Number",
        "Date",
        "Boolean",
        "SingleChoice",
        "MultipleChoice",
        "Dropdown",
        "Ranking",
    ]
    assert len(registry) == 9
    assert "Number" in registry
    assert "Signature" not in registry


def test_builtin_storage_flags(registry):
    multiple = registry.lookup_by_code(QuestionTypeCode.MULTIPLE_CHOICE)
    dropdown = registry.lookup_by_code(QuestionTypeCode.DROPDOWN)
    number = registry.lookup_by_code(QuestionTypeCode.NUMBER)
    assert multiple.has_options and multiple.allows_multiple_values
    assert dropdown.is_single_select
    assert not number.is_choice


def test_lookup_by_id_and_unknown(registry):
    first = BUILTIN_QUESTION_TYPES[0]
    assert registry.lookup_by_id(first.question_type_id) is first
    assert registry.lookup_by_id("missing") is None
    assert registry.lookup_by_code("missing") is None


def test_stable_order_for_equal_display_order():
    a = QuestionType(question_type_id="a", code="A", name="A", input_type="text", display_order=1)
    b = QuestionType(question_type_id="b", code="B", name="B", input_type="text", display_order=1)
    c = QuestionType(question_type_id="c", code="C", name="C", input_type="text", display_order=0)
    assert [qt.code for qt in QuestionTypeRegistry([a, b, c])] == ["C", "A", "B"]


def test_duplicate_code_keeps_first_and_warns(caplog):
    first = QuestionType(question_type_id="1", code="Same", name="First", input_type="text")
    second = QuestionType(question_type_id="2", code="Same", name="Second", input_type="text")
    with caplog.at_level(logging.WARNING):
        registry = QuestionTypeRegistry([first, second])
    assert registry.lookup_by_code("Same").name == "First"
    assert registry.lookup_by_id("2") is None
    assert len(registry) == 1
    assert "type_registry.duplicate_code" in caplog.text


def test_parse_application_data(registry):
    number = registry.lookup_by_code("Number")
    assert parse_application_data(number) == {"RazorComponentName": "NumberInput"}
    opaque = number.model_copy(update={"application_data": "not json"})
    assert parse_application_data(opaque) == {}
    empty = number.model_copy(update={"application_data": None})
    assert parse_application_data(empty) == {}
