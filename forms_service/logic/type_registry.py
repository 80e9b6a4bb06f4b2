"""Question type registry: a read-only snapshot of question type records.

The registry is handed to authoring and validation code as an explicit input
instead of living in module-level mutable state. Repositories build a fresh
snapshot via `load_registry()`; tests build one from `BUILTIN_QUESTION_TYPES`.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable, Iterator

from forms_service.models.question_type import QuestionType, QuestionTypeCode

logger = logging.getLogger(__name__)


def _builtin(n: int, code: str, name: str, description: str, input_type: str,
             *, has_options: bool = False, multiple: bool = False) -> QuestionType:
    return QuestionType(
        question_type_id=f"10000000-0000-0000-0000-{n:012d}",
        code=code,
        name=name,
        description=description,
        has_options=has_options,
        allows_multiple_values=multiple,
        input_type=input_type,
        display_order=n,
        application_data=json.dumps({"RazorComponentName": f"{code}Input"}),
    )


# Same ids and ordering as the seed migration
BUILTIN_QUESTION_TYPES: tuple[QuestionType, ...] = (
    _builtin(1, QuestionTypeCode.SHORT_TEXT, "Short Text",
             "Single line text input suitable for names, email, brief answers", "text"),
    _builtin(2, QuestionTypeCode.LONG_TEXT, "Long Text",
             "Multi-line text area for longer responses, comments, descriptions", "textarea"),
    _builtin(3, QuestionTypeCode.NUMBER, "Number",
             "Numeric input for quantities, ratings, or numeric values", "number"),
    _builtin(4, QuestionTypeCode.DATE, "Date",
             "Date picker for birth dates, appointments, event dates", "date"),
    _builtin(5, QuestionTypeCode.BOOLEAN, "Yes/No",
             "Binary choice with Yes/No or True/False radio buttons", "boolean"),
    _builtin(6, QuestionTypeCode.SINGLE_CHOICE, "Single Choice",
             "Radio button list allowing one option to be selected", "radio", has_options=True),
    _builtin(7, QuestionTypeCode.MULTIPLE_CHOICE, "Multiple Choice",
             "Checkbox list allowing multiple options to be selected", "checkbox",
             has_options=True, multiple=True),
    _builtin(8, QuestionTypeCode.DROPDOWN, "Dropdown",
             "Dropdown/select list allowing one option to be selected", "select", has_options=True),
    _builtin(9, QuestionTypeCode.RANKING, "Ranking",
             "Drag-and-drop ranking list allowing users to order options by preference", "ranking",
             has_options=True, multiple=True),
)


class QuestionTypeRegistry:
    """Immutable catalog of question types keyed by code and by id."""

    def __init__(self, question_types: Iterable[QuestionType] = ()):
        ordered = list(question_types)
        # sorted() is stable: equal display orders keep insertion order
        self._types: list[QuestionType] = sorted(ordered, key=lambda t: t.display_order)
        self._by_code: dict[str, QuestionType] = {}
        self._by_id: dict[str, QuestionType] = {}
        for qt in self._types:
            if qt.code in self._by_code:
                logger.warning("type_registry.duplicate_code code=%s ignored_id=%s", qt.code, qt.question_type_id)
                continue
            self._by_code[qt.code] = qt
            self._by_id[qt.question_type_id] = qt

    @classmethod
    def builtin(cls) -> "QuestionTypeRegistry":
        return cls(BUILTIN_QUESTION_TYPES)

    def lookup_by_code(self, code: str) -> QuestionType | None:
        return self._by_code.get(code)

    def lookup_by_id(self, question_type_id: str) -> QuestionType | None:
        return self._by_id.get(str(question_type_id))

    def all(self) -> list[QuestionType]:
        return [qt for qt in self._types if self._by_code.get(qt.code) is qt]

    def __contains__(self, code: object) -> bool:
        return code in self._by_code

    def __len__(self) -> int:
        return len(self._by_code)

    def __iter__(self) -> Iterator[QuestionType]:
        return iter(self.all())


def parse_application_data(question_type: QuestionType) -> dict:
    """Decode the opaque application_data blob for consumers that store JSON in it.

    Returns {} when the blob is absent or is not a JSON object.
    """
    raw = question_type.application_data
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        logger.info("type_registry.application_data_not_json code=%s", question_type.code)
        return {}
    return data if isinstance(data, dict) else {}


__all__ = [
    "BUILTIN_QUESTION_TYPES",
    "QuestionTypeRegistry",
    "parse_application_data",
]
