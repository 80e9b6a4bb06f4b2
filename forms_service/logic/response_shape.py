"""Storage-shape rules for a single submitted answer.

Builds a QuestionResponse in exactly one storage mode, dictated by the
question type's capability flags:

- has_options = False: scalar mode, `response_text` holds the value
- has_options = True: selection mode, one QuestionResponseOption per option

Selections must be unique within an answer, reference the question's own
options, and be at most one for single-select types.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

from forms_service.logic.constraints import is_blank
from forms_service.logic.errors import ShapeMismatchError
from forms_service.models.definitions import Question
from forms_service.models.responses import QuestionResponse, QuestionResponseOption


def canonical_scalar(value: Any) -> str | None:
    """Serialise a typed client value to the text stored for scalar answers.

    - bool -> "true" / "false"
    - numbers -> invariant text, integral floats without a fraction and no exponent
    - date / datetime -> ISO YYYY-MM-DD
    - str -> unchanged
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else format(Decimal(repr(value)), "f")
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def shape_errors(
    question: Question,
    response_text: str | None,
    selected_option_ids: Iterable[str] | None,
) -> list[str]:
    """Return every shape/cardinality problem for the answer; empty when valid."""
    qtype = question.question_type
    selected = [str(s) for s in (selected_option_ids or [])]
    errors: list[str] = []

    if not qtype.has_options:
        if selected:
            errors.append(
                f"Question type '{qtype.code}' does not accept option selections; send a response value"
            )
        return errors

    if not is_blank(response_text):
        errors.append(
            f"Question type '{qtype.code}' expects selected options, not a response value"
        )

    seen: set[str] = set()
    duplicates: list[str] = []
    for option_id in selected:
        if option_id in seen and option_id not in duplicates:
            duplicates.append(option_id)
        seen.add(option_id)
    for option_id in duplicates:
        errors.append(f"Option {option_id} was selected more than once")

    if not qtype.allows_multiple_values and len(seen) > 1:
        errors.append(f"Question type '{qtype.code}' allows only one selected option")

    known = question.option_ids()
    for option_id in sorted(seen - known):
        errors.append(f"Option {option_id} does not belong to this question")
    return errors


def build_question_response(
    question: Question,
    *,
    response_text: str | None = None,
    selected_option_ids: Iterable[str] | None = None,
    form_response_id: str | None = None,
) -> QuestionResponse:
    """Build a QuestionResponse for `question` or raise ShapeMismatchError.

    An empty selection list on a choice question is a legal shape; whether
    the question may be left unanswered is the constraint validator's call.
    """
    selected = [str(s) for s in (selected_option_ids or [])]
    errors = shape_errors(question, response_text, selected)
    if errors:
        raise ShapeMismatchError(errors)

    question_response_id = str(uuid.uuid4())
    if not question.question_type.has_options:
        return QuestionResponse(
            question_response_id=question_response_id,
            form_response_id=form_response_id,
            question_id=question.question_id,
            response_text=None if is_blank(response_text) else response_text,
        )
    return QuestionResponse(
        question_response_id=question_response_id,
        form_response_id=form_response_id,
        question_id=question.question_id,
        response_text=None,
        selected_options=[
            QuestionResponseOption(
                question_response_option_id=str(uuid.uuid4()),
                question_response_id=question_response_id,
                question_option_id=option_id,
            )
            for option_id in selected
        ],
    )


__all__ = ["canonical_scalar", "shape_errors", "build_question_response"]
