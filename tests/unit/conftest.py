"""Shared builders for unit tests.

Unit tests exercise the pure logic modules against the built-in question
type catalog; no database or HTTP app is involved.
"""

from __future__ import annotations

import uuid
from typing import Callable, Sequence

import pytest

from forms_service.logic.type_registry import QuestionTypeRegistry
from forms_service.models.definitions import Form, Question, QuestionOption


@pytest.fixture()
def registry() -> QuestionTypeRegistry:
    return QuestionTypeRegistry.builtin()


@pytest.fixture()
def make_question(registry: QuestionTypeRegistry) -> Callable[..., Question]:
    def _make(
        code: str,
        *,
        is_required: bool = False,
        minimum: str | None = None,
        maximum: str | None = None,
        options: Sequence[str] = (),
        form_id: str = "form-1",
        question_id: str | None = None,
    ) -> Question:
        qtype = registry.lookup_by_code(code)
        assert qtype is not None, code
        qid = question_id or str(uuid.uuid4())
        return Question(
            question_id=qid,
            form_id=form_id,
            question_text=f"{code} question",
            question_type_id=qtype.question_type_id,
            question_type=qtype,
            is_required=is_required,
            minimum_value=minimum,
            maximum_value=maximum,
            options=[
                QuestionOption(
                    question_option_id=f"{qid}-opt{i + 1}",
                    question_id=qid,
                    option_text=text,
                    display_order=i + 1,
                )
                for i, text in enumerate(options)
            ],
        )

    return _make


@pytest.fixture()
def make_form() -> Callable[..., Form]:
    def _make(questions: Sequence[Question], **kwargs) -> Form:  # type: ignore[no-untyped-def]
        return Form(form_id="form-1", name="Survey", questions=list(questions), **kwargs)

    return _make
