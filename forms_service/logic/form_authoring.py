"""Form authoring: turn a create/update payload into a validated Form tree.

Structural problems are reported per question, keyed by the question's
1-based position in the authored sequence, instead of being raised:

- unknown question type
- a choice type (has_options) without options, or options on a scalar type
- malformed or inverted minimum/maximum bounds, using the same parse rules
  the per-answer validator applies later

Zero display orders are replaced by the item's 1-based position, then
questions and options are sorted by display order (ties keep authored order).
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from forms_service.logic.constraints import DEFAULT_STRATEGIES, ConstraintStrategies, bound_errors
from forms_service.logic.type_registry import QuestionTypeRegistry
from forms_service.models.definitions import Form, Question, QuestionOption
from forms_service.models.form_payloads import CreateFormModel, CreateQuestionModel

logger = logging.getLogger(__name__)


class AuthoringResult(BaseModel):
    form: Optional[Form] = None
    errors: Dict[int, List[str]] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.form is not None and not self.errors


class QuestionsResult(BaseModel):
    questions: List[Question] = Field(default_factory=list)
    errors: Dict[int, List[str]] = Field(default_factory=dict)


def question_definition_errors(
    payload: CreateQuestionModel,
    registry: QuestionTypeRegistry,
    strategies: ConstraintStrategies = DEFAULT_STRATEGIES,
) -> list[str]:
    qtype = registry.lookup_by_id(payload.question_type_id)
    if qtype is None:
        return [f"Question type '{payload.question_type_id}' does not exist"]
    errors: list[str] = []
    if qtype.has_options and not payload.options:
        errors.append(f"Question type '{qtype.code}' requires at least one option")
    if not qtype.has_options and payload.options:
        errors.append(f"Question type '{qtype.code}' does not accept options")
    errors.extend(bound_errors(qtype.code, payload.minimum_value, payload.maximum_value, strategies))
    return errors


def prepare_questions(
    payloads: Sequence[CreateQuestionModel],
    registry: QuestionTypeRegistry,
    *,
    form_id: str,
    strategies: ConstraintStrategies = DEFAULT_STRATEGIES,
) -> QuestionsResult:
    questions: list[Question] = []
    errors: dict[int, list[str]] = {}
    for index, payload in enumerate(payloads):
        position = index + 1
        problems = question_definition_errors(payload, registry, strategies)
        if problems:
            errors[position] = problems
            continue
        qtype = registry.lookup_by_id(payload.question_type_id)
        question_id = str(uuid.uuid4())
        options = [
            QuestionOption(
                question_option_id=str(uuid.uuid4()),
                question_id=question_id,
                option_text=o.option_text,
                option_value=o.option_value,
                display_order=o.display_order or j + 1,
            )
            for j, o in enumerate(payload.options)
        ]
        options.sort(key=lambda o: o.display_order)
        questions.append(
            Question(
                question_id=question_id,
                form_id=form_id,
                question_text=payload.question_text,
                help_text=payload.help_text,
                question_type_id=qtype.question_type_id,
                question_type=qtype,
                is_required=payload.is_required,
                minimum_value=payload.minimum_value,
                maximum_value=payload.maximum_value,
                display_order=payload.display_order or position,
                options=options,
            )
        )
    if errors:
        return QuestionsResult(errors=errors)
    questions.sort(key=lambda q: q.display_order)
    return QuestionsResult(questions=questions)


def prepare_form(
    payload: CreateFormModel,
    registry: QuestionTypeRegistry,
    *,
    form_id: str | None = None,
    strategies: ConstraintStrategies = DEFAULT_STRATEGIES,
) -> AuthoringResult:
    """Validate a form payload and build the Form tree, or collect errors."""
    form_id = form_id or str(uuid.uuid4())
    result = prepare_questions(payload.questions, registry, form_id=form_id, strategies=strategies)
    if result.errors:
        logger.info(
            "form_authoring.rejected name=%s questions_with_errors=%s",
            payload.name,
            sorted(result.errors),
        )
        return AuthoringResult(errors=result.errors)
    form = Form(
        form_id=form_id,
        name=payload.name,
        description=payload.description,
        is_active=payload.is_active,
        allow_multiple_responses=payload.allow_multiple_responses,
        allow_anonymous=payload.allow_anonymous,
        questions=result.questions,
    )
    return AuthoringResult(form=form)


__all__ = [
    "AuthoringResult",
    "QuestionsResult",
    "question_definition_errors",
    "prepare_questions",
    "prepare_form",
]
