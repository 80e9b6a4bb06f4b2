"""Per-answer checks for a form response submission.

Each answer goes through, in order:

1. membership: the question belongs to the target form and is answered once
2. constraints: required-ness and the type-specific bounds
3. shape: storage mode, selection cardinality, duplicate and foreign options

Messages are collected per question id. If any answer has a problem no
FormResponse is built, so nothing is persisted for a partly invalid response.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from forms_service.logic.constraints import (
    DEFAULT_STRATEGIES,
    ConstraintStrategies,
    describe_constraint,
    is_blank,
    validate_response_value,
)
from forms_service.logic.response_shape import build_question_response, canonical_scalar, shape_errors
from forms_service.models.definitions import Form, Question
from forms_service.models.form_payloads import CreateFormResponseModel, CreateQuestionResponseModel
from forms_service.models.responses import FormResponse, QuestionResponse

logger = logging.getLogger(__name__)

REQUIRED_MESSAGE = "This question is required"


class SubmissionResult(BaseModel):
    response: Optional[FormResponse] = None
    errors: Dict[str, List[str]] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.response is not None and not self.errors


def candidate_value(question: Question, answer: CreateQuestionResponseModel) -> str | None:
    """Value handed to the constraint validator for this answer.

    Choice questions are judged on their selections, so an empty selection
    list on a required choice question fails the required check.
    """
    if question.question_type.has_options:
        return ",".join(answer.selected_option_ids) or None
    return canonical_scalar(answer.response_value)


def answer_errors(
    question: Question,
    answer: CreateQuestionResponseModel,
    strategies: ConstraintStrategies = DEFAULT_STRATEGIES,
    *,
    strict_unknown_types: bool = False,
) -> list[str]:
    errors: list[str] = []
    code = question.question_type.code
    if strict_unknown_types and not strategies.is_known(code):
        return [f"Question type '{code}' is not supported"]

    value = candidate_value(question, answer)
    if not validate_response_value(question, value, strategies):
        if is_blank(value) and question.is_required:
            errors.append(REQUIRED_MESSAGE)
        else:
            errors.append(describe_constraint(question, strategies))

    errors.extend(
        shape_errors(question, canonical_scalar(answer.response_value), answer.selected_option_ids)
    )
    return errors


def evaluate_submission(
    form: Form,
    payload: CreateFormResponseModel,
    *,
    strategies: ConstraintStrategies = DEFAULT_STRATEGIES,
    strict_unknown_types: bool = False,
    submitted_on: datetime | None = None,
) -> SubmissionResult:
    """Validate every answer against `form` and build the FormResponse."""
    errors: dict[str, list[str]] = {}
    seen: set[str] = set()
    accepted: list[tuple[Question, CreateQuestionResponseModel]] = []

    for answer in payload.question_responses:
        qid = str(answer.question_id)
        question = form.find_question(qid)
        if question is None:
            errors[qid] = [f"Question {qid} does not belong to this form"]
            continue
        if qid in seen:
            errors.setdefault(qid, []).append("Question was answered more than once")
            continue
        seen.add(qid)
        problems = answer_errors(
            question, answer, strategies, strict_unknown_types=strict_unknown_types
        )
        if problems:
            errors[qid] = problems
            continue
        accepted.append((question, answer))

    if errors:
        logger.info(
            "form_response.rejected form_id=%s invalid_questions=%s",
            form.form_id,
            len(errors),
        )
        return SubmissionResult(errors=errors)

    form_response_id = str(uuid.uuid4())
    answers: list[QuestionResponse] = [
        build_question_response(
            question,
            response_text=canonical_scalar(answer.response_value),
            selected_option_ids=answer.selected_option_ids,
            form_response_id=form_response_id,
        )
        for question, answer in accepted
    ]
    response = FormResponse(
        form_response_id=form_response_id,
        form_id=form.form_id,
        respondent_user_id=payload.respondent_user_id,
        is_complete=payload.is_complete,
        submitted_on=submitted_on or datetime.now(timezone.utc),
        answers=answers,
    )
    return SubmissionResult(response=response)


__all__ = [
    "REQUIRED_MESSAGE",
    "SubmissionResult",
    "candidate_value",
    "answer_errors",
    "evaluate_submission",
]
