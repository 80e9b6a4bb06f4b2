"""Question type catalog endpoints.

Types are data: administrators may add new ones at runtime. A type's code
is its constraint-dispatch key, so the code of a referenced type is frozen
and a referenced type cannot be deleted.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from forms_service.http.problem import problem_exception
from forms_service.logic.constraints import constraint_hints
from forms_service.logic.errors import (
    DuplicateQuestionTypeCodeError,
    NotFoundError,
    QuestionTypeInUseError,
)
from forms_service.logic.events import (
    QUESTION_TYPE_CREATED,
    QUESTION_TYPE_DELETED,
    QUESTION_TYPE_UPDATED,
    publish,
)
from forms_service.logic.repository_question_types import (
    create_question_type,
    delete_question_type,
    get_question_type,
    get_question_type_by_code,
    list_question_types,
    update_question_type,
)
from forms_service.models.form_payloads import CreateQuestionTypeModel, UpdateQuestionTypeModel
from forms_service.models.question_type import QuestionType
from forms_service.models.response_types import ConstraintHints, QuestionTypeView


router = APIRouter()
logger = logging.getLogger(__name__)


def _view(qt: QuestionType) -> QuestionTypeView:
    return QuestionTypeView(
        **qt.model_dump(),
        constraint_hints=ConstraintHints(**constraint_hints(qt.code)),
    )


def _in_use_problem(exc: QuestionTypeInUseError):  # type: ignore[no-untyped-def]
    return problem_exception(
        409,
        f"Cannot change question type. It is being used by {exc.question_count} question(s).",
    )


@router.get(
    "/question-types",
    summary="List question types in display order",
    operation_id="listQuestionTypes",
    response_model=list[QuestionTypeView],
)
def get_question_types():
    return [_view(qt) for qt in list_question_types()]


@router.get(
    "/question-types/by-code/{code}",
    summary="Get a question type by its code",
    operation_id="getQuestionTypeByCode",
    response_model=QuestionTypeView,
)
def get_question_type_with_code(code: str):
    qt = get_question_type_by_code(code)
    if qt is None:
        raise problem_exception(404, f"Question type with code '{code}' not found.")
    return _view(qt)


@router.get(
    "/question-types/{question_type_id}",
    summary="Get a question type",
    operation_id="getQuestionType",
    response_model=QuestionTypeView,
)
def get_question_type_by_id(question_type_id: str):
    qt = get_question_type(question_type_id)
    if qt is None:
        raise problem_exception(404, f"Question type with ID {question_type_id} not found.")
    return _view(qt)


@router.post(
    "/question-types",
    summary="Create a question type",
    operation_id="createQuestionType",
    status_code=201,
    response_model=QuestionTypeView,
)
def post_question_type(payload: CreateQuestionTypeModel, response: Response):
    try:
        qt = create_question_type(payload.model_dump())
    except DuplicateQuestionTypeCodeError as exc:
        raise problem_exception(409, str(exc))
    logger.info("question_type.created question_type_id=%s code=%s", qt.question_type_id, qt.code)
    publish(QUESTION_TYPE_CREATED, {"question_type_id": qt.question_type_id, "code": qt.code})
    response.headers["Location"] = f"/api/v1/question-types/{qt.question_type_id}"
    return _view(qt)


@router.put(
    "/question-types/{question_type_id}",
    summary="Update a question type (fields left null are unchanged)",
    operation_id="updateQuestionType",
    status_code=204,
)
def put_question_type(question_type_id: str, payload: UpdateQuestionTypeModel):
    try:
        qt = update_question_type(question_type_id, payload.model_dump())
    except NotFoundError as exc:
        raise problem_exception(404, str(exc))
    except DuplicateQuestionTypeCodeError as exc:
        raise problem_exception(409, str(exc))
    except QuestionTypeInUseError as exc:
        raise _in_use_problem(exc)
    logger.info("question_type.updated question_type_id=%s", qt.question_type_id)
    publish(QUESTION_TYPE_UPDATED, {"question_type_id": qt.question_type_id, "code": qt.code})
    return Response(status_code=204)


@router.delete(
    "/question-types/{question_type_id}",
    summary="Delete an unreferenced question type",
    operation_id="deleteQuestionType",
    status_code=204,
)
def remove_question_type(question_type_id: str):
    try:
        delete_question_type(question_type_id)
    except NotFoundError as exc:
        raise problem_exception(404, str(exc))
    except QuestionTypeInUseError as exc:
        logger.warning(
            "question_type.delete_refused question_type_id=%s questions=%s",
            question_type_id,
            exc.question_count,
        )
        raise problem_exception(
            409,
            f"Cannot delete question type. It is being used by {exc.question_count} question(s).",
        )
    publish(QUESTION_TYPE_DELETED, {"question_type_id": question_type_id})
    return Response(status_code=204)


__all__ = ["router"]
