"""Form authoring endpoints.

Create and update validate the whole question list against the current
question type catalog before anything is written; problems come back as
`question_errors` keyed by the 1-based question position.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response

from forms_service.http.problem import problem_exception
from forms_service.logic.errors import FormHasResponsesError, NotFoundError
from forms_service.logic.events import FORM_CREATED, FORM_DELETED, FORM_UPDATED, publish
from forms_service.logic.form_authoring import prepare_form, prepare_questions
from forms_service.logic.repository_forms import (
    count_complete_responses,
    count_responses,
    create_form,
    get_form_with_questions,
    list_active_forms,
    list_forms,
    soft_delete_form,
    update_form,
)
from forms_service.logic.repository_question_types import load_registry
from forms_service.models.definitions import Form
from forms_service.models.form_payloads import CreateFormModel, UpdateFormModel
from forms_service.models.response_types import FormStatistics, FormSummary


router = APIRouter()
logger = logging.getLogger(__name__)


def _summary(form: Form) -> FormSummary:
    return FormSummary(
        form_id=form.form_id,
        name=form.name,
        description=form.description,
        is_active=form.is_active,
        allow_multiple_responses=form.allow_multiple_responses,
        allow_anonymous=form.allow_anonymous,
        question_count=len(form.questions),
        created_on=form.created_on,
    )


def _question_errors_problem(errors: dict[int, list[str]]):  # type: ignore[no-untyped-def]
    return problem_exception(
        400,
        "One or more questions are invalid.",
        question_errors={str(k): v for k, v in sorted(errors.items())},
    )


@router.get(
    "/forms",
    summary="List forms",
    operation_id="listForms",
    response_model=list[FormSummary],
)
def get_forms():
    return [_summary(f) for f in list_forms()]


@router.get(
    "/forms/active",
    summary="List forms currently accepting responses",
    operation_id="listActiveForms",
    response_model=list[FormSummary],
)
def get_active_forms():
    return [_summary(f) for f in list_active_forms()]


@router.get(
    "/forms/{form_id}",
    summary="Get a form with its questions and options",
    operation_id="getForm",
    response_model=Form,
)
def get_form(form_id: str):
    form = get_form_with_questions(form_id)
    if form is None:
        raise problem_exception(404, f"Form with ID {form_id} not found.")
    return form


@router.post(
    "/forms",
    summary="Create a form",
    operation_id="createForm",
    status_code=201,
    response_model=Form,
)
def post_form(payload: CreateFormModel, response: Response):
    result = prepare_form(payload, load_registry())
    if not result.ok:
        raise _question_errors_problem(result.errors)
    form = create_form(result.form)
    logger.info("form.created form_id=%s questions=%s", form.form_id, len(form.questions))
    publish(FORM_CREATED, {"form_id": form.form_id, "name": form.name})
    response.headers["Location"] = f"/api/v1/forms/{form.form_id}"
    return form


@router.put(
    "/forms/{form_id}",
    summary="Update form metadata and optionally replace its questions",
    operation_id="updateForm",
    status_code=204,
)
def put_form(form_id: str, payload: UpdateFormModel):
    if payload.form_id != form_id:
        raise problem_exception(400, "Form ID mismatch between route and body.")
    existing = get_form_with_questions(form_id)
    if existing is None:
        raise problem_exception(404, f"Form with ID {form_id} not found.")

    questions = existing.questions
    replace = payload.questions is not None
    if replace:
        prepared = prepare_questions(payload.questions or [], load_registry(), form_id=form_id)
        if prepared.errors:
            raise _question_errors_problem(prepared.errors)
        questions = prepared.questions

    updated = existing.model_copy(
        update={
            "name": payload.name,
            "description": payload.description,
            "is_active": payload.is_active,
            "allow_multiple_responses": payload.allow_multiple_responses,
            "allow_anonymous": payload.allow_anonymous,
            "questions": questions,
        }
    )
    try:
        update_form(updated, replace_questions=replace)
    except NotFoundError as exc:
        raise problem_exception(404, str(exc))
    except FormHasResponsesError:
        raise problem_exception(
            409, "Questions cannot be changed after the form has received responses."
        )
    logger.info("form.updated form_id=%s questions_replaced=%s", form_id, replace)
    publish(FORM_UPDATED, {"form_id": form_id, "questions_replaced": replace})
    return Response(status_code=204)


@router.delete(
    "/forms/{form_id}",
    summary="Soft-delete a form",
    operation_id="deleteForm",
    status_code=204,
)
def delete_form(form_id: str):
    if not soft_delete_form(form_id):
        raise problem_exception(404, f"Form with ID {form_id} not found.")
    logger.info("form.deleted form_id=%s", form_id)
    publish(FORM_DELETED, {"form_id": form_id})
    return Response(status_code=204)


@router.get(
    "/forms/{form_id}/statistics",
    summary="Response counts and completion rate for a form",
    operation_id="getFormStatistics",
    response_model=FormStatistics,
)
def get_form_statistics(form_id: str):
    if get_form_with_questions(form_id) is None:
        raise problem_exception(404, f"Form with ID {form_id} not found.")
    total = count_responses(form_id)
    complete = count_complete_responses(form_id)
    rate = round(complete * 100.0 / total, 2) if total else 0.0
    return FormStatistics(
        form_id=form_id,
        total_responses=total,
        complete_responses=complete,
        incomplete_responses=total - complete,
        completion_rate=rate,
    )


__all__ = ["router"]
