"""Form response submission and retrieval endpoints.

A submission is accepted or rejected as a whole: per-question problems are
returned under `errors` keyed by question id and nothing is stored.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response

from forms_service.config import AppConfig, load_config
from forms_service.http.problem import problem_exception
from forms_service.logic.events import FORM_RESPONSE_SUBMITTED, FORM_RESPONSES_DELETED, publish
from forms_service.logic.repository_form_responses import (
    delete_all_form_responses,
    get_form_response,
    list_form_responses,
    respondent_has_responded,
    save_form_response,
)
from forms_service.logic.repository_forms import get_form_with_questions
from forms_service.logic.submission import evaluate_submission
from forms_service.models.definitions import Form
from forms_service.models.form_payloads import CreateFormResponseModel
from forms_service.models.response_types import DeletedCount
from forms_service.models.responses import FormResponse


router = APIRouter()
logger = logging.getLogger(__name__)


def _config(request: Request) -> AppConfig:
    cfg = getattr(request.app.state, "config", None)
    return cfg if isinstance(cfg, AppConfig) else load_config()


def _require_form(form_id: str) -> Form:
    form = get_form_with_questions(form_id)
    if form is None:
        raise problem_exception(404, f"Form with ID {form_id} not found.")
    return form


@router.post(
    "/forms/{form_id}/responses",
    summary="Submit a response to a form",
    operation_id="submitFormResponse",
    status_code=201,
    response_model=FormResponse,
)
def post_form_response(form_id: str, payload: CreateFormResponseModel, request: Request, response: Response):
    if payload.form_id is not None and payload.form_id != form_id:
        raise problem_exception(400, "Form ID mismatch between route and body.")
    form = _require_form(form_id)

    if not form.is_active:
        raise problem_exception(400, "This form is no longer accepting responses.")
    respondent = (payload.respondent_user_id or "").strip() or None
    if respondent is None and not form.allow_anonymous:
        raise problem_exception(400, "This form does not accept anonymous responses.")
    if respondent is not None and not form.allow_multiple_responses:
        if respondent_has_responded(form_id, respondent):
            raise problem_exception(409, "You have already submitted a response to this form.")

    payload = payload.model_copy(update={"respondent_user_id": respondent})
    result = evaluate_submission(
        form,
        payload,
        strict_unknown_types=_config(request).forms.strict_unknown_types,
    )
    if not result.ok:
        raise problem_exception(
            400,
            "One or more answers are invalid.",
            errors=result.errors,
        )

    saved = save_form_response(result.response)
    publish(
        FORM_RESPONSE_SUBMITTED,
        {"form_id": form_id, "form_response_id": saved.form_response_id, "answers": len(saved.answers)},
    )
    response.headers["Location"] = f"/api/v1/forms/{form_id}/responses/{saved.form_response_id}"
    return saved


@router.get(
    "/forms/{form_id}/responses",
    summary="List responses to a form",
    operation_id="listFormResponses",
    response_model=list[FormResponse],
)
def get_form_responses(form_id: str):
    _require_form(form_id)
    return list_form_responses(form_id)


@router.get(
    "/forms/{form_id}/responses/{form_response_id}",
    summary="Get one response to a form",
    operation_id="getFormResponse",
    response_model=FormResponse,
)
def get_one_form_response(form_id: str, form_response_id: str):
    found = get_form_response(form_id, form_response_id)
    if found is None:
        raise problem_exception(404, f"Form response with ID {form_response_id} not found.")
    return found


@router.delete(
    "/forms/{form_id}/responses",
    summary="Soft-delete every response to a form",
    operation_id="deleteFormResponses",
    response_model=DeletedCount,
)
def delete_form_responses(form_id: str):
    _require_form(form_id)
    deleted = delete_all_form_responses(form_id)
    publish(FORM_RESPONSES_DELETED, {"form_id": form_id, "count": deleted})
    return DeletedCount(deleted=deleted)


__all__ = ["router"]
