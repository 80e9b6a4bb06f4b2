"""APIRouter registration for the forms service."""

from __future__ import annotations

from fastapi import APIRouter

from forms_service.routes.form_responses import router as form_responses_router
from forms_service.routes.forms import router as forms_router
from forms_service.routes.question_types import router as question_types_router

api_router = APIRouter()
api_router.include_router(question_types_router, tags=["QuestionTypes"])
api_router.include_router(forms_router, tags=["Forms"])
api_router.include_router(form_responses_router, tags=["FormResponses"])

__all__ = ["api_router"]
