"""Pydantic models for API response bodies."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from forms_service.models.question_type import QuestionType


class ConstraintHints(BaseModel):
    minimum_placeholder: str = ""
    maximum_placeholder: str = ""
    minimum_help_text: str = ""
    maximum_help_text: str = ""


class QuestionTypeView(QuestionType):
    """A question type plus the authoring hints for its bound fields."""

    constraint_hints: ConstraintHints = Field(default_factory=ConstraintHints)


class FormSummary(BaseModel):
    form_id: str
    name: str
    description: str = ""
    is_active: bool
    allow_multiple_responses: bool
    allow_anonymous: bool
    question_count: int
    created_on: Optional[datetime] = None


class FormStatistics(BaseModel):
    form_id: str
    total_responses: int
    complete_responses: int
    incomplete_responses: int
    # Percent of responses marked complete, 0 when there are none
    completion_rate: float


class DeletedCount(BaseModel):
    deleted: int


class ProblemDetails(BaseModel):
    """Documented shape of application/problem+json bodies."""

    title: str
    status: int
    detail: Optional[str] = None
    errors: Optional[Dict[str, List[str]]] = None
    question_errors: Optional[Dict[str, List[str]]] = None


__all__ = [
    "ConstraintHints",
    "QuestionTypeView",
    "FormSummary",
    "FormStatistics",
    "DeletedCount",
    "ProblemDetails",
]
