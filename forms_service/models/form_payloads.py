"""Pydantic models for authoring and submission request bodies.

Kept apart from route modules so the authoring and submission logic can take
these payloads without importing FastAPI.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class CreateQuestionOptionModel(BaseModel):
    option_text: str = Field(min_length=1, max_length=200)
    option_value: Optional[str] = Field(default=None, max_length=100)
    display_order: int = 0


class CreateQuestionModel(BaseModel):
    question_text: str = Field(min_length=1, max_length=500)
    help_text: Optional[str] = Field(default=None, max_length=1000)
    question_type_id: str
    is_required: bool = False
    minimum_value: Optional[str] = Field(default=None, max_length=100)
    maximum_value: Optional[str] = Field(default=None, max_length=100)
    display_order: int = 0
    options: List[CreateQuestionOptionModel] = Field(default_factory=list)


class CreateFormModel(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    is_active: bool = False
    allow_multiple_responses: bool = False
    allow_anonymous: bool = False
    questions: List[CreateQuestionModel] = Field(default_factory=list)


class UpdateFormModel(BaseModel):
    form_id: str
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    is_active: bool = False
    allow_multiple_responses: bool = False
    allow_anonymous: bool = False
    # None keeps the current questions; a list replaces them
    questions: Optional[List[CreateQuestionModel]] = None


class CreateQuestionResponseModel(BaseModel):
    question_id: str
    # Typed client values are canonicalised to text before validation
    response_value: str | int | float | bool | None = None
    selected_option_ids: List[str] = Field(default_factory=list)


class CreateFormResponseModel(BaseModel):
    form_id: Optional[str] = None
    respondent_user_id: Optional[str] = None
    is_complete: bool = False
    question_responses: List[CreateQuestionResponseModel] = Field(default_factory=list)


class CreateQuestionTypeModel(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    has_options: bool = False
    allows_multiple_values: bool = False
    input_type: str = Field(min_length=1, max_length=50)
    display_order: int = 0
    application_data: Optional[str] = Field(default=None, max_length=4000)


class UpdateQuestionTypeModel(BaseModel):
    """Partial update: only fields that are not None are applied."""

    code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    has_options: Optional[bool] = None
    allows_multiple_values: Optional[bool] = None
    input_type: Optional[str] = Field(default=None, min_length=1, max_length=50)
    display_order: Optional[int] = None
    application_data: Optional[str] = Field(default=None, max_length=4000)


__all__ = [
    "CreateQuestionOptionModel",
    "CreateQuestionModel",
    "CreateFormModel",
    "UpdateFormModel",
    "CreateQuestionResponseModel",
    "CreateFormResponseModel",
    "CreateQuestionTypeModel",
    "UpdateQuestionTypeModel",
]
