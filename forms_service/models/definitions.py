"""Form definition tree: Form -> Question -> QuestionOption.

Children are owned by their parent collection. The `form_id` / `question_id`
back-references exist for lookups only.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from forms_service.models.question_type import QuestionType


class QuestionOption(BaseModel):
    question_option_id: str
    question_id: str
    option_text: str = Field(min_length=1, max_length=200)
    option_value: Optional[str] = Field(default=None, max_length=100)
    display_order: int = 0

    @property
    def effective_value(self) -> str:
        """Programmatic value of the option; falls back to the display text."""
        return self.option_value if self.option_value else self.option_text


class Question(BaseModel):
    question_id: str
    form_id: str
    question_text: str = Field(min_length=1, max_length=500)
    help_text: Optional[str] = Field(default=None, max_length=1000)
    question_type_id: str
    question_type: QuestionType
    is_required: bool = False
    # Meaning depends on question_type.code: number, character count or date
    minimum_value: Optional[str] = Field(default=None, max_length=100)
    maximum_value: Optional[str] = Field(default=None, max_length=100)
    display_order: int = 0
    options: List[QuestionOption] = Field(default_factory=list)

    def option_ids(self) -> set[str]:
        return {o.question_option_id for o in self.options}

    def find_option(self, question_option_id: str) -> QuestionOption | None:
        for option in self.options:
            if option.question_option_id == question_option_id:
                return option
        return None


class Form(BaseModel):
    form_id: str
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    is_active: bool = True
    allow_multiple_responses: bool = False
    allow_anonymous: bool = False
    questions: List[Question] = Field(default_factory=list)
    created_on: Optional[datetime] = None
    deleted_on: Optional[datetime] = None

    def find_question(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.question_id == question_id:
                return question
        return None


__all__ = ["Form", "Question", "QuestionOption"]
