"""Submitted answers: FormResponse -> QuestionResponse -> QuestionResponseOption.

A QuestionResponse populates exactly one storage mode. Scalar questions keep
the serialized value in `response_text`; choice questions keep one junction
row per selected option in `selected_options`.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class QuestionResponseOption(BaseModel):
    question_response_option_id: str
    question_response_id: str
    question_option_id: str


class QuestionResponse(BaseModel):
    question_response_id: str
    form_response_id: Optional[str] = None
    question_id: str
    response_text: Optional[str] = Field(default=None, max_length=4000)
    selected_options: List[QuestionResponseOption] = Field(default_factory=list)

    @property
    def selected_option_ids(self) -> list[str]:
        return [s.question_option_id for s in self.selected_options]

    @property
    def is_selection(self) -> bool:
        return bool(self.selected_options)


class FormResponse(BaseModel):
    form_response_id: str
    form_id: str
    # None means the respondent was anonymous
    respondent_user_id: Optional[str] = None
    is_complete: bool = False
    submitted_on: datetime
    answers: List[QuestionResponse] = Field(default_factory=list)
    deleted_on: Optional[datetime] = None

    def answer_for(self, question_id: str) -> QuestionResponse | None:
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None


__all__ = ["FormResponse", "QuestionResponse", "QuestionResponseOption"]
