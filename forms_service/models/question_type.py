"""Question type records and the built-in type codes.

A question type is data, not code: the `code` string is the dispatch key for
constraint validation, while `has_options` and `allows_multiple_values` decide
how an answer is stored and how many selections are legal.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class QuestionTypeCode:
    """Codes of the question types seeded with the service.

    Plain constants rather than an Enum: codes added at runtime by
    administrators are ordinary strings and must compare the same way.
    """

    SHORT_TEXT = "ShortText"
    LONG_TEXT = "LongText"
    NUMBER = "Number"
    DATE = "Date"
    BOOLEAN = "Boolean"
    SINGLE_CHOICE = "SingleChoice"
    MULTIPLE_CHOICE = "MultipleChoice"
    DROPDOWN = "Dropdown"
    RANKING = "Ranking"


class QuestionType(BaseModel):
    question_type_id: str
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    has_options: bool = False
    allows_multiple_values: bool = False
    input_type: str = Field(min_length=1, max_length=50)
    display_order: int = 0
    # Opaque to the core; consumers decide what goes in here
    application_data: str | None = Field(default=None, max_length=4000)

    @property
    def is_choice(self) -> bool:
        return self.has_options

    @property
    def is_single_select(self) -> bool:
        return self.has_options and not self.allows_multiple_values


__all__ = ["QuestionType", "QuestionTypeCode"]
