"""Domain exceptions for the forms service.

Business validation (constraint violations, shape mismatches, malformed
definitions) is collected into per-question message lists and never raised
past the submission or authoring boundary. The exceptions here mark the
places where a lower layer has to hand such an outcome up to its caller.
"""

from __future__ import annotations

from typing import Iterable


class FormsError(Exception):
    pass


class ShapeMismatchError(FormsError, ValueError):
    """An answer's storage mode or selection count disagrees with its type."""

    def __init__(self, messages: Iterable[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages) or "shape mismatch")


class NotFoundError(FormsError, LookupError):
    pass


class QuestionTypeInUseError(FormsError):
    """Raised when deleting (or re-coding) a type that questions still reference."""

    def __init__(self, question_type_id: str, question_count: int):
        self.question_type_id = question_type_id
        self.question_count = question_count
        super().__init__(
            f"question type {question_type_id} is referenced by {question_count} question(s)"
        )


class DuplicateQuestionTypeCodeError(FormsError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"A question type with code '{code}' already exists.")


class FormHasResponsesError(FormsError):
    def __init__(self, form_id: str):
        self.form_id = form_id
        super().__init__(f"form {form_id} already has responses")


__all__ = [
    "FormsError",
    "ShapeMismatchError",
    "NotFoundError",
    "QuestionTypeInUseError",
    "DuplicateQuestionTypeCodeError",
    "FormHasResponsesError",
]
