"""Question type data access helpers.

Encapsulates reads/writes for the question type catalog so routes stay free
of SQL. Deleting a type, or changing its code, is refused while any question
still references it.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from forms_service.db.base import get_engine
from forms_service.logic.errors import (
    DuplicateQuestionTypeCodeError,
    NotFoundError,
    QuestionTypeInUseError,
)
from forms_service.logic.type_registry import QuestionTypeRegistry
from forms_service.models.question_type import QuestionType

logger = logging.getLogger(__name__)

_COLUMNS = (
    "question_type_id, code, name, description, has_options, allows_multiple_values, "
    "input_type, display_order, application_data"
)
_UPDATABLE = (
    "code",
    "name",
    "description",
    "has_options",
    "allows_multiple_values",
    "input_type",
    "display_order",
    "application_data",
)


def row_to_question_type(row: Any) -> QuestionType:
    m = row._mapping
    return QuestionType(
        question_type_id=str(m["question_type_id"]),
        code=str(m["code"]),
        name=str(m["name"]),
        description=str(m["description"] or ""),
        has_options=bool(m["has_options"]),
        allows_multiple_values=bool(m["allows_multiple_values"]),
        input_type=str(m["input_type"]),
        display_order=int(m["display_order"] or 0),
        application_data=m["application_data"],
    )


def list_question_types() -> list[QuestionType]:
    """Return all question types ordered by display_order."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(f"SELECT {_COLUMNS} FROM question_type ORDER BY display_order, code")
        ).fetchall()
    return [row_to_question_type(r) for r in rows]


def load_registry() -> QuestionTypeRegistry:
    """Snapshot the catalog for authoring and validation calls."""
    return QuestionTypeRegistry(list_question_types())


def get_question_type(question_type_id: str) -> QuestionType | None:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(f"SELECT {_COLUMNS} FROM question_type WHERE question_type_id = :id"),
            {"id": str(question_type_id)},
        ).fetchone()
    return row_to_question_type(row) if row else None


def get_question_type_by_code(code: str) -> QuestionType | None:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(f"SELECT {_COLUMNS} FROM question_type WHERE code = :code"),
            {"code": str(code)},
        ).fetchone()
    return row_to_question_type(row) if row else None


def _code_owner(conn: Connection, code: str) -> str | None:
    row = conn.execute(
        sql_text("SELECT question_type_id FROM question_type WHERE code = :code"),
        {"code": code},
    ).fetchone()
    return str(row[0]) if row else None


def count_questions_using(conn: Connection, question_type_id: str) -> int:
    row = conn.execute(
        sql_text("SELECT COUNT(*) FROM question WHERE question_type_id = :id"),
        {"id": str(question_type_id)},
    ).fetchone()
    return int(row[0]) if row and row[0] is not None else 0


def create_question_type(values: Mapping[str, Any]) -> QuestionType:
    """Insert a question type; raises DuplicateQuestionTypeCodeError on a taken code."""
    qt = QuestionType(question_type_id=str(uuid.uuid4()), **dict(values))
    eng = get_engine()
    try:
        with eng.begin() as conn:
            if _code_owner(conn, qt.code) is not None:
                raise DuplicateQuestionTypeCodeError(qt.code)
            conn.execute(
                sql_text(
                    f"""
                    INSERT INTO question_type ({_COLUMNS})
                    VALUES (:question_type_id, :code, :name, :description, :has_options,
                            :allows_multiple_values, :input_type, :display_order, :application_data)
                    """
                ),
                qt.model_dump(),
            )
    except DuplicateQuestionTypeCodeError:
        raise
    except Exception:
        logger.error("create_question_type failed code=%s", qt.code, exc_info=True)
        raise
    return qt


def update_question_type(question_type_id: str, changes: Mapping[str, Any]) -> QuestionType:
    """Apply a partial update; keys with value None are left unchanged."""
    updates = {k: v for k, v in changes.items() if k in _UPDATABLE and v is not None}
    eng = get_engine()
    try:
        with eng.begin() as conn:
            row = conn.execute(
                sql_text(f"SELECT {_COLUMNS} FROM question_type WHERE question_type_id = :id"),
                {"id": str(question_type_id)},
            ).fetchone()
            if row is None:
                raise NotFoundError(f"Question type with ID {question_type_id} not found.")
            current = row_to_question_type(row)
            new_code = updates.get("code")
            if new_code is not None and new_code != current.code:
                owner = _code_owner(conn, new_code)
                if owner is not None and owner != current.question_type_id:
                    raise DuplicateQuestionTypeCodeError(new_code)
                # Codes are dispatch keys; referenced types keep theirs
                in_use = count_questions_using(conn, current.question_type_id)
                if in_use:
                    raise QuestionTypeInUseError(current.question_type_id, in_use)
            merged = current.model_copy(update=updates)
            # Re-run field validation on the merged record
            merged = QuestionType.model_validate(merged.model_dump())
            conn.execute(
                sql_text(
                    """
                    UPDATE question_type
                    SET code = :code, name = :name, description = :description,
                        has_options = :has_options, allows_multiple_values = :allows_multiple_values,
                        input_type = :input_type, display_order = :display_order,
                        application_data = :application_data
                    WHERE question_type_id = :question_type_id
                    """
                ),
                merged.model_dump(),
            )
    except (NotFoundError, DuplicateQuestionTypeCodeError, QuestionTypeInUseError):
        raise
    except Exception:
        logger.error("update_question_type failed id=%s", question_type_id, exc_info=True)
        raise
    return merged


def delete_question_type(question_type_id: str) -> None:
    """Delete a question type; raises QuestionTypeInUseError when referenced."""
    eng = get_engine()
    try:
        with eng.begin() as conn:
            exists = conn.execute(
                sql_text("SELECT 1 FROM question_type WHERE question_type_id = :id"),
                {"id": str(question_type_id)},
            ).fetchone()
            if exists is None:
                raise NotFoundError(f"Question type with ID {question_type_id} not found.")
            in_use = count_questions_using(conn, question_type_id)
            if in_use:
                raise QuestionTypeInUseError(str(question_type_id), in_use)
            conn.execute(
                sql_text("DELETE FROM question_type WHERE question_type_id = :id"),
                {"id": str(question_type_id)},
            )
    except (NotFoundError, QuestionTypeInUseError):
        raise
    except Exception:
        logger.error("delete_question_type failed id=%s", question_type_id, exc_info=True)
        raise


__all__ = [
    "row_to_question_type",
    "list_question_types",
    "load_registry",
    "get_question_type",
    "get_question_type_by_code",
    "count_questions_using",
    "create_question_type",
    "update_question_type",
    "delete_question_type",
]
