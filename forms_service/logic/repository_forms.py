"""Form definition data access helpers.

Reads assemble the full Form -> Question -> QuestionOption tree with each
question's QuestionType resolved. Writes replace a form's questions as a
whole inside one transaction; once a form has responses its questions are
frozen and only the metadata may change.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from forms_service.db.base import get_engine
from forms_service.logic.errors import FormHasResponsesError, NotFoundError
from forms_service.logic.repository_question_types import row_to_question_type
from forms_service.models.definitions import Form, Question, QuestionOption

logger = logging.getLogger(__name__)

_FORM_COLUMNS = (
    "form_id, name, description, is_active, allow_multiple_responses, allow_anonymous, "
    "created_on, deleted_on"
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _row_to_form(row: Any, questions: list[Question]) -> Form:
    m = row._mapping
    return Form(
        form_id=str(m["form_id"]),
        name=str(m["name"]),
        description=str(m["description"] or ""),
        is_active=bool(m["is_active"]),
        allow_multiple_responses=bool(m["allow_multiple_responses"]),
        allow_anonymous=bool(m["allow_anonymous"]),
        questions=questions,
        created_on=_parse_ts(m["created_on"]),
        deleted_on=_parse_ts(m["deleted_on"]),
    )


class _TypeRow:
    """Adapts a joined question row so row_to_question_type can read it."""

    def __init__(self, mapping: Any):
        self._mapping = {
            "question_type_id": mapping["question_type_id"],
            "code": mapping["code"],
            "name": mapping["name"],
            "description": mapping["description"],
            "has_options": mapping["has_options"],
            "allows_multiple_values": mapping["allows_multiple_values"],
            "input_type": mapping["input_type"],
            "display_order": mapping["type_display_order"],
            "application_data": mapping["application_data"],
        }


def _fetch_questions(conn: Connection, form_id: str) -> list[Question]:
    rows = conn.execute(
        sql_text(
            """
            SELECT q.question_id, q.form_id, q.question_text, q.help_text, q.question_type_id,
                   q.is_required, q.minimum_value, q.maximum_value, q.display_order,
                   t.code, t.name, t.description, t.has_options, t.allows_multiple_values,
                   t.input_type, t.display_order AS type_display_order, t.application_data
            FROM question q
            JOIN question_type t ON t.question_type_id = q.question_type_id
            WHERE q.form_id = :form_id
            ORDER BY q.display_order, q.question_id
            """
        ),
        {"form_id": str(form_id)},
    ).fetchall()
    if not rows:
        return []

    option_rows = conn.execute(
        sql_text(
            """
            SELECT o.question_option_id, o.question_id, o.option_text, o.option_value, o.display_order
            FROM question_option o
            JOIN question q ON q.question_id = o.question_id
            WHERE q.form_id = :form_id
            ORDER BY o.display_order, o.question_option_id
            """
        ),
        {"form_id": str(form_id)},
    ).fetchall()
    options_by_question: dict[str, list[QuestionOption]] = {}
    for r in option_rows:
        m = r._mapping
        options_by_question.setdefault(str(m["question_id"]), []).append(
            QuestionOption(
                question_option_id=str(m["question_option_id"]),
                question_id=str(m["question_id"]),
                option_text=str(m["option_text"]),
                option_value=m["option_value"],
                display_order=int(m["display_order"] or 0),
            )
        )

    questions: list[Question] = []
    for r in rows:
        m = r._mapping
        qtype = row_to_question_type(_TypeRow(m))
        question_id = str(m["question_id"])
        questions.append(
            Question(
                question_id=question_id,
                form_id=str(m["form_id"]),
                question_text=str(m["question_text"]),
                help_text=m["help_text"],
                question_type_id=qtype.question_type_id,
                question_type=qtype,
                is_required=bool(m["is_required"]),
                minimum_value=m["minimum_value"],
                maximum_value=m["maximum_value"],
                display_order=int(m["display_order"] or 0),
                options=options_by_question.get(question_id, []),
            )
        )
    return questions


def _insert_questions(conn: Connection, questions: list[Question]) -> None:
    for q in questions:
        conn.execute(
            sql_text(
                """
                INSERT INTO question (question_id, form_id, question_text, help_text, question_type_id,
                                      is_required, minimum_value, maximum_value, display_order)
                VALUES (:question_id, :form_id, :question_text, :help_text, :question_type_id,
                        :is_required, :minimum_value, :maximum_value, :display_order)
                """
            ),
            {
                "question_id": q.question_id,
                "form_id": q.form_id,
                "question_text": q.question_text,
                "help_text": q.help_text,
                "question_type_id": q.question_type_id,
                "is_required": q.is_required,
                "minimum_value": q.minimum_value,
                "maximum_value": q.maximum_value,
                "display_order": q.display_order,
            },
        )
        for o in q.options:
            conn.execute(
                sql_text(
                    """
                    INSERT INTO question_option (question_option_id, question_id, option_text,
                                                 option_value, display_order)
                    VALUES (:question_option_id, :question_id, :option_text, :option_value, :display_order)
                    """
                ),
                o.model_dump(),
            )


def _count_responses(conn: Connection, form_id: str, *, complete_only: bool = False) -> int:
    query = "SELECT COUNT(*) FROM form_response WHERE form_id = :form_id AND deleted_on IS NULL"
    if complete_only:
        query += " AND is_complete = :complete"
    params: dict[str, Any] = {"form_id": str(form_id)}
    if complete_only:
        params["complete"] = True
    row = conn.execute(sql_text(query), params).fetchone()
    return int(row[0]) if row and row[0] is not None else 0


def list_forms() -> list[Form]:
    """Return all non-deleted forms ordered by name."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(f"SELECT {_FORM_COLUMNS} FROM form WHERE deleted_on IS NULL ORDER BY name, form_id")
        ).fetchall()
        return [_row_to_form(r, _fetch_questions(conn, str(r._mapping["form_id"]))) for r in rows]


def list_active_forms() -> list[Form]:
    """Return non-deleted forms that currently accept responses, ordered by name."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                f"SELECT {_FORM_COLUMNS} FROM form "
                "WHERE deleted_on IS NULL AND is_active = :active ORDER BY name, form_id"
            ),
            {"active": True},
        ).fetchall()
        return [_row_to_form(r, _fetch_questions(conn, str(r._mapping["form_id"]))) for r in rows]


def get_form_with_questions(form_id: str) -> Form | None:
    """Return the full definition tree, or None when missing or soft-deleted."""
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(f"SELECT {_FORM_COLUMNS} FROM form WHERE form_id = :form_id AND deleted_on IS NULL"),
            {"form_id": str(form_id)},
        ).fetchone()
        if row is None:
            return None
        return _row_to_form(row, _fetch_questions(conn, str(form_id)))


def create_form(form: Form) -> Form:
    """Persist a prepared Form tree in one transaction."""
    created_on = _now_iso()
    eng = get_engine()
    try:
        with eng.begin() as conn:
            conn.execute(
                sql_text(
                    """
                    INSERT INTO form (form_id, name, description, is_active, allow_multiple_responses,
                                      allow_anonymous, created_on)
                    VALUES (:form_id, :name, :description, :is_active, :allow_multiple_responses,
                            :allow_anonymous, :created_on)
                    """
                ),
                {
                    "form_id": form.form_id,
                    "name": form.name,
                    "description": form.description,
                    "is_active": form.is_active,
                    "allow_multiple_responses": form.allow_multiple_responses,
                    "allow_anonymous": form.allow_anonymous,
                    "created_on": created_on,
                },
            )
            _insert_questions(conn, form.questions)
    except Exception:
        logger.error("create_form failed form_id=%s", form.form_id, exc_info=True)
        raise
    return form.model_copy(update={"created_on": _parse_ts(created_on)})


def update_form(form: Form, *, replace_questions: bool) -> None:
    """Update form metadata and, when requested, swap in `form.questions`.

    Raises NotFoundError for a missing form and FormHasResponsesError when
    questions would be replaced on a form that already has responses.
    """
    eng = get_engine()
    try:
        with eng.begin() as conn:
            exists = conn.execute(
                sql_text("SELECT 1 FROM form WHERE form_id = :form_id AND deleted_on IS NULL"),
                {"form_id": form.form_id},
            ).fetchone()
            if exists is None:
                raise NotFoundError(f"Form with ID {form.form_id} not found.")
            if replace_questions and _count_responses(conn, form.form_id) > 0:
                raise FormHasResponsesError(form.form_id)
            conn.execute(
                sql_text(
                    """
                    UPDATE form
                    SET name = :name, description = :description, is_active = :is_active,
                        allow_multiple_responses = :allow_multiple_responses,
                        allow_anonymous = :allow_anonymous, modified_on = :modified_on
                    WHERE form_id = :form_id
                    """
                ),
                {
                    "form_id": form.form_id,
                    "name": form.name,
                    "description": form.description,
                    "is_active": form.is_active,
                    "allow_multiple_responses": form.allow_multiple_responses,
                    "allow_anonymous": form.allow_anonymous,
                    "modified_on": _now_iso(),
                },
            )
            if replace_questions:
                # Soft-deleted responses may still point at the old questions
                purged = conn.execute(
                    sql_text(
                        """
                        DELETE FROM form_response
                        WHERE form_id = :form_id AND deleted_on IS NOT NULL
                        """
                    ),
                    {"form_id": form.form_id},
                )
                if purged.rowcount:
                    logger.info(
                        "form.deleted_responses_purged form_id=%s count=%s",
                        form.form_id,
                        purged.rowcount,
                    )
                conn.execute(
                    sql_text("DELETE FROM question WHERE form_id = :form_id"),
                    {"form_id": form.form_id},
                )
                _insert_questions(conn, form.questions)
    except (NotFoundError, FormHasResponsesError):
        raise
    except Exception:
        logger.error("update_form failed form_id=%s", form.form_id, exc_info=True)
        raise


def soft_delete_form(form_id: str) -> bool:
    """Mark a form deleted; returns False when it was missing or already deleted."""
    eng = get_engine()
    try:
        with eng.begin() as conn:
            result = conn.execute(
                sql_text(
                    "UPDATE form SET deleted_on = :now WHERE form_id = :form_id AND deleted_on IS NULL"
                ),
                {"form_id": str(form_id), "now": _now_iso()},
            )
            return int(result.rowcount or 0) > 0
    except Exception:
        logger.error("soft_delete_form failed form_id=%s", form_id, exc_info=True)
        raise


def count_responses(form_id: str) -> int:
    eng = get_engine()
    with eng.connect() as conn:
        return _count_responses(conn, form_id)


def count_complete_responses(form_id: str) -> int:
    eng = get_engine()
    with eng.connect() as conn:
        return _count_responses(conn, form_id, complete_only=True)


__all__ = [
    "list_forms",
    "list_active_forms",
    "get_form_with_questions",
    "create_form",
    "update_form",
    "soft_delete_form",
    "count_responses",
    "count_complete_responses",
]
