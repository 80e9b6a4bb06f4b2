"""Form response data access helpers.

A FormResponse is written together with all of its QuestionResponse and
QuestionResponseOption rows in a single transaction. Deletion is soft: rows
keep their data and get a `deleted_on` timestamp.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from forms_service.db.base import get_engine
from forms_service.models.responses import FormResponse, QuestionResponse, QuestionResponseOption

logger = logging.getLogger(__name__)


def _parse_ts(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def save_form_response(response: FormResponse) -> FormResponse:
    """Persist a validated FormResponse and its answers atomically."""
    eng = get_engine()
    try:
        with eng.begin() as conn:
            conn.execute(
                sql_text(
                    """
                    INSERT INTO form_response (form_response_id, form_id, respondent_user_id,
                                               is_complete, submitted_on)
                    VALUES (:form_response_id, :form_id, :respondent_user_id, :is_complete, :submitted_on)
                    """
                ),
                {
                    "form_response_id": response.form_response_id,
                    "form_id": response.form_id,
                    "respondent_user_id": response.respondent_user_id,
                    "is_complete": response.is_complete,
                    "submitted_on": response.submitted_on.isoformat(),
                },
            )
            for answer in response.answers:
                conn.execute(
                    sql_text(
                        """
                        INSERT INTO question_response (question_response_id, form_response_id,
                                                       question_id, response_text)
                        VALUES (:question_response_id, :form_response_id, :question_id, :response_text)
                        """
                    ),
                    {
                        "question_response_id": answer.question_response_id,
                        "form_response_id": response.form_response_id,
                        "question_id": answer.question_id,
                        "response_text": answer.response_text,
                    },
                )
                for position, selected in enumerate(answer.selected_options):
                    conn.execute(
                        sql_text(
                            """
                            INSERT INTO question_response_option (question_response_option_id,
                                                                  question_response_id, question_option_id,
                                                                  selection_order)
                            VALUES (:question_response_option_id, :question_response_id, :question_option_id,
                                    :selection_order)
                            """
                        ),
                        {**selected.model_dump(), "selection_order": position},
                    )
    except Exception:
        logger.error(
            "save_form_response failed form_id=%s form_response_id=%s",
            response.form_id,
            response.form_response_id,
            exc_info=True,
        )
        raise
    logger.info(
        "form_response.saved form_id=%s form_response_id=%s answers=%s",
        response.form_id,
        response.form_response_id,
        len(response.answers),
    )
    return response


def _fetch_answers(conn: Connection, form_response_id: str) -> list[QuestionResponse]:
    rows = conn.execute(
        sql_text(
            """
            SELECT qr.question_response_id, qr.form_response_id, qr.question_id, qr.response_text
            FROM question_response qr
            JOIN question q ON q.question_id = qr.question_id
            WHERE qr.form_response_id = :form_response_id
            ORDER BY q.display_order, qr.question_response_id
            """
        ),
        {"form_response_id": str(form_response_id)},
    ).fetchall()
    selection_rows = conn.execute(
        sql_text(
            """
            SELECT s.question_response_option_id, s.question_response_id, s.question_option_id
            FROM question_response_option s
            JOIN question_response qr ON qr.question_response_id = s.question_response_id
            WHERE qr.form_response_id = :form_response_id
            ORDER BY s.selection_order, s.question_option_id
            """
        ),
        {"form_response_id": str(form_response_id)},
    ).fetchall()
    selections: dict[str, list[QuestionResponseOption]] = {}
    for r in selection_rows:
        m = r._mapping
        selections.setdefault(str(m["question_response_id"]), []).append(
            QuestionResponseOption(
                question_response_option_id=str(m["question_response_option_id"]),
                question_response_id=str(m["question_response_id"]),
                question_option_id=str(m["question_option_id"]),
            )
        )
    answers: list[QuestionResponse] = []
    for r in rows:
        m = r._mapping
        qrid = str(m["question_response_id"])
        answers.append(
            QuestionResponse(
                question_response_id=qrid,
                form_response_id=str(m["form_response_id"]),
                question_id=str(m["question_id"]),
                response_text=m["response_text"],
                selected_options=selections.get(qrid, []),
            )
        )
    return answers


def _row_to_response(conn: Connection, row: Any) -> FormResponse:
    m = row._mapping
    form_response_id = str(m["form_response_id"])
    return FormResponse(
        form_response_id=form_response_id,
        form_id=str(m["form_id"]),
        respondent_user_id=m["respondent_user_id"],
        is_complete=bool(m["is_complete"]),
        submitted_on=_parse_ts(m["submitted_on"]),
        answers=_fetch_answers(conn, form_response_id),
        deleted_on=_parse_ts(m["deleted_on"]),
    )


def get_form_response(form_id: str, form_response_id: str) -> FormResponse | None:
    """Return one non-deleted response of `form_id` with its answers."""
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(
                """
                SELECT form_response_id, form_id, respondent_user_id, is_complete, submitted_on, deleted_on
                FROM form_response
                WHERE form_id = :form_id AND form_response_id = :form_response_id AND deleted_on IS NULL
                """
            ),
            {"form_id": str(form_id), "form_response_id": str(form_response_id)},
        ).fetchone()
        if row is None:
            return None
        return _row_to_response(conn, row)


def list_form_responses(form_id: str) -> list[FormResponse]:
    """Return non-deleted responses of `form_id`, oldest first."""
    eng = get_engine()
    with eng.connect() as conn:
        rows = conn.execute(
            sql_text(
                """
                SELECT form_response_id, form_id, respondent_user_id, is_complete, submitted_on, deleted_on
                FROM form_response
                WHERE form_id = :form_id AND deleted_on IS NULL
                ORDER BY submitted_on, form_response_id
                """
            ),
            {"form_id": str(form_id)},
        ).fetchall()
        return [_row_to_response(conn, r) for r in rows]


def delete_all_form_responses(form_id: str) -> int:
    """Soft-delete every live response of `form_id`; returns how many were marked."""
    eng = get_engine()
    try:
        with eng.begin() as conn:
            result = conn.execute(
                sql_text(
                    """
                    UPDATE form_response SET deleted_on = :now
                    WHERE form_id = :form_id AND deleted_on IS NULL
                    """
                ),
                {"form_id": str(form_id), "now": datetime.now(timezone.utc).isoformat()},
            )
            deleted = int(result.rowcount or 0)
    except Exception:
        logger.error("delete_all_form_responses failed form_id=%s", form_id, exc_info=True)
        raise
    logger.info("form_responses.deleted form_id=%s count=%s", form_id, deleted)
    return deleted


def respondent_has_responded(form_id: str, respondent_user_id: str) -> bool:
    eng = get_engine()
    with eng.connect() as conn:
        row = conn.execute(
            sql_text(
                """
                SELECT 1 FROM form_response
                WHERE form_id = :form_id AND respondent_user_id = :respondent AND deleted_on IS NULL
                LIMIT 1
                """
            ),
            {"form_id": str(form_id), "respondent": str(respondent_user_id)},
        ).fetchone()
    return row is not None


__all__ = [
    "save_form_response",
    "get_form_response",
    "list_form_responses",
    "delete_all_form_responses",
    "respondent_has_responded",
]
