"""Health, request ids and migrations."""

from __future__ import annotations

from sqlalchemy import text as sql_text

from forms_service.db.base import get_engine
from forms_service.db.migrations_runner import apply_migrations


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "db": True}


def test_request_id_is_assigned_or_echoed(client):
    generated = client.get("/api/v1/forms")
    assert generated.headers.get("X-Request-Id")

    echoed = client.get("/api/v1/forms", headers={"X-Request-Id": "abc-123"})
    assert echoed.headers["X-Request-Id"] == "abc-123"


def test_missing_form_is_problem_json(client):
    res = client.get("/api/v1/forms/missing")
    assert res.status_code == 404
    body = res.json()
    assert body["status"] == 404
    assert body["title"] == "Not Found"


def test_migrations_are_journaled_once(client):
    engine = get_engine()
    assert apply_migrations(engine) == []
    with engine.connect() as conn:
        applied = [r[0] for r in conn.execute(sql_text("SELECT filename FROM schema_migrations ORDER BY filename"))]
    assert applied == [
        "001_forms_schema.sql",
        "002_seed_question_types.sql",
        "003_ranking_question_type.sql",
        "004_selection_order.sql",
    ]
