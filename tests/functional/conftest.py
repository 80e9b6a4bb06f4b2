"""Functional test bootstrap.

Each test gets a fresh in-memory SQLite database: the cached engine is reset,
the app is started through TestClient (which runs the startup migrations)
and the domain event buffer is cleared.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from forms_service.config import AppConfig, CorsConfig, DatabaseConfig, FormsConfig
from forms_service.db.base import reset_engine
from forms_service.logic.events import get_buffered_events
from forms_service.main import create_app

MEMORY_URL = "sqlite+pysqlite:///:memory:"

# Seeded by migration 002
NUMBER_TYPE_ID = "10000000-0000-0000-0000-000000000003"
MULTIPLE_CHOICE_TYPE_ID = "10000000-0000-0000-0000-000000000007"


def _config(strict: bool) -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(dsn=MEMORY_URL),
        forms=FormsConfig(auto_apply_migrations=True, strict_unknown_types=strict),
        cors=CorsConfig(origins=["*"]),
    )


@pytest.fixture()
def app_factory(monkeypatch):
    monkeypatch.setenv("TEST_DATABASE_URL", MEMORY_URL)
    reset_engine()
    get_buffered_events(clear=True)
    yield lambda strict=False: create_app(_config(strict))
    reset_engine()


@pytest.fixture()
def client(app_factory):
    with TestClient(app_factory()) as c:
        yield c


@pytest.fixture()
def survey(client):
    """An active form with a required Number (18..120) and a MultipleChoice question."""
    body = {
        "name": "Customer survey",
        "description": "Age and colours",
        "is_active": True,
        "allow_anonymous": True,
        "questions": [
            {
                "question_text": "How old are you?",
                "question_type_id": NUMBER_TYPE_ID,
                "is_required": True,
                "minimum_value": "18",
                "maximum_value": "120",
            },
            {
                "question_text": "Favourite colours",
                "question_type_id": MULTIPLE_CHOICE_TYPE_ID,
                "options": [
                    {"option_text": "Red"},
                    {"option_text": "Green"},
                    {"option_text": "Blue"},
                ],
            },
        ],
    }
    res = client.post("/api/v1/forms", json=body)
    assert res.status_code == 201, res.text
    return res.json()
