"""Configuration loading precedence."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from forms_service.config import DEFAULT_DSN, load_config


@pytest.fixture()
def isolated_cwd(tmp_path, monkeypatch):
    for key in ("DATABASE_URL", "AUTO_APPLY_MIGRATIONS", "FORMS_STRICT_UNKNOWN_TYPES", "CORS_ORIGINS"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults(isolated_cwd):
    cfg = load_config()
    assert cfg.database.dsn == DEFAULT_DSN
    assert cfg.forms.auto_apply_migrations is True
    assert cfg.forms.strict_unknown_types is False
    assert cfg.cors.origins == ["*"]


def test_json_file_then_config_dir_then_env(isolated_cwd, monkeypatch):
    (isolated_cwd / "forms_config.json").write_text(
        json.dumps(
            {
                "database": {"dsn": "sqlite:///from-json.db"},
                "forms": {"strict_unknown_types": True, "auto_apply_migrations": False},
                "cors": {"origins": ["https://a.example", "https://b.example"]},
            }
        ),
        encoding="utf-8",
    )
    cfg = load_config()
    assert cfg.database.dsn == "sqlite:///from-json.db"
    assert cfg.forms.strict_unknown_types is True
    assert cfg.forms.auto_apply_migrations is False
    assert cfg.cors.origins == ["https://a.example", "https://b.example"]

    (isolated_cwd / "config").mkdir()
    (isolated_cwd / "config" / "database.url").write_text("sqlite:///from-file.db\n", encoding="utf-8")
    assert load_config().database.dsn == "sqlite:///from-file.db"

    monkeypatch.setenv("DATABASE_URL", "sqlite:///from-env.db")
    monkeypatch.setenv("FORMS_STRICT_UNKNOWN_TYPES", "no")
    cfg = load_config()
    assert cfg.database.dsn == "sqlite:///from-env.db"
    assert cfg.forms.strict_unknown_types is False


def test_invalid_json_falls_back_to_defaults(isolated_cwd):
    (isolated_cwd / "forms_config.json").write_text("{not json", encoding="utf-8")
    assert load_config().database.dsn == DEFAULT_DSN


def test_empty_cors_origins_is_rejected(isolated_cwd, monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", " , ")
    with pytest.raises(ValidationError):
        load_config()
