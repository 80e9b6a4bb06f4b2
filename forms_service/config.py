"""Configuration utilities for the forms service.

This module loads application configuration with the following rules:
- Primary source: `forms_config.json` at the project root.
- Overrides: text files under `config/`, then environment variables.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_FORMS_CONFIG = Path("forms_config.json")
DEFAULT_DSN = "sqlite+pysqlite:///:memory:"
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: an unreadable override falls back to the next source
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _as_bool(text: Optional[str]) -> bool:
    return str(text).strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class FormsConfig(BaseModel):
    auto_apply_migrations: bool = Field(default=True)
    # Reject answers to questions whose type code has no registered strategy
    strict_unknown_types: bool = Field(default=False)


class CorsConfig(BaseModel):
    origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("origins")
    @classmethod
    def origins_must_be_non_empty(cls, v: List[str]) -> List[str]:
        cleaned = [o.strip() for o in v if o and o.strip()]
        if not cleaned:
            raise ValueError("cors.origins must list at least one origin")
        return cleaned


class AppConfig(BaseModel):
    database: DatabaseConfig
    forms: FormsConfig
    cors: CorsConfig


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) forms_config.json at project root
    4) Defaults for development (in-memory SQLite)
    """

    base = _read_json_file(ROOT_FORMS_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if isinstance(cur, list):
            return ",".join(str(c) for c in cur)
        return str(cur) if cur is not None else default

    dsn = _env("DATABASE_URL") or _read_config_file("database.url") or _base("database.dsn") or DEFAULT_DSN

    auto_migrate_text = (
        _env("AUTO_APPLY_MIGRATIONS")
        or _read_config_file("forms.auto_apply_migrations")
        or _base("forms.auto_apply_migrations", "true")
    )
    strict_text = (
        _env("FORMS_STRICT_UNKNOWN_TYPES")
        or _read_config_file("forms.strict_unknown_types")
        or _base("forms.strict_unknown_types", "false")
    )
    origins_text = _env("CORS_ORIGINS") or _read_config_file("cors.origins") or _base("cors.origins", "*")

    try:
        cfg = AppConfig(
            database=DatabaseConfig(dsn=dsn),
            forms=FormsConfig(
                auto_apply_migrations=_as_bool(auto_migrate_text),
                strict_unknown_types=_as_bool(strict_text),
            ),
            cors=CorsConfig(origins=str(origins_text).split(",")),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "FormsConfig",
    "CorsConfig",
    "load_config",
]
