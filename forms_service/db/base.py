"""SQLAlchemy engine helpers.

The service targets PostgreSQL in production and uses SQLite for local
development and tests. Repositories issue SQL through `sqlalchemy.text`;
no ORM models are declared, so this module only manages the connection
lifecycle.
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _db_url() -> str:
    url = os.getenv("TEST_DATABASE_URL")
    if url:
        return url
    from forms_service.config import load_config

    return load_config().database.dsn

# Module-level cached Engine so repositories share one pool
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()

def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    For SQLite in-memory URLs a StaticPool keeps one connection alive across
    sessions and threads, so the schema survives between requests.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite") and ":memory:" in resolved_url:
            kwargs.update({
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            })
        engine = create_engine(resolved_url, **kwargs)
        if resolved_url.startswith("sqlite"):
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = engine
        _ENGINE_URL = resolved_url
        logger.info("db.engine_created dialect=%s", engine.dialect.name)

    return _ENGINE

def reset_engine() -> None:
    """Dispose the cached engine; the next get_engine() builds a fresh one."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None

__all__ = ["get_engine", "reset_engine"]
