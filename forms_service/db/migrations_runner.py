"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from `forms_service/db/migrations/`.
Applied filenames are journaled in a `schema_migrations` table inside the
target database, so an in-memory SQLite database and a long-lived PostgreSQL
database are both migrated exactly once. Production deployments may swap
this for Alembic; the SQL files are plain DDL/DML.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

_JOURNAL_DDL = (
    "CREATE TABLE IF NOT EXISTS schema_migrations ("
    " filename VARCHAR(255) PRIMARY KEY,"
    " applied_at VARCHAR(32) NOT NULL"
    ")"
)


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        # Rollback scripts are applied by hand, never in forward runs
        if "rollback" in p.name.lower():
            continue
        yield p


def _split_statements(sql: str) -> list[str]:
    """Split a migration script into statements.

    Migration files keep one statement per `;`-terminated block and do not
    use semicolons inside literals; full-line `--` comments are dropped.
    """
    lines = [line for line in sql.splitlines() if not line.strip().startswith("--")]
    return [s.strip() for s in "\n".join(lines).split(";") if s.strip()]


def _applied(conn: Connection) -> set[str]:
    rows = conn.execute(sql_text("SELECT filename FROM schema_migrations")).fetchall()
    return {str(r[0]) for r in rows}


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] | None = None) -> list[str]:
    """Apply pending migrations and return the filenames applied by this call."""
    root = Path(migrations_dir) if migrations_dir is not None else MIGRATIONS_DIR
    if not root.exists():
        logger.warning("migrations_dir_missing path=%s", root)
        return []

    applied_now: list[str] = []
    with engine.begin() as conn:
        conn.execute(sql_text(_JOURNAL_DDL))
        already = _applied(conn)
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in already:
                continue
            statements = _split_statements(sql_path.read_text(encoding="utf-8"))
            try:
                for stmt in statements:
                    conn.exec_driver_sql(stmt)
            except Exception:
                logger.error("migration_failed file=%s", fname, exc_info=True)
                raise
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :at)"),
                {
                    "f": fname,
                    # ISO-8601 UTC without fractional seconds
                    "at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                },
            )
            applied_now.append(fname)
            logger.info("migration_applied file=%s statements=%s", fname, len(statements))
    return applied_now


__all__ = ["MIGRATIONS_DIR", "apply_migrations"]
