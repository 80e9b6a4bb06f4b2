"""Database bootstrap utilities for the forms service.

Exposes engine construction and the SQL migrations runner that
creates the forms schema and seeds the built-in question types.
"""

from forms_service.db.base import get_engine, reset_engine
from forms_service.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "reset_engine",
    "apply_migrations",
]
