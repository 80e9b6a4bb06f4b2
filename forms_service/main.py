"""FastAPI application factory for the forms service.

Wires cross-cutting concerns (logging, problem+json handlers, request ids,
CORS), applies schema migrations on startup and mounts the API routers
under `/api/v1`.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

from forms_service.config import AppConfig, load_config
from forms_service.db.base import get_engine
from forms_service.db.migrations_runner import apply_migrations
from forms_service.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_unexpected_error,
)
from forms_service.http.request_id import RequestIdMiddleware
from forms_service.logging_setup import configure_logging
from forms_service.middleware.cors import apply_cors
from forms_service.routes import api_router

logger = logging.getLogger(__name__)


def _health_check() -> Callable[[], dict]:
    def check() -> dict:
        try:
            with get_engine().connect() as conn:
                conn.execute(sql_text("SELECT 1"))
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("health.db_check_failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def create_app(config: AppConfig | None = None) -> FastAPI:
    configure_logging()
    cfg = config or load_config()

    app = FastAPI(title="Forms Service")
    app.state.config = cfg

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.add_middleware(RequestIdMiddleware)
    apply_cors(app, origins=cfg.cors.origins)

    # Migrations run on startup rather than at import time
    @app.on_event("startup")
    def _apply_migrations() -> None:
        if not cfg.forms.auto_apply_migrations:
            logger.info("startup.migrations_skipped reason=disabled")
            return
        try:
            applied = apply_migrations(get_engine())
        except Exception:
            logger.error("startup.migrations_failed", exc_info=True)
            raise
        logger.info("startup.migrations_applied count=%s", len(applied))

    app.include_router(api_router, prefix="/api/v1")

    # Health endpoint (out of prefix for simplicity in local runs)
    health_check = _health_check()

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return health_check()

    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
