"""Central logging configuration for the forms service.

Installs a single stdout handler on the root logger so module loggers
(`logging.getLogger(__name__)`) emit without per-module setup. The level of
the `forms_service` logger follows `LOG_LEVEL` (default INFO); uvicorn
loggers stay visible and duplicate handlers are avoided on reloads.
"""
from __future__ import annotations

import logging
import os
from logging.config import dictConfig


def _build_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "INFO", "handlers": ["console"]},
        "loggers": {
            "forms_service": {"level": level, "propagate": True},
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Configure application-wide logging once.

    If the root logger already has handlers (pytest capture, reloaders),
    leave it alone to prevent duplicate output.
    """
    root = logging.getLogger()
    if root.handlers:
        return
    resolved = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    if resolved not in logging.getLevelNamesMapping():
        resolved = "INFO"
    dictConfig(_build_config(resolved))


__all__ = ["configure_logging"]
