"""Problem+JSON utilities and global exception handlers.

Every error leaves the service as an RFC 7807 `application/problem+json`
body. Routes raise HTTPException with a dict detail when they want to add
members such as `errors` or `question_errors`; a string detail is wrapped.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

PROBLEM_MEDIA_TYPE = "application/problem+json"

_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
}

logger = logging.getLogger(__name__)


def problem(status: int, detail: str, **extra: Any) -> dict[str, Any]:
    """Build a problem document; extra keyword members are appended."""
    body: dict[str, Any] = {
        "title": _TITLES.get(status, "Error"),
        "status": status,
        "detail": detail,
    }
    body.update(extra)
    return body


def problem_exception(status: int, detail: str, **extra: Any) -> HTTPException:
    return HTTPException(status_code=status, detail=problem(status, detail, **extra))


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    status_code = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        body = exc.detail
    else:
        body = problem(status_code, str(exc.detail or ""))
    headers = dict(exc.headers) if isinstance(exc.headers, dict) else None
    return JSONResponse(body, status_code=status_code, media_type=PROBLEM_MEDIA_TYPE, headers=headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "errors": [
            {"loc": list(e.get("loc", ())), "msg": str(e.get("msg", "")), "type": str(e.get("type", ""))}
            for e in exc.errors()
        ],
    }
    return JSONResponse(body, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        {"title": "Internal Server Error", "status": 500},
        status_code=500,
        media_type=PROBLEM_MEDIA_TYPE,
    )


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem",
    "problem_exception",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
