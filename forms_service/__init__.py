"""Forms service: questionnaire definitions, answer validation and responses.

This package exposes a FastAPI application factory. Business logic lives in
`forms_service/logic/`, pydantic types in `forms_service/models/` and route
handlers in `forms_service/routes/`.
"""

from __future__ import annotations

from forms_service.main import create_app

__all__ = ["create_app"]
