"""Domain event constants and publisher.

Defines event type constants and a publish() callable used by the
authoring, submission and administration flows.
"""

from __future__ import annotations

from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

FORM_CREATED = "form.created"
FORM_UPDATED = "form.updated"
FORM_DELETED = "form.deleted"
FORM_RESPONSE_SUBMITTED = "form_response.submitted"
FORM_RESPONSES_DELETED = "form_responses.deleted"
QUESTION_TYPE_CREATED = "question_type.created"
QUESTION_TYPE_UPDATED = "question_type.updated"
QUESTION_TYPE_DELETED = "question_type.deleted"

# In-memory buffer for domain events (test-only visibility)
EVENT_BUFFER: List[Dict[str, Any]] = []


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    """Publish a domain event.

    Events are logged for observability and buffered for tests; there is no
    broker behind this yet.
    """
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append({"type": event_type, "payload": payload})


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events


__all__ = [
    "FORM_CREATED",
    "FORM_UPDATED",
    "FORM_DELETED",
    "FORM_RESPONSE_SUBMITTED",
    "FORM_RESPONSES_DELETED",
    "QUESTION_TYPE_CREATED",
    "QUESTION_TYPE_UPDATED",
    "QUESTION_TYPE_DELETED",
    "publish",
    "get_buffered_events",
    "EVENT_BUFFER",
]
