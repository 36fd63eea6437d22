"""Payload validation for authenticated GitHub webhooks."""

import logging
from typing import Any, Optional, Union

from pydantic import TypeAdapter, ValidationError

from ..common import log_event
from ..models.github_events import (
    IgnoredEvent,
    InvalidPayload,
    PullRequestEvent,
    PushEvent,
    ValidatedEvent,
)

logger = logging.getLogger(__name__)

SUPPORTED_EVENTS = ("push", "pull_request")

ValidationResult = Union[PushEvent, PullRequestEvent, IgnoredEvent, InvalidPayload]

_event_adapter = TypeAdapter(ValidatedEvent)


class PayloadValidator:
    """Checks that an authenticated request is an event the pipeline acts on."""

    def __init__(self, supported_events: tuple = SUPPORTED_EVENTS):
        self.supported_events = supported_events

    def validate(self, event_type: Optional[str], payload: Any) -> ValidationResult:
        if event_type not in self.supported_events:
            log_event(logger, logging.DEBUG, "Ignoring unsupported event type", event=event_type)
            return IgnoredEvent(event_type)

        if not isinstance(payload, dict):
            log_event(logger, logging.WARNING, f"Invalid {event_type} event payload",
                      event=event_type, payload=payload)
            return InvalidPayload(event_type, f"Invalid {event_type} payload")

        try:
            event = _event_adapter.validate_python({**payload, "kind": event_type, "payload": payload})
        except ValidationError as e:
            log_event(
                logger, logging.WARNING, f"Invalid {event_type} event payload",
                event=event_type,
                errors=[".".join(str(p) for p in err["loc"]) for err in e.errors()],
                payload=payload,
            )
            return InvalidPayload(event_type, f"Invalid {event_type} payload")

        if isinstance(event, PushEvent) and event.is_branch_deletion:
            log_event(logger, logging.DEBUG, "Ignoring branch deletion push",
                      repository=event.repository.full_name, ref=payload.get("ref"))
            return IgnoredEvent(event_type, "Branch deletion ignored")
        return event
