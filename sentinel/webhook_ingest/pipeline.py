"""Webhook ingestion pipeline: authenticate, validate, enqueue."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from ..common import SignatureVerifier, log_event
from ..models.github_events import IgnoredEvent, InvalidPayload
from ..models.jobs import EnqueuedJob
from .producer import JobProducer
from .validator import PayloadValidator

logger = logging.getLogger(__name__)

EVENT_HEADER = "x-github-event"

PipelineResult = Union[EnqueuedJob, IgnoredEvent, InvalidPayload]


@dataclass
class IncomingRequest:
    """One inbound webhook call.

    ``body`` holds the raw bytes exactly as received; the signature is checked
    against these bytes, never against a re-serialization of the parsed JSON.
    """
    body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)
    source_ip: Optional[str] = None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        value = self.headers.get(name)
        if value is not None:
            return value
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None

    @property
    def event_type(self) -> Optional[str]:
        return self.header(EVENT_HEADER)

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


class WebhookPipeline:
    """Runs one request through verification, validation and job submission.

    Each stage short-circuits: an ``Unauthorized`` from the verifier stops the
    request before validation, and only validated events reach the producer.
    """

    def __init__(self, verifier: SignatureVerifier, validator: PayloadValidator,
                 producer: JobProducer):
        self.verifier = verifier
        self.validator = validator
        self.producer = producer

    def process(self, request: IncomingRequest, priority: Optional[int] = None) -> PipelineResult:
        self.verifier.verify(request)

        event_type = request.event_type
        try:
            payload = request.json()
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            if event_type not in self.validator.supported_events:
                return self.validator.validate(event_type, None)
            log_event(logger, logging.WARNING, "Invalid JSON in webhook body",
                      event=event_type, error=str(e))
            return InvalidPayload(event_type, "Invalid JSON payload")

        result = self.validator.validate(event_type, payload)
        if isinstance(result, (IgnoredEvent, InvalidPayload)):
            return result

        return self.producer.enqueue(result, priority=priority)
