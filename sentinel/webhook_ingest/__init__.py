"""GitHub webhook ingestion module.

This module handles:
- Receiving GitHub webhooks
- Validating webhook signatures and payloads
- Publishing security-analysis jobs to the queue
- Reporting queue health
"""

from .config import WebhookIngestConfig
from .metrics import QueueMetricsReporter
from .pipeline import IncomingRequest, WebhookPipeline
from .producer import JobProducer
from .validator import PayloadValidator

__all__ = [
    "WebhookIngestConfig",
    "QueueMetricsReporter",
    "IncomingRequest",
    "WebhookPipeline",
    "JobProducer",
    "PayloadValidator",
]
