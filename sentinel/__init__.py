"""Sentinel - GitHub webhook ingestion for security analysis.

This package turns source-control webhooks into queued analysis jobs:

- sentinel.webhook_ingest: Webhook reception, validation and job publishing
- sentinel.models: Shared data models and queue infrastructure
- sentinel.common: Shared utilities and common functionality
"""

__version__ = "1.0.0"

# Import main modules for easy access
from . import common
from . import models
from . import webhook_ingest

__all__ = [
    "common",
    "models",
    "webhook_ingest",
]
