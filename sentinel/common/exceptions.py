"""Custom exceptions for webhook ingestion."""

from enum import Enum


class WebhookError(Exception):
    """Base exception for webhook ingestion"""
    pass


class UnauthorizedReason(str, Enum):
    """Why a webhook request failed authentication."""

    MISSING_CREDENTIALS = "MissingCredentials"
    SIGNATURE_MISMATCH = "SignatureMismatch"


class Unauthorized(WebhookError):
    """Raised when a request cannot be authenticated"""

    def __init__(self, reason: UnauthorizedReason, detail: str = ""):
        self.reason = reason
        self.detail = detail or reason.value
        super().__init__(self.detail)


class EnqueueFailed(WebhookError):
    """Raised when a job could not be submitted to the queue"""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Failed to enqueue job: {cause}")


class MetricsUnavailable(WebhookError):
    """Raised when queue metrics cannot be read from the store"""

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Queue metrics unavailable: {cause}")
