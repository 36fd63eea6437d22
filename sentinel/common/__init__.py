"""Common utilities and shared functionality."""

from .exceptions import (
    WebhookError,
    Unauthorized,
    UnauthorizedReason,
    EnqueueFailed,
    MetricsUnavailable,
)

from .hmac_utils import (
    compute_hmac_sha256,
    sign_payload,
    verify_hmac_signature,
    SignatureVerifier,
)

from .logging_utils import (
    setup_logging,
    log_server_message,
    log_event,
)

__all__ = [
    # Exceptions
    "WebhookError",
    "Unauthorized",
    "UnauthorizedReason",
    "EnqueueFailed",
    "MetricsUnavailable",
    # HMAC utilities
    "compute_hmac_sha256",
    "sign_payload",
    "verify_hmac_signature",
    "SignatureVerifier",
    # Logging utilities
    "setup_logging",
    "log_server_message",
    "log_event",
]
