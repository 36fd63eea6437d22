"""HMAC utilities for webhook signature validation."""

import hashlib
import hmac
import logging
from typing import Optional, Protocol

from .exceptions import Unauthorized, UnauthorizedReason
from .logging_utils import log_event

logger = logging.getLogger(__name__)

SIGNATURE_ALGORITHM = "sha256"
SIGNATURE_PREFIX_LENGTH = 10


class SignedRequest(Protocol):
    """The parts of an inbound request needed to check its signature."""

    body: bytes
    source_ip: Optional[str]

    def header(self, name: str) -> Optional[str]:
        ...


def compute_hmac_sha256(data: bytes, secret: str) -> str:
    """Compute HMAC-SHA256 signature for given data and secret."""
    return hmac.new(
        secret.encode("utf-8"),
        data,
        hashlib.sha256
    ).hexdigest()


def sign_payload(data: bytes, secret: str) -> str:
    """Return the signature header value a sender would attach to ``data``."""
    return f"{SIGNATURE_ALGORITHM}={compute_hmac_sha256(data, secret)}"


def split_signature_header(signature_header: str) -> tuple[str, str]:
    """Split ``"<algorithm>=<hex-digest>"`` into its two parts.

    A header without ``=`` yields an empty algorithm.
    """
    algorithm, sep, digest = signature_header.partition("=")
    if not sep:
        return "", signature_header
    return algorithm.strip().lower(), digest.strip()


def verify_hmac_signature(data: bytes, signature_header: str, secret: str) -> bool:
    """Verify HMAC-SHA256 signature from webhook request.

    The digests are compared as bytes with ``hmac.compare_digest`` so the
    comparison does not short-circuit on the first differing character and
    returns False (rather than raising) for digests of the wrong length or
    containing non-ASCII characters.
    """
    if not signature_header or not secret:
        return False

    algorithm, received = split_signature_header(signature_header)
    if algorithm != SIGNATURE_ALGORITHM:
        return False

    computed = compute_hmac_sha256(data, secret)
    return hmac.compare_digest(
        computed.encode("ascii"),
        received.lower().encode("utf-8", errors="replace"),
    )


class SignatureVerifier:
    """Authenticates webhook bodies against the shared secret."""

    header_name = "x-hub-signature-256"

    def __init__(self, secret: Optional[str]):
        self._secret = secret or ""

    def verify(self, request: SignedRequest) -> None:
        """Raise ``Unauthorized`` unless the request carries a valid signature."""
        signature_header = request.header(self.header_name)

        if not signature_header or not self._secret:
            log_event(
                logger, logging.WARNING,
                "Missing signature or secret for webhook verification",
                has_signature=bool(signature_header),
                has_secret=bool(self._secret),
                sourceIP=request.source_ip,
            )
            raise Unauthorized(
                UnauthorizedReason.MISSING_CREDENTIALS,
                "Unauthorized : Missing signature or secret",
            )

        if not verify_hmac_signature(request.body, signature_header, self._secret):
            _, received = split_signature_header(signature_header)
            log_event(
                logger, logging.WARNING,
                "Invalid webhook signature",
                received=received[:SIGNATURE_PREFIX_LENGTH] + "...",
                sourceIP=request.source_ip,
            )
            raise Unauthorized(
                UnauthorizedReason.SIGNATURE_MISMATCH,
                "Unauthorized : Invalid signature",
            )

        log_event(
            logger, logging.DEBUG,
            "Webhook signature verified successfully",
            sourceIP=request.source_ip,
        )
