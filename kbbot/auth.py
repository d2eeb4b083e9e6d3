"""
Slack request signature verification.
"""
import hashlib
import hmac
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import parse_qsl

from kbbot.errors import AuthError, AuthFailure
from kbbot.logger import logger

SIGNATURE_HEADER = "x-slack-signature"
TIMESTAMP_HEADER = "x-slack-request-timestamp"
SIGNATURE_VERSION = "v0"
DEFAULT_MAX_AGE_SECONDS = 300


@dataclass
class InboundRequest:
    """An inbound webhook call exactly as received, before any parsing."""

    headers: Mapping[str, str]
    raw_body: bytes

    def header(self, name: str) -> str:
        # Starlette headers are already case-insensitive, plain dicts are not
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return ""


def compute_signature(secret: str, timestamp: str, raw_body: bytes) -> str:
    """Return the ``v0=<hex>`` signature Slack sends for *raw_body*."""
    basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + raw_body
    digest = hmac.new(secret.encode("utf-8"), basestring, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def parse_form_body(raw_body: bytes) -> dict[str, str]:
    return dict(parse_qsl(raw_body.decode("utf-8", errors="replace"), keep_blank_values=True))


def authenticate(
    request: InboundRequest,
    secret: str,
    now_seconds: int,
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
) -> dict[str, str]:
    """
    Verify a signed Slack request and return its form fields.

    Args:
        request: Headers and the untouched body bytes
        secret: Slack signing secret
        now_seconds: Current unix time
        max_age_seconds: Allowed distance between now and the request timestamp

    Returns:
        The URL-encoded body parsed into a flat dict

    Raises:
        AuthError: If credentials are missing, the request is stale,
            or the signature does not match
    """
    signature = request.header(SIGNATURE_HEADER).strip()
    timestamp = request.header(TIMESTAMP_HEADER).strip()

    if not signature or not timestamp:
        raise AuthError(AuthFailure.MISSING_CREDENTIALS, "Missing Slack signature headers")

    try:
        request_time = int(timestamp)
    except ValueError:
        raise AuthError(AuthFailure.STALE_REQUEST, f"Unreadable request timestamp: {timestamp!r}")

    # Replay protection
    if abs(now_seconds - request_time) > max_age_seconds:
        raise AuthError(
            AuthFailure.STALE_REQUEST,
            f"Request timestamp is {abs(now_seconds - request_time)}s away from now",
        )

    expected = compute_signature(secret, timestamp, request.raw_body)
    if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
        logger.warning("Signature verification failed")
        raise AuthError(AuthFailure.INVALID_SIGNATURE, "Signature mismatch")

    return parse_form_body(request.raw_body)
