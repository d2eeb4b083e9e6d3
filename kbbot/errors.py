"""
Error types shared by the authenticator, crawler and search pipeline.
"""
from enum import Enum
from typing import Optional


class AuthFailure(str, Enum):
    MISSING_CREDENTIALS = "missing_credentials"
    STALE_REQUEST = "stale_request"
    INVALID_SIGNATURE = "invalid_signature"


class FetchFailure(str, Enum):
    NETWORK_FAILURE = "network_failure"
    NON_SUCCESS_STATUS = "non_success_status"
    TIMEOUT = "timeout"


class AuthError(Exception):
    """Raised when an inbound Slack request cannot be authenticated."""

    def __init__(self, reason: AuthFailure, message: str = ""):
        self.reason = reason
        super().__init__(message or reason.value)


class FetchError(Exception):
    """Raised when a knowledge base page cannot be retrieved."""

    def __init__(
        self,
        url: str,
        kind: FetchFailure,
        message: str = "",
        status_code: Optional[int] = None,
    ):
        self.url = url
        self.kind = kind
        self.status_code = status_code
        super().__init__(message or f"{kind.value} fetching {url}")


class SearchFailure(Exception):
    """Wraps an error the search pipeline could not recover from."""
