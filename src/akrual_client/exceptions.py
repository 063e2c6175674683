"""Exception types for the Akrual API client.

Transport failures are not wrapped: ``TransportError`` is httpx's own
exception class, re-exported so callers can catch every failure kind from a
single module.
"""

import httpx

TransportError = httpx.TransportError


class AkrualClientError(Exception):
    """Base exception for all Akrual client errors."""


class UnexpectedContentTypeError(AkrualClientError):
    """Raised when a response does not declare a JSON body."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Unexpected Content-Type: {content_type}")


class MalformedJsonError(AkrualClientError):
    """Raised when a declared-JSON body cannot be decoded."""


class AuthenticationError(AkrualClientError):
    """Raised when the login exchange does not yield an access token."""


class MalformedTokenError(AkrualClientError):
    """Raised when a stored token cannot be decoded for an expiry check."""
