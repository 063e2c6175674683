"""Akrual API client.

HTTP client for the Akrual securities-registry API: password-grant login
with a cached bearer token, transparent re-authentication once the token
expires, and typed read operations for series, unit prices, calendar
events, expenses and discount calculations.

Exports:
    AkrualClient: HTTP client with session handling and endpoint methods.
    Session: Token and cookie state with single-flight login.
    LoginEncoding: Body encoding of the login request.
    Exception types raised by the client.
"""

from .client import AkrualClient
from .exceptions import (
    AkrualClientError,
    AuthenticationError,
    MalformedJsonError,
    MalformedTokenError,
    TransportError,
    UnexpectedContentTypeError,
)
from .session import Session
from .transport import DEFAULT_TIMEOUT
from .types import Credentials, LoginEncoding, SessionState

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_TIMEOUT",
    "AkrualClient",
    "AkrualClientError",
    "AuthenticationError",
    "Credentials",
    "LoginEncoding",
    "MalformedJsonError",
    "MalformedTokenError",
    "Session",
    "SessionState",
    "TransportError",
    "UnexpectedContentTypeError",
]
