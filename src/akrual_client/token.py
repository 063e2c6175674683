"""Signed token inspection.

Reads the ``exp`` claim out of a JWT payload for local expiry bookkeeping.
The signature is never verified, so nothing decoded here is trusted beyond
deciding whether a new login is due.
"""

import base64
import json
import time
from typing import Any

import structlog

from .exceptions import MalformedTokenError

logger = structlog.get_logger(__name__)


def decode_payload(token: str) -> dict[str, Any]:
    """Decode the claims segment of a JWT without verifying it.

    Args:
        token: The raw JWT string (header.payload.signature).

    Returns:
        The decoded claims object.

    Raises:
        MalformedTokenError: If the token is not a three-segment JWT or its
            payload is not a base64url-encoded JSON object.
    """
    parts = token.split(".")
    if len(parts) != 3:  # noqa: PLR2004
        msg = "Token does not have three segments"
        raise MalformedTokenError(msg)

    # JWT base64url encoding omits padding; restore it
    payload_b64 = parts[1]
    padding = 4 - len(payload_b64) % 4
    if padding != 4:  # noqa: PLR2004
        payload_b64 += "=" * padding

    try:
        payload = json.loads(base64.urlsafe_b64decode(payload_b64))
    except (ValueError, json.JSONDecodeError) as exc:
        msg = "Failed to decode token payload"
        raise MalformedTokenError(msg) from exc

    if not isinstance(payload, dict):
        msg = "Token payload is not a JSON object"
        raise MalformedTokenError(msg)
    return payload


def expires_at(token: str) -> float | None:
    """Return the token's expiration instant as a Unix timestamp.

    Returns None when the token carries no ``exp`` claim, in which case it
    never expires.

    Raises:
        MalformedTokenError: If the token cannot be decoded or ``exp`` is
            not a number.
    """
    exp = decode_payload(token).get("exp")
    if exp is None:
        return None
    # bool is an int subclass but never a valid timestamp
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        msg = f"Token 'exp' claim is not numeric: {exp!r}"
        raise MalformedTokenError(msg)
    return float(exp)


def is_expired(token: str, now: float | None = None) -> bool:
    """Check whether a token is past its expiration instant.

    A token whose ``exp`` equals ``now`` is expired. Tokens that are not
    JWTs at all carry no expiry and are never considered expired.

    Args:
        token: The raw token string.
        now: Reference Unix timestamp (default: current time).

    Raises:
        MalformedTokenError: If a JWT's payload cannot be decoded.
    """
    if token.count(".") != 2:  # noqa: PLR2004
        logger.warning("Token does not appear to be a JWT, skipping expiry check")
        return False

    exp = expires_at(token)
    if exp is None:
        logger.warning("Token has no 'exp' claim, treating it as non-expiring")
        return False
    if now is None:
        now = time.time()
    return now >= exp
