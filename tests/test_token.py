"""Tests for JWT expiry inspection."""

import time

import pytest

from akrual_client import token
from akrual_client.exceptions import MalformedTokenError

# ---------------------------------------------------------------------------
# decode_payload / expires_at
# ---------------------------------------------------------------------------


def test_decode_payload_returns_claims(make_jwt):
    """Payload claims are decoded without verifying the signature."""
    jwt = make_jwt({"sub": "user", "exp": 1700000000})
    assert token.decode_payload(jwt) == {"sub": "user", "exp": 1700000000}


def test_decode_payload_rejects_two_segment_token():
    """Token with only two segments cannot be decoded."""
    with pytest.raises(MalformedTokenError):
        token.decode_payload("header.payload")


def test_decode_payload_rejects_invalid_base64():
    """Malformed base64 payload raises MalformedTokenError."""
    with pytest.raises(MalformedTokenError):
        token.decode_payload("header.!!!invalid!!!.signature")


def test_decode_payload_rejects_non_object_payload(make_jwt):
    """A payload that is valid JSON but not an object is malformed."""
    with pytest.raises(MalformedTokenError, match="not a JSON object"):
        token.decode_payload(make_jwt([1, 2, 3]))


def test_expires_at_returns_float_timestamp(make_jwt):
    """The exp claim is returned as a float timestamp."""
    assert token.expires_at(make_jwt({"exp": 1700000000})) == 1700000000.0


def test_expires_at_accepts_fractional_exp(make_jwt):
    """A float exp claim is accepted as is."""
    assert token.expires_at(make_jwt({"exp": 1700000000.5})) == 1700000000.5


def test_expires_at_without_exp_claim_is_none(make_jwt):
    """A JWT without an exp claim has no expiration instant."""
    assert token.expires_at(make_jwt({"sub": "user"})) is None


@pytest.mark.parametrize("exp", ["tomorrow", True, [1]])
def test_expires_at_rejects_non_numeric_exp(make_jwt, exp):
    """A non-numeric exp claim raises MalformedTokenError."""
    with pytest.raises(MalformedTokenError, match="not numeric"):
        token.expires_at(make_jwt({"exp": exp}))


# ---------------------------------------------------------------------------
# is_expired
# ---------------------------------------------------------------------------


def test_is_expired_false_before_expiry(make_jwt):
    """A token is not expired strictly before its exp instant."""
    jwt = make_jwt({"exp": 1000})
    assert token.is_expired(jwt, now=999.999) is False


def test_is_expired_true_at_exact_expiry(make_jwt):
    """A token whose exp equals now is expired."""
    jwt = make_jwt({"exp": 1000})
    assert token.is_expired(jwt, now=1000.0) is True


def test_is_expired_true_after_expiry(make_jwt):
    """A token is expired strictly after its exp instant."""
    jwt = make_jwt({"exp": 1000})
    assert token.is_expired(jwt, now=1000.001) is True


def test_is_expired_uses_current_time_by_default(fresh_token, expired_token):
    """Without an explicit reference time, the wall clock is used."""
    assert token.is_expired(fresh_token) is False
    assert token.is_expired(expired_token) is True


def test_is_expired_without_exp_claim_never_expires(make_jwt):
    """A JWT without exp claim is treated as non-expiring."""
    jwt = make_jwt({"sub": "user"})
    assert token.is_expired(jwt, now=time.time() + 10**9) is False


def test_is_expired_non_jwt_token_is_skipped():
    """Opaque tokens carry no expiry and are never considered expired."""
    assert token.is_expired("opaque-access-token") is False


def test_is_expired_raises_for_corrupt_jwt():
    """A three-segment token with an undecodable payload raises."""
    with pytest.raises(MalformedTokenError):
        token.is_expired("header.!!!invalid!!!.signature")
