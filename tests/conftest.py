"""Shared fixtures for the Akrual client tests."""

import base64
import json
import time
from collections.abc import Callable

import pytest


def _encode_segment(data: dict | list) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


@pytest.fixture
def make_jwt() -> Callable[..., str]:
    """Factory building a minimal unsigned JWT string from a payload."""

    def _make_jwt(payload: dict | list, header: dict | None = None) -> str:
        header = header or {"alg": "HS256", "typ": "JWT"}
        return f"{_encode_segment(header)}.{_encode_segment(payload)}.fakesignature"

    return _make_jwt


@pytest.fixture
def fresh_token(make_jwt: Callable[..., str]) -> str:
    """JWT expiring an hour from now."""
    return make_jwt({"sub": "u", "exp": int(time.time()) + 3600})


@pytest.fixture
def expired_token(make_jwt: Callable[..., str]) -> str:
    """JWT that expired a minute ago."""
    return make_jwt({"sub": "u", "exp": int(time.time()) - 60})
