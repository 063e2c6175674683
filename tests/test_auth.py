"""Tests for building request authorization metadata."""

import http.cookiejar

import httpx

from akrual_client import auth
from akrual_client.types import SessionState


def test_token_yields_single_bearer_header():
    """A held token produces exactly one Authorization header."""
    metadata = auth.build_auth_metadata(SessionState(token="abc"))
    assert metadata.headers == {"Authorization": "Bearer abc"}
    assert metadata.cookies is None


def test_no_token_yields_no_headers():
    """An empty session produces no auth headers and no cookies."""
    metadata = auth.build_auth_metadata(SessionState())
    assert metadata.headers == {}
    assert metadata.cookies is None


def test_empty_token_yields_no_headers():
    """An empty token string is not attached."""
    metadata = auth.build_auth_metadata(SessionState(token=""))
    assert metadata.headers == {}


def test_expired_token_is_still_attached(expired_token):
    """Freshness is not checked here; the held token is attached as is."""
    metadata = auth.build_auth_metadata(SessionState(token=expired_token))
    assert metadata.headers == {"Authorization": f"Bearer {expired_token}"}


def test_cookie_set_is_attached_as_jar():
    """A held cookie set is returned as the request's jar."""
    cookies = httpx.Cookies({"sid": "xyz"})
    metadata = auth.build_auth_metadata(SessionState(token="abc", cookies=cookies))
    assert metadata.headers == {"Authorization": "Bearer abc"}
    assert metadata.cookies is cookies


def test_cookies_without_token():
    """Cookies are attached even when no token is held."""
    cookies = httpx.Cookies({"sid": "xyz"})
    metadata = auth.build_auth_metadata(SessionState(cookies=cookies))
    assert metadata.headers == {}
    assert metadata.cookies is cookies


# ---------------------------------------------------------------------------
# attach_cookies
# ---------------------------------------------------------------------------


def host_cookie(name: str, value: str, host: str) -> http.cookiejar.Cookie:
    """Build a cookie scoped to exactly ``host``, as captured at login."""
    return http.cookiejar.Cookie(
        version=0,
        name=name,
        value=value,
        port=None,
        port_specified=False,
        domain=host,
        domain_specified=True,
        domain_initial_dot=False,
        path="/",
        path_specified=True,
        secure=False,
        expires=None,
        discard=True,
        comment=None,
        comment_url=None,
        rest={},
    )


def test_attach_cookies_to_dotless_host():
    """Cookies scoped to a host without a dot are written to its requests."""
    jar = http.cookiejar.CookieJar()
    jar.set_cookie(host_cookie("sid", "abc", "localhost"))
    request = httpx.Request("GET", "http://localhost:8080/Escrituracao/GetAllSeries")

    auth.attach_cookies(request, httpx.Cookies(jar))

    assert request.headers["Cookie"] == "sid=abc"


def test_attach_cookies_skips_other_hosts():
    """A cookie scoped to another host is not sent."""
    jar = http.cookiejar.CookieJar()
    jar.set_cookie(host_cookie("sid", "abc", "other-host"))
    request = httpx.Request("GET", "http://localhost:8080/")

    auth.attach_cookies(request, httpx.Cookies(jar))

    assert "Cookie" not in request.headers


def test_attach_cookies_without_cookies_leaves_request():
    """No cookie set means no Cookie header."""
    request = httpx.Request("GET", "https://api.example.com/")
    assert auth.attach_cookies(request, None) is request
    assert "Cookie" not in request.headers
