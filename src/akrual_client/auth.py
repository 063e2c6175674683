"""Authorization metadata for outgoing requests.

Builds the headers and cookie jar to attach to a request from a session
snapshot. Never triggers a login: callers authenticate first, then decorate.
"""

import http.cookiejar
import urllib.request
from dataclasses import dataclass, field

import httpx

from .types import SessionState


@dataclass(frozen=True)
class AuthMetadata:
    """Headers and cookies to merge into an outgoing request."""

    headers: dict[str, str] = field(default_factory=dict)
    cookies: httpx.Cookies | None = None


class _EndpointCookiePolicy(http.cookiejar.DefaultCookiePolicy):
    """Cookie policy that also returns cookies scoped to the exact request host.

    The default policy matches a dotless host such as ``localhost`` as
    ``localhost.local`` and refuses cookies whose domain is the bare host.
    """

    def return_ok_domain(
        self,
        cookie: http.cookiejar.Cookie,
        request: urllib.request.Request,
    ) -> bool:
        if cookie.domain == urllib.request.request_host(request):
            return True
        return super().return_ok_domain(cookie, request)


def build_auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def build_auth_metadata(state: SessionState) -> AuthMetadata:
    """Compute the auth metadata for a session snapshot.

    A held token is attached as a bearer header whether or not it is still
    fresh; a held cookie set is attached as the request's jar.
    """
    headers = build_auth_headers(state.token) if state.token else {}
    return AuthMetadata(headers=headers, cookies=state.cookies)


def attach_cookies(
    request: httpx.Request,
    cookies: httpx.Cookies | None,
) -> httpx.Request:
    """Write the Cookie header for ``cookies`` onto a built request.

    httpx copies per-request cookies into a jar with the default policy, so
    the header is set here with a policy that accepts the endpoint host.
    """
    if not cookies:
        return request
    jar = http.cookiejar.CookieJar(policy=_EndpointCookiePolicy())
    for cookie in cookies.jar:
        jar.set_cookie(cookie)
    httpx.Cookies(jar).set_cookie_header(request)
    return request
