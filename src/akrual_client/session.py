"""Authentication state for the Akrual API.

The session holds the bearer token and, when enabled, the cookie set issued
at login. It decides whether the held token is still usable and performs
the password-grant exchange when it is not. The check-then-login sequence
runs under a lock so concurrent callers trigger a single login.
"""

import http.cookiejar
import threading
import time
import urllib.request

import httpx
import structlog

from .auth import attach_cookies, build_auth_metadata
from .exceptions import AuthenticationError, MalformedTokenError
from .responses import parse_response
from .token import expires_at, is_expired
from .transport import send_request
from .types import Credentials, LoginEncoding, SessionState

logger = structlog.get_logger(__name__)

LOGIN_PATH = "/oauth/token"


class _CaptureCookiePolicy(http.cookiejar.DefaultCookiePolicy):
    """Cookie policy that accepts every cookie the login response sets.

    Domains are rewritten to the endpoint host after parsing, so the
    server's Domain attribute must not cause a cookie to be dropped.
    """

    def set_ok(
        self,
        cookie: http.cookiejar.Cookie,
        request: urllib.request.Request,
    ) -> bool:
        return True


def normalize_cookies(response: httpx.Response, host: str) -> httpx.Cookies:
    """Build a cookie set from a response's Set-Cookie headers, scoped to ``host``.

    The server does not always emit domain-scoped cookies, so every cookie's
    domain is replaced with the endpoint host. Path defaults to ``/``.
    Cookies that are already expired are not kept.

    Args:
        response: Login response; its request must be set.
        host: Host name of the configured endpoint.

    Returns:
        A new cookie jar holding only the cookies the response issued.
    """
    issued = httpx.Cookies(http.cookiejar.CookieJar(policy=_CaptureCookiePolicy()))
    issued.extract_cookies(response)

    jar = http.cookiejar.CookieJar()
    for cookie in issued.jar:
        cookie.domain = host
        cookie.domain_specified = True
        cookie.domain_initial_dot = False
        if not cookie.path_specified:
            cookie.path = "/"
        jar.set_cookie(cookie)
    return httpx.Cookies(jar)


def _is_usable(token: str | None, now: float | None = None) -> bool:
    return token is not None and not is_expired(token, now)


class Session:
    """Bearer token and cookie state for one client instance.

    State starts from the optional token and cookies supplied at
    construction and is replaced wholesale by each successful login.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        token: str | None = None,
        cookies: httpx.Cookies | None = None,
        login_encoding: LoginEncoding = LoginEncoding.JSON,
        cookies_enabled: bool = True,
    ):
        """Initialize the session.

        Args:
            credentials: Endpoint and login credentials.
            token: Previously issued access token to resume with.
            cookies: Previously issued cookie set to resume with.
            login_encoding: Body encoding of the login request.
            cookies_enabled: Capture and replay cookies issued at login.
        """
        self._credentials = credentials
        self._login_encoding = LoginEncoding(login_encoding)
        self._cookies_enabled = cookies_enabled
        self._state = SessionState(token=token or None, cookies=cookies)
        self._lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        """Current authentication state snapshot."""
        return self._state

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    def is_authenticated(self, now: float | None = None) -> bool:
        """Check whether a usable token is held.

        Args:
            now: Reference Unix timestamp (default: current time).

        Returns:
            True iff a token is held and its expiration is after ``now``.

        Raises:
            MalformedTokenError: If the held token cannot be decoded.
        """
        return _is_usable(self._state.token, now)

    def authenticate(self, client: httpx.Client, *, force: bool = False) -> str:
        """Return a usable token, logging in if the held one is not.

        Args:
            client: HTTP client used for the login exchange.
            force: Log in even if the held token is still usable. Callers
                use this to recover from a token the server rejected early.

        Returns:
            The current access token.

        Raises:
            AuthenticationError: If the login response has no access token.
            UnexpectedContentTypeError: If the login response is not JSON.
            MalformedJsonError: If the login response body is not valid JSON.
            httpx.TransportError: If the login request fails in transit.
        """
        observed = self._state.token
        if not force and _is_usable(observed):
            logger.debug("Reusing cached access token")
            return observed

        with self._lock:
            # Another caller may have logged in while we waited
            current = self._state.token
            if current is not None and current != observed:
                return current
            if not force and _is_usable(current):
                return current
            return self._login(client)

    def _login(self, client: httpx.Client) -> str:
        metadata = build_auth_metadata(self._state)
        payload = self._credentials.login_payload()
        if self._login_encoding is LoginEncoding.FORM:
            body = {"data": payload}
        else:
            body = {"json": payload}

        logger.info(
            "Requesting access token",
            username=self._credentials.username,
            encoding=self._login_encoding.value,
        )
        request = client.build_request(
            "POST",
            LOGIN_PATH,
            headers=metadata.headers,
            **body,
        )
        attach_cookies(request, metadata.cookies)
        response = send_request(client, request)
        data = parse_response(response)

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token or not isinstance(token, str):
            logger.error(
                "Login response has no access token",
                status_code=response.status_code,
            )
            msg = "missing access_token"
            raise AuthenticationError(msg)

        cookies = self._state.cookies
        if self._cookies_enabled and response.headers.get_list("set-cookie"):
            cookies = normalize_cookies(response, self._credentials.host)
        self._state = SessionState(token=token, cookies=cookies)

        try:
            exp = expires_at(token)
        except MalformedTokenError:
            logger.warning("Access token is not a decodable JWT")
            exp = None
        logger.info(
            "Authenticated",
            username=self._credentials.username,
            cookies=len(cookies) if cookies is not None else 0,
            expires_in_seconds=int(exp - time.time()) if exp is not None else None,
        )
        return token
