"""HTTP transport helpers.

Creates the ``httpx.Client`` owned by an :class:`~akrual_client.AkrualClient`
and sends requests with request/duration logging.
"""

import http.cookiejar
import time
import urllib.request

import httpx
import structlog

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0


class _NoStoreCookiePolicy(http.cookiejar.DefaultCookiePolicy):
    """Cookie policy that refuses every cookie a response tries to set.

    The session owns the cookie set and replaces it on login; the transport
    must not collect cookies on its own.
    """

    def set_ok(
        self,
        cookie: http.cookiejar.Cookie,
        request: urllib.request.Request,
    ) -> bool:
        return False


def create_http_client(
    base_url: str,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an httpx client bound to the API endpoint.

    Args:
        base_url: Base URL of the Akrual API.
        timeout: Request timeout in seconds.
        transport: Optional transport override (e.g. ``httpx.MockTransport``).
    """
    return httpx.Client(
        base_url=base_url,
        headers={"Accept": "application/json"},
        cookies=http.cookiejar.CookieJar(policy=_NoStoreCookiePolicy()),
        timeout=timeout,
        transport=transport,
    )


def send_request(client: httpx.Client, request: httpx.Request) -> httpx.Response:
    """Send a prepared request, logging its outcome.

    Transport errors are logged and re-raised unchanged.
    """
    start_time = time.time()
    try:
        logger.debug(
            "Making API request",
            method=request.method,
            path=request.url.path,
        )
        response = client.send(request)
    except httpx.HTTPError:
        duration = time.time() - start_time
        logger.exception(
            "API request failed",
            method=request.method,
            path=request.url.path,
            duration_seconds=round(duration, 3),
        )
        raise

    duration = time.time() - start_time
    logger.debug(
        "API request completed",
        status_code=response.status_code,
        duration_seconds=round(duration, 3),
    )
    return response
