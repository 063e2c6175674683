"""Akrual API client.

Owns the HTTP transport and the authentication session, and maps each
remote read endpoint onto a method. Every call authenticates first (reusing
the cached token while it is fresh), attaches the session's bearer token and
cookies, and validates that the response is JSON before returning it.
"""

import datetime
import http.cookiejar
import threading
from typing import Any

import httpx

from .auth import attach_cookies, build_auth_metadata
from .responses import parse_response
from .session import Session
from .transport import DEFAULT_TIMEOUT, create_http_client, send_request
from .types import (
    Credentials,
    DesagioQuery,
    LoginEncoding,
    ParsedResponse,
    SerieQuery,
    SeriePeriodQuery,
)

CookiesInput = httpx.Cookies | http.cookiejar.CookieJar | dict[str, str]


class AkrualClient:
    """HTTP client for the Akrual securities-registry API.

    The underlying ``httpx.Client`` is created lazily on first use and
    reused for the lifetime of the instance. Safe to share between threads:
    concurrent calls with an expired token trigger a single login.
    Can be used as a context manager for automatic cleanup.
    """

    def __init__(
        self,
        endpoint: str,
        username: str,
        password: str,
        token: str | None = None,
        cookies: CookiesInput | None = None,
        *,
        login_encoding: LoginEncoding | str = LoginEncoding.JSON,
        cookies_enabled: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the API client.

        Args:
            endpoint: Base URL of the Akrual API (e.g., "https://api.akrual.com").
            username: Login user name.
            password: Login password.
            token: Previously issued access token, to resume a session
                without logging in again.
            cookies: Previously issued cookies, to resume a session.
            login_encoding: Send login credentials as "json" or "form".
            cookies_enabled: Capture cookies issued at login and replay them.
            timeout: Request timeout in seconds (default: 30.0).
            transport: Optional httpx transport override.

        Raises:
            ValueError: If endpoint is empty or timeout is not positive.
        """
        if not endpoint:
            msg = "endpoint cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        self.credentials = Credentials(
            endpoint=endpoint,
            username=username,
            password=password,
        )
        self.session = Session(
            self.credentials,
            token=token,
            cookies=httpx.Cookies(cookies) if cookies is not None else None,
            login_encoding=LoginEncoding(login_encoding),
            cookies_enabled=cookies_enabled,
        )
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.Client | None = None
        self._client_lock = threading.Lock()

    @property
    def endpoint(self) -> str:
        return self.credentials.endpoint

    @property
    def client(self) -> httpx.Client:
        """Get or create the owned httpx client.

        Returns:
            The httpx.Client bound to the API endpoint.
        """
        with self._client_lock:
            if self._client is None or self._client.is_closed:
                self._client = create_http_client(
                    base_url=self.endpoint,
                    timeout=self._timeout,
                    transport=self._transport,
                )
            return self._client

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close the HTTP client if open."""
        with self._client_lock:
            if self._client is not None and not self._client.is_closed:
                self._client.close()

    def is_authed(self) -> bool:
        """Check whether the held token is present and not yet expired."""
        return self.session.is_authenticated()

    def auth(self, *, force: bool = False) -> str:
        """Return a usable access token, logging in when needed.

        Args:
            force: Log in even if the held token has not expired locally.
        """
        return self.session.authenticate(self.client, force=force)

    def build_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Request:
        """Authenticate and build a request carrying the session credentials.

        Args:
            method: HTTP method.
            path: API path relative to the endpoint.
            params: Query parameters.
            data: Form-encoded body fields.
            json: JSON body.

        Returns:
            The prepared request.
        """
        self.auth()
        metadata = build_auth_metadata(self.session.state)
        request = self.client.build_request(
            method,
            path,
            params=params,
            data=data,
            json=json,
            headers=metadata.headers,
        )
        return attach_cookies(request, metadata.cookies)

    def send(self, request: httpx.Request) -> ParsedResponse:
        """Send a prepared request and return its decoded JSON body.

        Raises:
            UnexpectedContentTypeError: If the response is not JSON.
            MalformedJsonError: If the response body is not valid JSON.
            httpx.TransportError: If the request fails in transit.
        """
        response = send_request(self.client, request)
        return parse_response(response)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        json: Any = None,
    ) -> ParsedResponse:
        """Make an authenticated request and return its decoded JSON body."""
        return self.send(
            self.build_request(method, path, params=params, data=data, json=json),
        )

    def get_all_series(self) -> ParsedResponse:
        """List every series."""
        return self.request("GET", "/Escrituracao/GetAllSeries")

    def get_single_serie(self, serie_id: int) -> ParsedResponse:
        """Fetch a single series by id."""
        query = SerieQuery(serie_id=serie_id)
        return self.request(
            "GET",
            "/Escrituracao/GetSingleSerie",
            params=query.model_dump(by_alias=True),
        )

    def get_all_unit_prices(self) -> ParsedResponse:
        """List unit prices (PUs) for every series."""
        return self.request("GET", "/Escrituracao/GetAllPus")

    def get_unit_prices(
        self,
        serie_id: int,
        start: datetime.date,
        end: datetime.date,
    ) -> ParsedResponse:
        """Fetch a series' unit prices between two instants.

        The parameters are sent as a form-encoded body on a GET request.
        """
        query = SeriePeriodQuery(serie_id=serie_id, start=start, end=end)
        return self.request(
            "GET",
            "/CRM/GetPus",
            data=query.model_dump(by_alias=True),
        )

    def get_calendar_events(
        self,
        serie_id: int,
        start: datetime.date,
        end: datetime.date,
    ) -> ParsedResponse:
        """Fetch a series' calendar events between two instants."""
        query = SeriePeriodQuery(serie_id=serie_id, start=start, end=end)
        return self.request(
            "GET",
            "/Calendar/GetCalendarEventsAPI",
            json=query.model_dump(by_alias=True),
        )

    def get_expenses(
        self,
        serie_id: int,
        start: datetime.date,
        end: datetime.date,
    ) -> ParsedResponse:
        """Fetch a series' expense workflows between two instants."""
        query = SeriePeriodQuery(serie_id=serie_id, start=start, end=end)
        return self.request(
            "GET",
            "/CRM/GetWorkflowDespesas",
            json=query.model_dump(by_alias=True),
        )

    def calculate_desagio(
        self,
        serie_id: int,
        type_: int,
        date: datetime.date,
        value: float,
    ) -> ParsedResponse:
        """Calculate the discount (desagio) for a series on a given date.

        Args:
            serie_id: Series id.
            type_: Calculation type code (``tipo``).
            date: Reference date.
            value: Amount to discount.
        """
        query = DesagioQuery(serie_id=serie_id, type_=type_, date=date, value=value)
        return self.request(
            "GET",
            "/CRM/Desagio",
            params=query.model_dump(by_alias=True),
        )
