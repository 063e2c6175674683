"""Response validation for the Akrual API.

Every response, including the login exchange, must declare a JSON body.
The HTTP status is not inspected: error bodies are returned to the caller
as parsed JSON like any other payload.
"""

import json

import httpx
import structlog

from .exceptions import MalformedJsonError, UnexpectedContentTypeError
from .types import ParsedResponse

logger = structlog.get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


def parse_response(response: httpx.Response) -> ParsedResponse:
    """Decode a JSON response body.

    Args:
        response: Raw response from the transport.

    Returns:
        The decoded JSON object or array.

    Raises:
        UnexpectedContentTypeError: If Content-Type does not contain
            ``application/json``.
        MalformedJsonError: If the body is not a valid JSON object or array.
    """
    content_type = response.headers.get("Content-Type", "")
    if JSON_CONTENT_TYPE not in content_type:
        logger.error(
            "Unexpected response content type",
            status_code=response.status_code,
            content_type=content_type,
        )
        raise UnexpectedContentTypeError(content_type)

    try:
        data = json.loads(response.read())
    except ValueError as exc:
        msg = f"Response body is not valid JSON (status={response.status_code})"
        raise MalformedJsonError(msg) from exc

    if not isinstance(data, dict | list):
        msg = f"Expected a JSON object or array, got {type(data).__name__}"
        raise MalformedJsonError(msg)
    return data
