"""
HTTP request normalization for the HTTP tool.

Turns a declarative ActionConfiguration into a RequestDescriptor: URL
validation, query parameter merge, header merge, default User-Agent and body
construction. Pure; performs no I/O.

Malformed individual params/headers (no key, no value) are skipped silently,
while a failure while traversing the header list is raised as
HeaderTransformError. The two behave differently on purpose.
"""

from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from restapi.core.config import DEFAULT_USER_AGENT, RequestLimits
from restapi.core.errors import (
    HeaderTransformError,
    InvalidUrlError,
    MissingMethodError,
    MissingPathError,
)
from restapi.core.logger import setup_logger
from restapi.core.sanitize import sanitize_headers
from .body import build_request_body, find_header
from .models import ActionConfiguration, Property, RequestBody, RequestDescriptor, ResponseType

logger = setup_logger(__name__, include_location=True)

USER_AGENT = 'User-Agent'

BodyBuilder = Callable[[ActionConfiguration, Dict[str, Any]], RequestBody]


def parse_url(path: Any) -> httpx.URL:
    """
    Parse ``path`` as an absolute URL.

    Raises:
        MissingPathError: path is absent or empty
        InvalidUrlError: path does not parse or is not absolute
    """
    if path is None or (isinstance(path, str) and not path.strip()):
        raise MissingPathError()
    if not isinstance(path, str):
        raise InvalidUrlError(path, f"expected a string, got {type(path).__name__}")

    try:
        url = httpx.URL(path.strip())
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise InvalidUrlError(path, f"Invalid URL: {e}") from e

    if not url.scheme or not url.host:
        raise InvalidUrlError(path, f"Invalid URL: '{path}' is not an absolute URL")
    return url


def append_query_params(url: httpx.URL, params: Optional[List[Optional[Property]]]) -> httpx.URL:
    """
    Append every param with both key and value to the URL query, in order.

    Duplicate keys are all kept; existing query parameters stay in front.
    """
    pairs = [
        (param.key, str(param.value))
        for param in params or []
        if param is not None and param.has_key_value()
    ]
    if not pairs:
        return url
    # QueryParams groups repeated keys, so the query is extended textually
    existing = url.query.decode('ascii')
    encoded = urlencode(pairs)
    query = f"{existing}&{encoded}" if existing else encoded
    return url.copy_with(query=query.encode('ascii'))


def merge_headers(headers: Optional[List[Optional[Property]]]) -> Dict[str, Any]:
    """
    Reduce the header list to a mapping; the first value seen for a key wins.

    Entries without a key are skipped. Any error while traversing the list is
    raised as HeaderTransformError.
    """
    merged: Dict[str, Any] = {}
    if not headers:
        return merged
    try:
        for header in headers:
            if header is None or not header.key:
                continue
            if header.key not in merged:
                merged[header.key] = header.value
    except Exception as e:
        raise HeaderTransformError(str(e)) from e
    return merged


def apply_default_user_agent(headers: Dict[str, Any], user_agent: str = DEFAULT_USER_AGENT) -> Dict[str, Any]:
    """Return headers with a User-Agent, keeping any existing one (case-insensitive)."""
    if find_header(headers, USER_AGENT) is not None:
        return headers
    result = dict(headers)
    result[USER_AGENT] = user_agent
    return result


def normalize(
    action: ActionConfiguration,
    limits: RequestLimits,
    *,
    body_builder: BodyBuilder = build_request_body,
    user_agent: str = DEFAULT_USER_AGENT,
) -> RequestDescriptor:
    """
    Build the executor-ready request for an action.

    Args:
        action: The action configuration
        limits: Timeout and size limits from the plugin runtime configuration
        body_builder: Builds the payload and final headers from the action
        user_agent: Value injected when the action sets no User-Agent

    Returns:
        The RequestDescriptor

    Raises:
        ConfigurationError: MissingPathError, InvalidUrlError,
            HeaderTransformError or MissingMethodError
    """
    url = parse_url(action.path)
    url = append_query_params(url, action.params)
    logger.debug(f"HTTP.NORMALIZE: url={url}")

    headers = merge_headers(action.headers)

    if not action.http_method or not str(action.http_method).strip():
        raise MissingMethodError()
    method = str(action.http_method).strip().upper()

    headers = apply_default_user_agent(headers, user_agent)

    body = body_builder(action, headers)
    logger.debug(f"HTTP.NORMALIZE: method={method} headers={sanitize_headers(body.headers)}")

    return RequestDescriptor(
        url=str(url),
        method=method,
        headers=body.headers,
        timeout=limits.timeout_ms,
        max_body_length=limits.max_body_bytes,
        max_content_length=limits.content_bytes,
        response_type=ResponseType.BINARY,
        decode_as=action.response_type,
        content=body.content,
        data=body.data,
        files=body.files,
    )
