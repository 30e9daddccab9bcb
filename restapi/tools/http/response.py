"""
HTTP response processing for the HTTP tool.

Requests are always executed in binary mode; this module decides how the raw
bytes are handed back to the host, using the action's responseType hint when
there is one and the response Content-Type otherwise.
"""

import base64
import json
from typing import Any, Dict, Optional

import httpx

from restapi.core.errors import ResponseDecodeError
from restapi.core.logger import setup_logger
from restapi.core.sanitize import sanitize_headers
from .models import ExecutionOutput, ResponseType

logger = setup_logger(__name__, include_location=True)

_TEXTUAL_SUBTYPES = ('xml', 'x-www-form-urlencoded', 'javascript', 'csv', 'yaml')


def _request_url(response: httpx.Response) -> Optional[str]:
    try:
        return str(response.request.url)
    except RuntimeError:
        # Responses built outside a client carry no request
        return None


def _encoding(response: httpx.Response) -> str:
    return response.charset_encoding or 'utf-8'


def _decode_text(response: httpx.Response, body: bytes) -> str:
    return body.decode(_encoding(response), errors='replace')


def _decode_binary(body: bytes) -> str:
    return base64.b64encode(body).decode('ascii')


def _auto_decode(response: httpx.Response, body: bytes) -> Any:
    content_type = response.headers.get('Content-Type', '').lower()
    logger.debug(f"HTTP.RESPONSE: Content-Type={content_type}")

    if not body:
        return None

    if 'json' in content_type:
        try:
            return json.loads(body.decode(_encoding(response)))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"HTTP.RESPONSE: Failed to parse JSON response, using text: {e}")
            return _decode_text(response, body)

    if content_type.startswith('text/') or any(sub in content_type for sub in _TEXTUAL_SUBTYPES):
        return _decode_text(response, body)

    try:
        return body.decode(_encoding(response))
    except (UnicodeDecodeError, LookupError):
        logger.debug("HTTP.RESPONSE: Body is not text, returning base64")
        return _decode_binary(body)


def decode_body(response: httpx.Response, body: bytes, decode_as: Optional[ResponseType] = None) -> Any:
    """
    Decode a raw response body.

    Args:
        response: The httpx response (for headers and charset)
        body: The raw body bytes
        decode_as: Decoding hint; None or AUTO picks by Content-Type

    Returns:
        Parsed JSON, text, or a base64 string for binary content

    Raises:
        ResponseDecodeError: decode_as is JSON and the body is not valid JSON
    """
    if decode_as == ResponseType.JSON:
        if not body:
            return None
        try:
            return json.loads(body.decode(_encoding(response)))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ResponseDecodeError(f"Response is not valid JSON: {e}") from e
    if decode_as == ResponseType.TEXT:
        return _decode_text(response, body)
    if decode_as == ResponseType.BINARY:
        return _decode_binary(body)
    return _auto_decode(response, body)


def process_response(
    response: httpx.Response,
    body: bytes,
    decode_as: Optional[ResponseType] = None,
    elapsed: Optional[float] = None,
) -> ExecutionOutput:
    """
    Build the execution output for a completed response.

    Args:
        response: The httpx response
        body: The raw body bytes read from the response stream
        decode_as: Decoding hint from the action
        elapsed: Seconds spent on the request

    Returns:
        ExecutionOutput with the decoded body and response metadata
    """
    headers: Dict[str, str] = dict(response.headers)
    url = _request_url(response)
    logger.debug(
        "HTTP.RESPONSE: status=%s url=%s elapsed=%s header_keys=%s",
        response.status_code,
        url,
        elapsed,
        list(sanitize_headers(headers).keys()),
    )
    return ExecutionOutput(
        output=decode_body(response, body, decode_as),
        status_code=response.status_code,
        headers=headers,
        url=url,
        elapsed=elapsed,
    )
