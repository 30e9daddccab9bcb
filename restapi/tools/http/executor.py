"""
HTTP request execution for the HTTP tool.

Sends a RequestDescriptor through httpx, enforcing the descriptor's timeout and
size limits, and maps transport failures onto the plugin error taxonomy.
"""

import time
from typing import Any, Dict, List, Optional, Protocol

import httpx

from restapi.core.errors import (
    HttpStatusError,
    RequestFailedError,
    RequestTimeoutError,
    RequestTooLargeError,
    ResponseDecodeError,
    ResponseTooLargeError,
)
from restapi.core.logger import setup_logger
from restapi.core.sanitize import sanitize_headers
from .models import ExecutionOutput, RequestDescriptor, ResponseType
from .response import decode_body, process_response

logger = setup_logger(__name__, include_location=True)


class HttpExecutor(Protocol):
    """Anything able to perform a normalized request."""

    async def __call__(self, descriptor: RequestDescriptor) -> ExecutionOutput:
        ...


def _timeout_seconds(descriptor: RequestDescriptor) -> Optional[float]:
    if not descriptor.timeout:
        return None
    return descriptor.timeout / 1000


def _wire_headers(headers: Dict[str, Any]) -> Dict[str, str]:
    return {key: '' if value is None else str(value) for key, value in headers.items()}


def build_request(client: httpx.AsyncClient, descriptor: RequestDescriptor) -> httpx.Request:
    """
    Encode the descriptor as an httpx request and check the body size limit.

    Raises:
        RequestTooLargeError: the encoded body exceeds max_body_length
    """
    request = client.build_request(
        descriptor.method,
        descriptor.url,
        headers=_wire_headers(descriptor.headers),
        content=descriptor.content,
        data=descriptor.data,
        files=descriptor.files,
        timeout=_timeout_seconds(descriptor),
    )
    size = len(request.read())
    if descriptor.max_body_length and size > descriptor.max_body_length:
        raise RequestTooLargeError(size, descriptor.max_body_length)
    return request


async def _read_limited(response: httpx.Response, limit: int) -> bytes:
    chunks: List[bytes] = []
    received = 0
    async for chunk in response.aiter_bytes():
        received += len(chunk)
        if limit and received > limit:
            raise ResponseTooLargeError(limit)
        chunks.append(chunk)
    return b''.join(chunks)


async def execute_request(
    descriptor: RequestDescriptor,
    client: Optional[httpx.AsyncClient] = None,
) -> ExecutionOutput:
    """
    Execute a normalized request.

    Args:
        descriptor: The request produced by the normalizer
        client: Optional shared client; a short-lived one is created otherwise

    Returns:
        ExecutionOutput for a 2xx response

    Raises:
        RequestTooLargeError: request body over max_body_length
        ResponseTooLargeError: response body over max_content_length
        RequestTimeoutError: the request timed out
        RequestFailedError: any other transport failure
        HttpStatusError: the server answered with a non-2xx status
    """
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=_timeout_seconds(descriptor))

    logger.info(
        f"HTTP.EXECUTE: {descriptor.method} {descriptor.url} "
        f"timeout_ms={descriptor.timeout} headers={sanitize_headers(descriptor.headers)}"
    )
    start = time.monotonic()
    try:
        request = build_request(client, descriptor)
        try:
            response = await client.send(request, stream=True)
            try:
                body = await _read_limited(response, descriptor.max_content_length)
            finally:
                await response.aclose()
        except httpx.TimeoutException as e:
            logger.error(f"HTTP.EXECUTE: Timeout after {descriptor.timeout} ms - {e}")
            raise RequestTimeoutError(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            logger.error(f"HTTP.EXECUTE: RequestError - {e}")
            raise RequestFailedError(f"Request error: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    elapsed = time.monotonic() - start

    if not response.is_success:
        logger.error(f"HTTP.EXECUTE: HTTP {response.status_code} {response.reason_phrase}")
        try:
            output = decode_body(response, body, descriptor.decode_as)
        except ResponseDecodeError:
            output = decode_body(response, body, ResponseType.TEXT)
        raise HttpStatusError(
            response.status_code,
            response.reason_phrase,
            output=output,
            headers=dict(response.headers),
        )

    result = process_response(response, body, descriptor.decode_as, elapsed=elapsed)
    result.log.append(f"{descriptor.method} {descriptor.url} -> {response.status_code} in {elapsed:.3f}s")
    logger.debug(f"HTTP.EXECUTE: Completed with status={response.status_code} in {elapsed:.3f}s")
    return result
