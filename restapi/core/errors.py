"""
Error taxonomy for the REST API plugin.

Every failure is fatal to a single invocation and is raised at the point of
detection. The host decides whether to surface or retry; each exception can be
turned into a standardized ``ErrorInfo`` so the host can route on ``kind`` and
``retryable`` without matching message strings.

    ConfigurationError   invalid action configuration (never retryable)
    TemplateRenderError  dynamic property rendering failed
    IntegrationError     the outbound call could not be completed
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class ErrorKind(str, Enum):
    """Standardized error categories."""

    CONNECTION = "connection"       # Connection refused, DNS failure
    TIMEOUT = "timeout"             # Request/response timeout

    RATE_LIMIT = "rate_limit"       # 429 Too Many Requests
    AUTH = "auth"                   # 401/403
    NOT_FOUND = "not_found"         # 404
    CLIENT_ERROR = "client_error"   # other 4xx
    SERVER_ERROR = "server_error"   # 5xx

    SCHEMA = "schema"               # Invalid action configuration
    PARSE = "parse"                 # Response decoding failure
    TRANSFORM = "transform"         # Template rendering failure
    LIMIT = "limit"                 # Request/response size limit exceeded

    UNKNOWN = "unknown"


class ErrorInfo(BaseModel):
    """Serializable description of a failure, suitable for host event payloads."""

    kind: ErrorKind = Field(default=ErrorKind.UNKNOWN, description="Error category")
    retryable: bool = Field(default=False, description="Whether retrying the action may succeed")
    code: str = Field(default="UNKNOWN", description="Stable error code (MISSING_PATH, HTTP_429, ...)")
    message: str = Field(default="Unknown error", description="Human-readable message")
    source: str = Field(default="restapi", description="Component that produced the error")
    http_status: Optional[int] = Field(None, description="HTTP status code for HTTP errors")
    retry_after: Optional[int] = Field(None, description="Retry-After header value in seconds")
    details: Dict[str, Any] = Field(default_factory=dict, description="Extra context")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class RestApiError(Exception):
    """Base class for all REST API plugin errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN
    code: str = "RESTAPI_ERROR"
    retryable: bool = False

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details or {}

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            kind=self.kind,
            retryable=self.retryable,
            code=self.code,
            message=self.message,
            details=self.details,
        )


class ConfigurationError(RestApiError):
    """The action configuration cannot be turned into a request."""

    kind = ErrorKind.SCHEMA
    code = "INVALID_CONFIGURATION"


class MissingPathError(ConfigurationError):
    code = "MISSING_PATH"

    def __init__(self) -> None:
        super().__init__("API host url not provided for REST API step")


class InvalidUrlError(ConfigurationError):
    code = "INVALID_URL"

    def __init__(self, path: Any, reason: str) -> None:
        super().__init__(f"API host url not provided, {reason}", details={"path": path})
        self.path = path
        self.reason = reason


class HeaderTransformError(ConfigurationError):
    code = "HEADER_TRANSFORM"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Headers failed to transform, {reason}")
        self.reason = reason


class MissingMethodError(ConfigurationError):
    code = "MISSING_METHOD"

    def __init__(self) -> None:
        super().__init__("No HTTP method specified for REST API step")


class TemplateRenderError(RestApiError):
    kind = ErrorKind.TRANSFORM
    code = "TEMPLATE_RENDER"

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"Failed to render '{field}': {reason}", details={"field": field})
        self.field = field


class IntegrationError(RestApiError):
    """The outbound request could not be completed."""

    code = "INTEGRATION_ERROR"


class RequestTooLargeError(IntegrationError):
    kind = ErrorKind.LIMIT
    code = "REQUEST_TOO_LARGE"

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"Request body size {size} bytes exceeds the limit of {limit} bytes",
            details={"size": size, "limit": limit},
        )


class ResponseTooLargeError(IntegrationError):
    kind = ErrorKind.LIMIT
    code = "RESPONSE_TOO_LARGE"

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"Response content exceeds the limit of {limit} bytes",
            details={"limit": limit},
        )


class RequestTimeoutError(IntegrationError):
    kind = ErrorKind.TIMEOUT
    code = "REQUEST_TIMEOUT"
    retryable = True


class RequestFailedError(IntegrationError):
    kind = ErrorKind.CONNECTION
    code = "REQUEST_FAILED"
    retryable = True


class ResponseDecodeError(IntegrationError):
    kind = ErrorKind.PARSE
    code = "RESPONSE_DECODE"


class HttpStatusError(IntegrationError):
    """The server answered with a non-2xx status."""

    code = "HTTP_STATUS"

    def __init__(
        self,
        status_code: int,
        reason: str = "",
        *,
        output: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        info = classify_http_error(status_code, reason, headers)
        message = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
        super().__init__(message, details={"output": output})
        self.status_code = status_code
        self.output = output
        self.info = info
        self.kind = info.kind
        self.code = info.code
        self.retryable = info.retryable

    def to_error_info(self) -> ErrorInfo:
        return self.info.model_copy(update={"message": self.message, "details": self.details})


def classify_http_error(
    status_code: int,
    message: str = "",
    headers: Optional[Dict[str, str]] = None,
) -> ErrorInfo:
    """Classify an HTTP status code into a standardized ErrorInfo."""
    headers = {str(k).lower(): v for k, v in (headers or {}).items()}

    retry_after = None
    ra = headers.get("retry-after")
    if ra:
        try:
            retry_after = int(ra)
        except ValueError:
            retry_after = None

    if status_code == 429:
        kind, retryable, default = ErrorKind.RATE_LIMIT, True, "Too Many Requests"
    elif status_code in (401, 403):
        kind, retryable, default = ErrorKind.AUTH, False, "Unauthorized" if status_code == 401 else "Forbidden"
    elif status_code == 404:
        kind, retryable, default = ErrorKind.NOT_FOUND, False, "Not Found"
    elif 400 <= status_code < 500:
        kind, retryable, default = ErrorKind.CLIENT_ERROR, False, f"Client Error {status_code}"
    elif status_code >= 500:
        kind, retryable, default = ErrorKind.SERVER_ERROR, True, f"Server Error {status_code}"
    else:
        kind, retryable, default = ErrorKind.UNKNOWN, False, f"HTTP Error {status_code}"

    return ErrorInfo(
        kind=kind,
        retryable=retryable,
        code=f"HTTP_{status_code}",
        message=message or default,
        source="http",
        http_status=status_code,
        retry_after=retry_after if kind in (ErrorKind.RATE_LIMIT, ErrorKind.SERVER_ERROR) else None,
    )
