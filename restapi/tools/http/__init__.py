"""
HTTP tool package.

Normalizes declarative REST actions into executor-ready requests, renders
them as curl commands and executes them through httpx.
"""

from restapi.tools.http.models import (
    ActionConfiguration,
    BodyType,
    DatasourceConfiguration,
    DatasourceMetadata,
    ExecutionOutput,
    Property,
    RequestBody,
    RequestDescriptor,
    ResponseType,
    RestApiFields,
)
from restapi.tools.http.body import build_request_body
from restapi.tools.http.request import normalize
from restapi.tools.http.curl import make_curl_string
from restapi.tools.http.executor import HttpExecutor, execute_request
from restapi.tools.http.properties import (
    DYNAMIC_PROPERTIES,
    ESCAPE_STRING_PROPERTIES,
    render_dynamic_properties,
)

__all__ = [
    'ActionConfiguration',
    'BodyType',
    'DatasourceConfiguration',
    'DatasourceMetadata',
    'ExecutionOutput',
    'Property',
    'RequestBody',
    'RequestDescriptor',
    'ResponseType',
    'RestApiFields',
    'build_request_body',
    'normalize',
    'make_curl_string',
    'HttpExecutor',
    'execute_request',
    'DYNAMIC_PROPERTIES',
    'ESCAPE_STRING_PROPERTIES',
    'render_dynamic_properties',
]
