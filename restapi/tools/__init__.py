"""
Tool implementations of the REST API plugin.

- http: request normalization, curl rendering and execution
"""

from restapi.tools import http
from restapi.tools.http import execute_request, make_curl_string, normalize

# Tool registry for dynamic lookup
REGISTRY = {
    "http": http,
}

__all__ = [
    'REGISTRY',
    'execute_request',
    'make_curl_string',
    'normalize',
]
