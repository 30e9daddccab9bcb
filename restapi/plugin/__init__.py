"""
REST API plugin entry points.

The functions in ``contract`` are the plugin's capability contract;
``RestApiPlugin`` adapts them to the host's plugin lifecycle.
"""

from restapi.plugin import contract
from restapi.plugin.contract import (
    normalize,
    render,
    execute,
    metadata,
    test,
    dynamic_properties,
    escape_string_properties,
)
from restapi.plugin.host import RestApiPlugin

__all__ = [
    'contract',
    'normalize',
    'render',
    'execute',
    'metadata',
    'test',
    'dynamic_properties',
    'escape_string_properties',
    'RestApiPlugin',
]
