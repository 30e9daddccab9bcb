"""
Core utilities shared by the REST API plugin: logging, configuration,
error taxonomy, header sanitization and template rendering.
"""

from restapi.core.common import AppBaseModel
from restapi.core.errors import (
    ErrorKind,
    ErrorInfo,
    RestApiError,
    ConfigurationError,
    MissingPathError,
    InvalidUrlError,
    HeaderTransformError,
    MissingMethodError,
    TemplateRenderError,
    IntegrationError,
)

__all__ = [
    'AppBaseModel',
    'ErrorKind',
    'ErrorInfo',
    'RestApiError',
    'ConfigurationError',
    'MissingPathError',
    'InvalidUrlError',
    'HeaderTransformError',
    'MissingMethodError',
    'TemplateRenderError',
    'IntegrationError',
]
