"""
Capability contract of the REST API plugin.

Plain functions the host (or the RestApiPlugin shim) calls into:

- normalize: action -> RequestDescriptor (raises ConfigurationError)
- render: action -> curl command (never raises)
- execute: action -> ExecutionOutput through an HTTP executor
- metadata / test: datasource probes required by the host interface
- dynamic_properties / escape_string_properties: templated field names
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from jinja2 import Environment
from pydantic import ValidationError

from restapi.core.common import transform
from restapi.core.config import PluginSettings, RequestLimits, get_plugin_settings
from restapi.core.errors import ConfigurationError, HeaderTransformError
from restapi.core.logger import setup_logger
from restapi.core.logging_context import LoggingContext
from restapi.tools.http import (
    DYNAMIC_PROPERTIES,
    ESCAPE_STRING_PROPERTIES,
    ActionConfiguration,
    DatasourceConfiguration,
    DatasourceMetadata,
    ExecutionOutput,
    HttpExecutor,
    RequestDescriptor,
    RestApiFields,
    execute_request,
    make_curl_string,
    render_dynamic_properties,
)
from restapi.tools.http import normalize as normalize_action
from restapi.tools.http.request import parse_url

logger = setup_logger(__name__, include_location=True)

ActionInput = Union[ActionConfiguration, Mapping[str, Any]]


def _raw_field(action: Any, name: str) -> Any:
    if isinstance(action, Mapping):
        return action.get(name)
    return getattr(action, name, None)


def _action(action: ActionInput) -> ActionConfiguration:
    """
    Validate an action, reporting failures in normalization order.

    A missing or invalid path wins over any other field error, and a header
    list that cannot be traversed is a HeaderTransformError.
    """
    try:
        return transform(ActionConfiguration, action)
    except ValidationError as e:
        invalid = {str(err['loc'][0]) for err in e.errors() if err.get('loc')}
        parse_url(_raw_field(action, RestApiFields.PATH.value))
        if RestApiFields.HEADERS.value in invalid:
            reason = next(
                err['msg'] for err in e.errors()
                if err.get('loc') and str(err['loc'][0]) == RestApiFields.HEADERS.value
            )
            raise HeaderTransformError(reason) from e
        raise ConfigurationError(f"Invalid action configuration: {e}") from e


def normalize(
    action: ActionInput,
    limits: Optional[RequestLimits] = None,
    settings: Optional[PluginSettings] = None,
) -> RequestDescriptor:
    """
    Normalize an action into an executor-ready request.

    Limits default to the ones configured in the plugin settings.
    """
    settings = settings or get_plugin_settings()
    return normalize_action(
        _action(action),
        limits or settings.limits(),
        user_agent=settings.user_agent,
    )


def render(action: Optional[ActionInput]) -> str:
    """curl representation of an action, for display only."""
    return make_curl_string(action)


async def execute(
    action: ActionInput,
    limits: Optional[RequestLimits] = None,
    context: Optional[Dict[str, Any]] = None,
    executor: Optional[HttpExecutor] = None,
    settings: Optional[PluginSettings] = None,
    jinja_env: Optional[Environment] = None,
) -> ExecutionOutput:
    """
    Execute an action end to end.

    Args:
        action: The action configuration
        limits: Timeout and size limits; plugin settings when omitted
        context: Template context; dynamic properties are rendered when given
        executor: HTTP executor; httpx-based execute_request when omitted
        settings: Plugin settings
        jinja_env: Environment for dynamic property rendering

    Returns:
        ExecutionOutput with the curl preview attached

    Raises:
        RestApiError: Configuration, template or integration failure
    """
    action = _action(action)
    if context is not None:
        action = render_dynamic_properties(action, context, jinja_env)

    descriptor = normalize(action, limits, settings)
    with LoggingContext(logger, method=descriptor.method):
        logger.info(f"RESTAPI.EXECUTE: Dispatching request to {descriptor.url}")
        result = await (executor or execute_request)(descriptor)
    result.request = render(action)
    return result


async def metadata(datasource: Optional[DatasourceConfiguration] = None) -> DatasourceMetadata:
    return DatasourceMetadata()


async def test(datasource: Optional[DatasourceConfiguration] = None) -> None:
    return None


def dynamic_properties() -> List[str]:
    return list(DYNAMIC_PROPERTIES)


def escape_string_properties() -> List[str]:
    return list(ESCAPE_STRING_PROPERTIES)
