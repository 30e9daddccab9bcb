"""
Dynamic properties of the REST action.

The host treats DYNAMIC_PROPERTIES as templated fields; values substituted
into ESCAPE_STRING_PROPERTIES are string-escaped so a JSON body stays valid.
"""

from typing import Any, Dict, List, Optional

from jinja2 import Environment, TemplateError
from pydantic import ValidationError

from restapi.core.dsl.render import create_environment, render_template
from restapi.core.errors import ConfigurationError, TemplateRenderError
from restapi.core.logger import setup_logger
from .models import ActionConfiguration, RestApiFields

logger = setup_logger(__name__, include_location=True)

DYNAMIC_PROPERTIES: List[str] = [
    RestApiFields.PATH.value,
    RestApiFields.PARAMS.value,
    RestApiFields.HEADERS.value,
    RestApiFields.BODY_TYPE.value,
    RestApiFields.BODY.value,
    RestApiFields.FORM_DATA.value,
    RestApiFields.FILE_NAME.value,
    RestApiFields.FILE_FORM_KEY.value,
]

ESCAPE_STRING_PROPERTIES: List[str] = [
    RestApiFields.BODY.value,
]


def render_dynamic_properties(
    action: ActionConfiguration,
    context: Dict[str, Any],
    env: Optional[Environment] = None,
) -> ActionConfiguration:
    """
    Render the dynamic properties of an action against a host context.

    Args:
        action: The action as authored by the user
        context: Template variables supplied by the host
        env: Jinja2 environment; a lenient one is created when omitted

    Returns:
        A new ActionConfiguration with the rendered values

    Raises:
        TemplateRenderError: A dynamic property failed to render
        ConfigurationError: The rendered values do not form a valid action
    """
    env = env or create_environment()
    raw = action.model_dump(by_alias=True)

    for field in DYNAMIC_PROPERTIES:
        value = raw.get(field)
        if value is None:
            continue
        try:
            raw[field] = render_template(env, value, context, escape=field in ESCAPE_STRING_PROPERTIES)
        except TemplateError as e:
            logger.error(f"HTTP.PROPERTIES: Failed to render '{field}': {e}")
            raise TemplateRenderError(field, str(e)) from e

    logger.debug(f"HTTP.PROPERTIES: Rendered dynamic properties with context_keys={list(context.keys())}")
    try:
        return ActionConfiguration.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Rendered action configuration is invalid: {e}") from e
