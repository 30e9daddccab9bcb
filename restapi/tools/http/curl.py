"""
curl rendering of REST actions for display and debugging.

The rendered command is never executed. Rendering is best effort: malformed
configuration produces partial output and nothing here raises.
"""

import shlex
from typing import Any, List, Mapping, Optional, Union
from urllib.parse import urlencode

from pydantic import ValidationError

from restapi.core.logger import setup_logger
from .body import DEFAULT_FILE_NAME, serialize_body
from .models import ActionConfiguration, BodyType, Property
from .request import append_query_params, parse_url

logger = setup_logger(__name__, include_location=True)

LINE_SEPARATOR = ' \\\n'


def _coerce_action(action: Union[ActionConfiguration, Mapping[str, Any], None]) -> ActionConfiguration:
    if action is None:
        return ActionConfiguration()
    if isinstance(action, ActionConfiguration):
        return action
    try:
        return ActionConfiguration.model_validate(action)
    except ValidationError as e:
        # Keep whatever fields are usable; fields failing validation are dropped
        logger.debug(f"HTTP.CURL: Rendering from partially valid configuration: {e.error_count()} errors")
        invalid = {str(err['loc'][0]) for err in e.errors() if err.get('loc')}
        usable = {k: v for k, v in dict(action).items() if k not in invalid}
        return ActionConfiguration.model_validate(usable)


def _text(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    if isinstance(value, str):
        return value
    return str(value)


def _entries(entries: Optional[List[Any]]) -> List[Property]:
    return [e for e in (entries or []) if isinstance(e, Property) and e.key]


def render_url(path: Any, params: Optional[List[Any]]) -> str:
    """Append params to the path like the normalizer does, textually if the path is not a URL."""
    pairs = [p for p in (params or []) if isinstance(p, Property) and p.has_key_value()]
    try:
        return str(append_query_params(parse_url(path), pairs))
    except Exception:
        base = _text(path)
        if not pairs:
            return base
        query = urlencode([(p.key, _text(p.value)) for p in pairs])
        return f"{base}{'&' if '?' in base else '?'}{query}"


def make_curl_string(action: Union[ActionConfiguration, Mapping[str, Any], None]) -> str:
    """
    Render an action as a curl command line.

    Args:
        action: ActionConfiguration, a mapping with its host field names, or None

    Returns:
        The command, one option per line; empty string if nothing could be rendered
    """
    lines: List[str] = []
    try:
        action = _coerce_action(action)
        method = _text(action.http_method).strip().upper() or 'GET'
        url = render_url(action.path, action.params)
        lines.append(f"curl --location --request {method} {shlex.quote(url)}")

        for header in _entries(action.headers):
            lines.append(f"--header {shlex.quote(f'{header.key}: {_text(header.value)}')}")

        body_type = action.body_type or BodyType.JSON
        if body_type in (BodyType.JSON, BodyType.RAW):
            body = action.body
            if body is not None:
                body = _text(serialize_body(body))
            if body:
                lines.append(f"--data-raw {shlex.quote(body)}")
        elif body_type == BodyType.FORM:
            for field in _entries(action.form_data):
                lines.append(f"--data-urlencode {shlex.quote(f'{field.key}={_text(field.value)}')}")
        else:
            for field in _entries(action.form_data):
                lines.append(f"--form {shlex.quote(f'{field.key}={_text(field.value)}')}")
            if action.file_form_key:
                file_field = f'{action.file_form_key}=@"{action.file_name or DEFAULT_FILE_NAME}"'
                lines.append(f"--form {shlex.quote(file_field)}")
    except Exception as e:
        logger.debug(f"HTTP.CURL: Rendering stopped early: {e}")
    return LINE_SEPARATOR.join(lines)
