"""
Request body construction for the HTTP tool.

Turns body/bodyType/formData/fileFormKey/fileName into a transport-ready
payload and reconciles the Content-Type header with it. Returns the updated
headers explicitly; neither the configuration nor the given header map is
modified.
"""

import json
from typing import Any, Dict, List, Optional

from restapi.core.logger import setup_logger
from .models import ActionConfiguration, BodyType, Property, RequestBody

logger = setup_logger(__name__, include_location=True)

CONTENT_TYPE = 'Content-Type'
JSON_CONTENT_TYPE = 'application/json'
FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'
DEFAULT_FILE_NAME = 'file'


def find_header(headers: Dict[str, Any], name: str) -> Optional[str]:
    """Return the first key matching ``name`` case-insensitively, or None."""
    lowered = name.lower()
    for key in headers:
        if isinstance(key, str) and key.lower() == lowered:
            return key
    return None


def _has_content(body: Any) -> bool:
    if body is None:
        return False
    if isinstance(body, (str, bytes)):
        return len(body) > 0
    return True


def serialize_body(body: Any) -> Any:
    if isinstance(body, (str, bytes)):
        return body
    return json.dumps(body)


def form_fields(entries: Optional[List[Optional[Property]]]) -> Dict[str, Any]:
    """
    Collect form entries with a key into a mapping.

    Repeated keys become lists so every value is sent; missing values are
    sent as empty strings.
    """
    fields: Dict[str, Any] = {}
    for entry in entries or []:
        if entry is None or not entry.key:
            continue
        value = '' if entry.value is None else entry.value
        if not isinstance(value, (str, bytes)):
            value = str(value)
        if entry.key in fields:
            existing = fields[entry.key]
            if not isinstance(existing, list):
                existing = [existing]
            fields[entry.key] = existing + [value]
        else:
            fields[entry.key] = value
    return fields


def build_request_body(action: ActionConfiguration, headers: Dict[str, Any]) -> RequestBody:
    """
    Build the request payload for an action.

    Args:
        action: The action configuration
        headers: The merged header map (after defaults were applied)

    Returns:
        RequestBody carrying the final headers and one of content/data/files
    """
    headers = dict(headers)
    body_type = action.body_type or BodyType.JSON
    logger.debug(f"HTTP.BODY: body_type={body_type.value}")

    if body_type == BodyType.JSON:
        if not _has_content(action.body):
            return RequestBody(headers=headers)
        if find_header(headers, CONTENT_TYPE) is None:
            headers[CONTENT_TYPE] = JSON_CONTENT_TYPE
        return RequestBody(headers=headers, content=serialize_body(action.body))

    if body_type == BodyType.RAW:
        if not _has_content(action.body):
            return RequestBody(headers=headers)
        return RequestBody(headers=headers, content=serialize_body(action.body))

    if body_type == BodyType.FORM:
        fields = form_fields(action.form_data)
        if find_header(headers, CONTENT_TYPE) is None:
            headers[CONTENT_TYPE] = FORM_CONTENT_TYPE
        return RequestBody(headers=headers, data=fields)

    # BodyType.FILE_FORM: the transport writes the multipart boundary itself
    existing = find_header(headers, CONTENT_TYPE)
    if existing is not None:
        logger.debug(f"HTTP.BODY: Dropping '{existing}' header for multipart body")
        del headers[existing]

    fields = form_fields(action.form_data)
    files = None
    if action.file_form_key:
        file_name = action.file_name or DEFAULT_FILE_NAME
        content = action.body if action.body is not None else ''
        files = {action.file_form_key: (file_name, serialize_body(content))}
    return RequestBody(headers=headers, data=fields or None, files=files)
