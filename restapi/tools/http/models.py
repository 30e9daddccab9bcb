"""
Data contracts of the HTTP tool.

ActionConfiguration is what the host hands in (user-authored, possibly
incomplete); RequestDescriptor is what the normalizer hands to the executor.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ConfigDict, Field, field_validator

from restapi.core.common import AppBaseModel, drop_none


class RestApiFields(str, Enum):
    """Host-facing names of the action configuration fields."""

    PATH = "path"
    HTTP_METHOD = "httpMethod"
    PARAMS = "params"
    HEADERS = "headers"
    BODY_TYPE = "bodyType"
    BODY = "body"
    FORM_DATA = "formData"
    FILE_FORM_KEY = "fileFormKey"
    FILE_NAME = "fileName"
    RESPONSE_TYPE = "responseType"


class BodyType(str, Enum):
    JSON = "jsonBody"
    RAW = "rawBody"
    FORM = "formData"
    FILE_FORM = "fileForm"


class ResponseType(str, Enum):
    AUTO = "auto"
    JSON = "json"
    TEXT = "text"
    BINARY = "binary"


class Property(AppBaseModel):
    """A key/value entry of params, headers or form data. Either side may be missing."""

    key: Optional[str] = None
    value: Optional[Any] = None

    @field_validator('key', mode='before')
    def coerce_key(cls, v):
        if v is None or isinstance(v, str):
            return v
        return str(v)

    def has_key_value(self) -> bool:
        return bool(self.key) and self.value is not None and self.value != ""


class ActionConfiguration(AppBaseModel):
    """Declarative description of one REST call."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, frozen=True)

    path: Optional[str] = None
    http_method: Optional[str] = Field(None, alias=RestApiFields.HTTP_METHOD.value)
    params: Optional[List[Optional[Property]]] = None
    headers: Optional[List[Optional[Property]]] = None
    body: Optional[Any] = None
    body_type: Optional[BodyType] = Field(None, alias=RestApiFields.BODY_TYPE.value)
    form_data: Optional[List[Optional[Property]]] = Field(None, alias=RestApiFields.FORM_DATA.value)
    file_form_key: Optional[str] = Field(None, alias=RestApiFields.FILE_FORM_KEY.value)
    file_name: Optional[str] = Field(None, alias=RestApiFields.FILE_NAME.value)
    response_type: Optional[ResponseType] = Field(None, alias=RestApiFields.RESPONSE_TYPE.value)

    @field_validator('body_type', 'response_type', mode='before')
    def empty_enum_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('params', 'headers', 'form_data', mode='before')
    def drop_malformed_entries(cls, v):
        # Entries that cannot carry a key are skipped like keyless ones
        if isinstance(v, (list, tuple)):
            return [e for e in v if e is None or isinstance(e, (Property, Mapping)) or hasattr(e, 'key')]
        return v


class DatasourceConfiguration(AppBaseModel):
    """Opaque datasource settings; only the connection layer of the host reads them."""
    model_config = ConfigDict(extra="allow")


class DatasourceMetadata(AppBaseModel):
    model_config = ConfigDict(extra="allow")


class RequestBody(AppBaseModel):
    """Payload produced by the body builder together with the headers it settled on."""

    headers: Dict[str, Any] = Field(default_factory=dict)
    content: Optional[Union[str, bytes]] = None
    data: Optional[Dict[str, Any]] = None
    files: Optional[Dict[str, Any]] = None


class RequestDescriptor(AppBaseModel):
    """Fully normalized, executor-ready request."""

    url: str
    method: str
    headers: Dict[str, Any] = Field(default_factory=dict)
    timeout: int = Field(..., ge=0, description="Milliseconds; 0 disables the timeout")
    max_body_length: int = Field(..., ge=0, description="Bytes; 0 disables the check")
    max_content_length: int = Field(..., ge=0, description="Bytes; 0 disables the check")
    response_type: ResponseType = ResponseType.BINARY
    decode_as: Optional[ResponseType] = None
    content: Optional[Union[str, bytes]] = None
    data: Optional[Dict[str, Any]] = None
    files: Optional[Dict[str, Any]] = None

    def to_options(self) -> Dict[str, Any]:
        """Request options in the shape HTTP executors conventionally accept."""
        return drop_none({
            'url': self.url,
            'method': self.method,
            'headers': dict(self.headers),
            'timeout': self.timeout,
            'maxBodyLength': self.max_body_length,
            'maxContentLength': self.max_content_length,
            'responseType': self.response_type.value,
            'content': self.content,
            'data': self.data,
            'files': self.files,
        })


class ExecutionOutput(AppBaseModel):
    """Normalized execution result returned to the host."""

    output: Any = None
    status_code: Optional[int] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    url: Optional[str] = None
    elapsed: Optional[float] = None
    log: List[str] = Field(default_factory=list)
    request: Optional[str] = None
