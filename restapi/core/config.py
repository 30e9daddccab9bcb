import os
import sys
import logging
from typing import Optional, Tuple
from pydantic import BaseModel, Field, ConfigDict, field_validator

from restapi import __version__

DEFAULT_USER_AGENT = f"restapi-plugin/{__version__}"

DEFAULT_EXECUTION_TIMEOUT_MS = 300_000
DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024

_TRUE_VALUES = {"true", "1", "yes", "y", "on"}
_FALSE_VALUES = {"false", "0", "no", "n", "off"}

_ENV_LOADED = False


def _load_env_file(path: str, allow_override: bool = False) -> None:
    """
    Minimal .env loader: loads KEY=VALUE pairs into os.environ.
    - Ignores empty lines and lines starting with '#'
    - Accepts an optional leading 'export '
    - Strips one level of single or double quotes around values
    - Existing variables win unless allow_override=True
    """
    if not path or not os.path.exists(path):
        return
    try:
        with open(path, "r", encoding="utf-8") as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.startswith("export "):
                    line = line[len("export "):].strip()
                if "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()
                if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                    value = value[1:-1]
                if allow_override or key not in os.environ:
                    os.environ[key] = value
    except PermissionError as e:
        print(f"FATAL: Permission denied reading environment file {path}: {e}", file=sys.stderr)
        raise


def load_env_if_present(force_reload: bool = False) -> None:
    """
    Load RESTAPI_ENV_FILE when set, otherwise .env.local then .env.
    """
    global _ENV_LOADED
    if _ENV_LOADED and not force_reload:
        return

    custom = os.environ.get("RESTAPI_ENV_FILE")
    if custom:
        _load_env_file(custom)
    else:
        for env_file in ('.env.local', '.env'):
            _load_env_file(env_file)
    _ENV_LOADED = True


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        val = value.strip().lower()
        if val in _TRUE_VALUES:
            return True
        if val in _FALSE_VALUES:
            return False
    raise ValueError(f"Invalid boolean value: {value}")


class RequestLimits(BaseModel):
    """Plugin-wide execution limits applied to every outbound request."""
    model_config = ConfigDict(frozen=True)

    timeout_ms: int = Field(DEFAULT_EXECUTION_TIMEOUT_MS, ge=0)
    max_body_bytes: int = Field(DEFAULT_MAX_BODY_BYTES, ge=0)
    max_content_bytes: Optional[int] = Field(None, ge=0)

    @property
    def content_bytes(self) -> int:
        if self.max_content_bytes is None:
            return self.max_body_bytes
        return self.max_content_bytes


class PluginSettings(BaseModel):
    """Plugin runtime configuration derived from environment variables."""
    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    execution_timeout_ms: int = Field(DEFAULT_EXECUTION_TIMEOUT_MS, alias="RESTAPI_EXECUTION_TIMEOUT_MS")
    max_body_bytes: int = Field(DEFAULT_MAX_BODY_BYTES, alias="RESTAPI_MAX_BODY_BYTES")
    max_content_bytes: int = Field(DEFAULT_MAX_BODY_BYTES, alias="RESTAPI_MAX_CONTENT_BYTES")
    user_agent: str = Field(DEFAULT_USER_AGENT, alias="RESTAPI_USER_AGENT")
    log_level: str = Field("INFO", alias="RESTAPI_LOG_LEVEL")
    log_json: bool = Field(False, alias="RESTAPI_LOG_JSON")

    @field_validator('execution_timeout_ms', 'max_body_bytes', 'max_content_bytes', mode='before')
    def coerce_non_negative_int(cls, v, info):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError(f"{info.field_name} cannot be empty")
            v = int(v)
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError(f"{info.field_name} must be an integer")
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0, got {v}")
        return v

    @field_validator('user_agent', mode='before')
    def validate_user_agent(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("User agent cannot be empty or whitespace only")
        return v.strip()

    @field_validator('log_level', mode='before')
    def normalize_log_level(cls, v):
        level = str(v or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('log_json', mode='before')
    def coerce_bool(cls, v):
        return _parse_bool(v)

    def limits(self) -> RequestLimits:
        return RequestLimits(
            timeout_ms=self.execution_timeout_ms,
            max_body_bytes=self.max_body_bytes,
            max_content_bytes=self.max_content_bytes,
        )


_plugin_settings: Optional[PluginSettings] = None


def get_plugin_settings(reload: bool = False) -> PluginSettings:
    """
    Get plugin settings, loading .env files on first call.
    Set reload=True to force reloading from the current environment.
    """
    global _plugin_settings
    if _plugin_settings is None or reload:
        load_env_if_present(force_reload=reload)
        env = os.environ
        _plugin_settings = PluginSettings(
            RESTAPI_EXECUTION_TIMEOUT_MS=env.get('RESTAPI_EXECUTION_TIMEOUT_MS', str(DEFAULT_EXECUTION_TIMEOUT_MS)),
            RESTAPI_MAX_BODY_BYTES=env.get('RESTAPI_MAX_BODY_BYTES', str(DEFAULT_MAX_BODY_BYTES)),
            RESTAPI_MAX_CONTENT_BYTES=env.get('RESTAPI_MAX_CONTENT_BYTES', str(DEFAULT_MAX_BODY_BYTES)),
            RESTAPI_USER_AGENT=env.get('RESTAPI_USER_AGENT', DEFAULT_USER_AGENT),
            RESTAPI_LOG_LEVEL=env.get('RESTAPI_LOG_LEVEL', 'INFO'),
            RESTAPI_LOG_JSON=env.get('RESTAPI_LOG_JSON', 'false'),
        )
    return _plugin_settings


def get_log_options() -> Tuple[bool, str]:
    """
    Logging options read straight from the environment.

    Loggers are created at import time, before settings validation, so a bad
    value here falls back to the defaults instead of failing the import.
    """
    try:
        use_json = _parse_bool(os.environ.get('RESTAPI_LOG_JSON', 'false'))
    except ValueError:
        use_json = False
    level = os.environ.get('RESTAPI_LOG_LEVEL', 'INFO').strip().upper()
    if level not in logging.getLevelNamesMapping():
        level = 'INFO'
    return use_json, level
