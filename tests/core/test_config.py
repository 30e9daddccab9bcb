import os

import pytest
from pydantic import ValidationError

from restapi.core import config as config_module
from restapi.core.config import (
    DEFAULT_EXECUTION_TIMEOUT_MS,
    DEFAULT_MAX_BODY_BYTES,
    DEFAULT_USER_AGENT,
    PluginSettings,
    RequestLimits,
    get_log_options,
    get_plugin_settings,
)


@pytest.fixture
def loaded_env_keys():
    """.env loading writes os.environ directly; remove what the test loaded."""
    keys = []
    yield keys
    for key in keys:
        os.environ.pop(key, None)


def test_defaults():
    settings = get_plugin_settings()

    assert settings.execution_timeout_ms == DEFAULT_EXECUTION_TIMEOUT_MS
    assert settings.max_body_bytes == DEFAULT_MAX_BODY_BYTES
    assert settings.max_content_bytes == DEFAULT_MAX_BODY_BYTES
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.log_level == 'INFO'
    assert settings.log_json is False


def test_settings_are_cached_until_reload(monkeypatch):
    first = get_plugin_settings()
    monkeypatch.setenv('RESTAPI_USER_AGENT', 'runtime/9')

    assert get_plugin_settings() is first
    assert get_plugin_settings(reload=True).user_agent == 'runtime/9'


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv('RESTAPI_EXECUTION_TIMEOUT_MS', '1500')
    monkeypatch.setenv('RESTAPI_MAX_BODY_BYTES', ' 2048 ')
    monkeypatch.setenv('RESTAPI_MAX_CONTENT_BYTES', '0')
    monkeypatch.setenv('RESTAPI_USER_AGENT', '  host/1.0  ')
    monkeypatch.setenv('RESTAPI_LOG_LEVEL', 'debug')
    monkeypatch.setenv('RESTAPI_LOG_JSON', 'yes')

    settings = get_plugin_settings()

    assert settings.execution_timeout_ms == 1500
    assert settings.max_body_bytes == 2048
    assert settings.max_content_bytes == 0
    assert settings.user_agent == 'host/1.0'
    assert settings.log_level == 'DEBUG'
    assert settings.log_json is True


@pytest.mark.parametrize('key, value', [
    ('RESTAPI_EXECUTION_TIMEOUT_MS', '-1'),
    ('RESTAPI_EXECUTION_TIMEOUT_MS', 'soon'),
    ('RESTAPI_MAX_BODY_BYTES', ''),
    ('RESTAPI_USER_AGENT', '   '),
    ('RESTAPI_LOG_LEVEL', 'chatty'),
    ('RESTAPI_LOG_JSON', 'maybe'),
])
def test_invalid_values_are_rejected(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ValidationError):
        get_plugin_settings()


def test_booleans_are_not_integers():
    with pytest.raises(ValidationError):
        PluginSettings(execution_timeout_ms=True)


def test_limits_from_settings():
    settings = PluginSettings(execution_timeout_ms=10, max_body_bytes=20, max_content_bytes=30)
    assert settings.limits() == RequestLimits(timeout_ms=10, max_body_bytes=20, max_content_bytes=30)


def test_request_limits():
    limits = RequestLimits(max_body_bytes=100)
    assert limits.timeout_ms == DEFAULT_EXECUTION_TIMEOUT_MS
    assert limits.content_bytes == 100
    assert RequestLimits(max_body_bytes=100, max_content_bytes=5).content_bytes == 5

    with pytest.raises(ValidationError):
        RequestLimits(timeout_ms=-5)
    with pytest.raises(ValidationError):
        limits.timeout_ms = 1


def test_dotenv_in_working_directory(tmp_path, loaded_env_keys):
    loaded_env_keys.extend(['RESTAPI_USER_AGENT', 'RESTAPI_MAX_BODY_BYTES'])
    (tmp_path / '.env').write_text(
        '# plugin settings\n'
        'export RESTAPI_USER_AGENT="dotenv/1"\n'
        "RESTAPI_MAX_BODY_BYTES='4096'\n"
        'not a pair\n',
        encoding='utf-8',
    )

    settings = get_plugin_settings()

    assert settings.user_agent == 'dotenv/1'
    assert settings.max_body_bytes == 4096


def test_env_file_override_and_precedence(tmp_path, monkeypatch, loaded_env_keys):
    loaded_env_keys.append('RESTAPI_LOG_LEVEL')
    env_file = tmp_path / 'plugin.env'
    env_file.write_text('RESTAPI_LOG_LEVEL=warning\nRESTAPI_USER_AGENT=ignored\n', encoding='utf-8')
    (tmp_path / '.env').write_text('RESTAPI_LOG_LEVEL=error\n', encoding='utf-8')
    monkeypatch.setenv('RESTAPI_ENV_FILE', str(env_file))
    monkeypatch.setenv('RESTAPI_USER_AGENT', 'from-process')

    settings = get_plugin_settings()

    assert settings.log_level == 'WARNING'
    assert settings.user_agent == 'from-process'


def test_env_files_are_loaded_once(tmp_path, loaded_env_keys):
    loaded_env_keys.append('RESTAPI_USER_AGENT')
    config_module.load_env_if_present()
    (tmp_path / '.env').write_text('RESTAPI_USER_AGENT=late\n', encoding='utf-8')
    config_module.load_env_if_present()
    assert 'RESTAPI_USER_AGENT' not in os.environ

    config_module.load_env_if_present(force_reload=True)
    assert os.environ['RESTAPI_USER_AGENT'] == 'late'


def test_log_options_are_lenient(monkeypatch):
    assert get_log_options() == (False, 'INFO')

    monkeypatch.setenv('RESTAPI_LOG_JSON', 'on')
    monkeypatch.setenv('RESTAPI_LOG_LEVEL', 'warning')
    assert get_log_options() == (True, 'WARNING')

    monkeypatch.setenv('RESTAPI_LOG_JSON', 'perhaps')
    monkeypatch.setenv('RESTAPI_LOG_LEVEL', 'loud')
    assert get_log_options() == (False, 'INFO')


def test_settings_carry_only_plugin_options():
    assert set(PluginSettings.model_fields) == {
        'execution_timeout_ms',
        'max_body_bytes',
        'max_content_bytes',
        'user_agent',
        'log_level',
        'log_json',
    }
