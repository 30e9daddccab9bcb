import pytest

from restapi.core import config as config_module
from restapi.core.config import RequestLimits


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep plugin settings independent of the developer's environment and .env files."""
    for key in list(config_module.os.environ):
        if key.startswith("RESTAPI_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_plugin_settings", None)
    monkeypatch.setattr(config_module, "_ENV_LOADED", False)


@pytest.fixture
def limits():
    return RequestLimits(timeout_ms=5000, max_body_bytes=1024 * 1024)
