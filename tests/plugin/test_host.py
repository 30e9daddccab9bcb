import pytest

from restapi import __version__
from restapi.core.config import PluginSettings
from restapi.core.errors import HttpStatusError
from restapi.plugin import RestApiPlugin
from restapi.tools import REGISTRY
from restapi.tools.http import DatasourceConfiguration, DatasourceMetadata, ExecutionOutput


class StaticExecutor:
    def __init__(self):
        self.descriptors = []

    async def __call__(self, descriptor):
        self.descriptors.append(descriptor)
        return ExecutionOutput(output='ok', status_code=200)


class FailingExecutor:
    async def __call__(self, descriptor):
        raise HttpStatusError(500, 'Internal Server Error', output='boom')


def test_plugin_identity():
    plugin = RestApiPlugin()
    assert plugin.name == 'restapi'
    assert plugin.version == __version__
    assert 'http' in REGISTRY


@pytest.mark.asyncio
async def test_plugin_execute_applies_its_settings():
    executor = StaticExecutor()
    settings = PluginSettings(execution_timeout_ms=42, max_body_bytes=7, user_agent='host/5')
    plugin = RestApiPlugin(settings=settings, executor=executor)

    result = await plugin.execute(
        {'path': 'https://api.test/{{ id }}', 'httpMethod': 'delete'},
        DatasourceConfiguration(url='ignored'),
        context={'id': 3},
    )

    descriptor = executor.descriptors[0]
    assert result.output == 'ok'
    assert result.request.startswith("curl --location --request DELETE https://api.test/3")
    assert descriptor.method == 'DELETE'
    assert descriptor.timeout == 42
    assert descriptor.max_body_length == 7
    assert descriptor.headers['User-Agent'] == 'host/5'


@pytest.mark.asyncio
async def test_plugin_execute_propagates_failures():
    plugin = RestApiPlugin(executor=FailingExecutor())
    with pytest.raises(HttpStatusError) as exc_info:
        await plugin.execute({'path': 'https://api.test/', 'httpMethod': 'GET'})
    assert exc_info.value.retryable is True


def test_plugin_get_request():
    plugin = RestApiPlugin()
    assert plugin.get_request({'path': 'https://api.test/', 'httpMethod': 'HEAD'}) == (
        'curl --location --request HEAD https://api.test/'
    )


def test_plugin_property_lists():
    plugin = RestApiPlugin()
    assert plugin.dynamic_properties()[0] == 'path'
    assert plugin.escape_string_properties() == ['body']


@pytest.mark.asyncio
async def test_plugin_datasource_probes():
    plugin = RestApiPlugin()
    assert await plugin.metadata(DatasourceConfiguration()) == DatasourceMetadata()
    assert await plugin.test(DatasourceConfiguration()) is None
