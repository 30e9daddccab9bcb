import httpx
import pytest

from restapi.core.errors import (
    ErrorKind,
    HttpStatusError,
    RequestFailedError,
    RequestTimeoutError,
    RequestTooLargeError,
    ResponseTooLargeError,
)
from restapi.tools.http import executor as executor_module
from restapi.tools.http.executor import execute_request
from restapi.tools.http.models import RequestDescriptor, ResponseType


def _descriptor(**kwargs):
    values = {
        'url': 'https://api.test/items?q=5',
        'method': 'GET',
        'headers': {'User-Agent': 'restapi-test'},
        'timeout': 5000,
        'max_body_length': 1024,
        'max_content_length': 1024,
    }
    values.update(kwargs)
    return RequestDescriptor(**values)


def _client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_success_json_response():
    seen = {}

    def handler(request):
        seen['method'] = request.method
        seen['url'] = str(request.url)
        seen['headers'] = dict(request.headers)
        return httpx.Response(200, json={'ok': True})

    async with _client(handler) as client:
        result = await execute_request(_descriptor(), client=client)

    assert result.output == {'ok': True}
    assert result.status_code == 200
    assert result.url == 'https://api.test/items?q=5'
    assert result.elapsed is not None
    assert result.log and result.log[0].startswith('GET https://api.test/items?q=5 -> 200')
    assert seen['method'] == 'GET'
    assert seen['url'] == 'https://api.test/items?q=5'
    assert seen['headers']['user-agent'] == 'restapi-test'


@pytest.mark.asyncio
async def test_body_and_none_header_values_are_sent():
    seen = {}

    def handler(request):
        seen['content'] = request.content
        seen['headers'] = dict(request.headers)
        return httpx.Response(201, text='created')

    descriptor = _descriptor(
        method='POST',
        headers={'Content-Type': 'application/json', 'X-Empty': None},
        content='{"a":1}',
    )
    async with _client(handler) as client:
        result = await execute_request(descriptor, client=client)

    assert seen['content'] == b'{"a":1}'
    assert seen['headers']['x-empty'] == ''
    assert result.status_code == 201
    assert result.output == 'created'


@pytest.mark.asyncio
async def test_form_data_is_url_encoded():
    seen = {}

    def handler(request):
        seen['content'] = request.content
        seen['content_type'] = request.headers['content-type']
        return httpx.Response(204)

    descriptor = _descriptor(
        method='POST',
        headers={'Content-Type': 'application/x-www-form-urlencoded'},
        data={'name': 'alice', 'tag': ['a', 'b']},
    )
    async with _client(handler) as client:
        result = await execute_request(descriptor, client=client)

    assert seen['content'] == b'name=alice&tag=a&tag=b'
    assert seen['content_type'] == 'application/x-www-form-urlencoded'
    assert result.output is None


@pytest.mark.asyncio
async def test_file_form_is_multipart():
    seen = {}

    def handler(request):
        seen['content_type'] = request.headers['content-type']
        seen['content'] = request.content
        return httpx.Response(200, text='ok')

    descriptor = _descriptor(
        method='POST',
        data={'kind': 'csv'},
        files={'upload': ('report.csv', 'a,b\n')},
    )
    async with _client(handler) as client:
        await execute_request(descriptor, client=client)

    assert seen['content_type'].startswith('multipart/form-data; boundary=')
    assert b'filename="report.csv"' in seen['content']
    assert b'a,b\n' in seen['content']


@pytest.mark.asyncio
async def test_request_body_over_limit_is_rejected_before_sending():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200)

    descriptor = _descriptor(method='POST', content='x' * 100, max_body_length=10)
    async with _client(handler) as client:
        with pytest.raises(RequestTooLargeError) as exc_info:
            await execute_request(descriptor, client=client)

    assert calls == []
    assert exc_info.value.details == {'size': 100, 'limit': 10}


@pytest.mark.asyncio
async def test_response_over_limit_is_rejected():
    def handler(request):
        return httpx.Response(200, content=b'x' * 100)

    async with _client(handler) as client:
        with pytest.raises(ResponseTooLargeError):
            await execute_request(_descriptor(max_content_length=10), client=client)


@pytest.mark.asyncio
async def test_zero_limits_disable_checks():
    def handler(request):
        return httpx.Response(200, content=b'x' * 100)

    descriptor = _descriptor(method='POST', content='y' * 100, max_body_length=0, max_content_length=0, timeout=0)
    async with _client(handler) as client:
        result = await execute_request(descriptor, client=client)
    assert result.output == 'x' * 100


@pytest.mark.asyncio
async def test_timeout_is_mapped():
    def handler(request):
        raise httpx.ReadTimeout('timed out', request=request)

    async with _client(handler) as client:
        with pytest.raises(RequestTimeoutError) as exc_info:
            await execute_request(_descriptor(), client=client)

    assert exc_info.value.retryable is True
    assert exc_info.value.kind == ErrorKind.TIMEOUT


@pytest.mark.asyncio
async def test_transport_error_is_mapped():
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    async with _client(handler) as client:
        with pytest.raises(RequestFailedError) as exc_info:
            await execute_request(_descriptor(), client=client)

    assert 'connection refused' in str(exc_info.value)


@pytest.mark.asyncio
async def test_error_status_raises_with_output():
    def handler(request):
        return httpx.Response(404, json={'error': 'missing'})

    async with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            await execute_request(_descriptor(), client=client)

    error = exc_info.value
    assert error.status_code == 404
    assert error.output == {'error': 'missing'}
    assert error.kind == ErrorKind.NOT_FOUND
    assert str(error) == 'HTTP 404: Not Found'


@pytest.mark.asyncio
async def test_error_status_with_undecodable_json_hint_falls_back_to_text():
    def handler(request):
        return httpx.Response(503, text='<html>down</html>', headers={'Retry-After': '30'})

    async with _client(handler) as client:
        with pytest.raises(HttpStatusError) as exc_info:
            await execute_request(_descriptor(decode_as=ResponseType.JSON), client=client)

    info = exc_info.value.to_error_info()
    assert exc_info.value.output == '<html>down</html>'
    assert info.retryable is True
    assert info.retry_after == 30


@pytest.mark.asyncio
async def test_short_lived_client_is_created_when_none_given(monkeypatch):
    created = []
    real_client = httpx.AsyncClient
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text='hello'))

    def factory(**kwargs):
        created.append(kwargs)
        return real_client(transport=transport, **kwargs)

    monkeypatch.setattr(executor_module.httpx, 'AsyncClient', factory)

    result = await execute_request(_descriptor(timeout=2500))

    assert result.output == 'hello'
    assert created == [{'timeout': 2.5}]
