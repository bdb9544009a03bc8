"""Tests for the async HTTP transport."""
from contextlib import asynccontextmanager

import pytest
from aiohttp import test_utils, web

from directupload.core.exceptions import TransportError
from directupload.core.http import AsyncHttpClient, HttpConfig, RetryConfig
from directupload.core.upload.services import FileRangeBody


@asynccontextmanager
async def serve(routes):
    """Run an aiohttp application on a free local port."""
    app = web.Application()
    app.add_routes(routes)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield server
    finally:
        await server.close()


def no_delay_retry(max_retries):
    return HttpConfig(retry=RetryConfig(max_retries=max_retries, base_delay=0, max_delay=0))


class TestAsyncHttpClient:
    """Test suite for AsyncHttpClient."""

    @pytest.mark.asyncio
    async def test_json_response(self):
        """Test JSON bodies are decoded and latency is measured."""
        async def handler(request):
            return web.json_response({'ok': True})

        async with serve([web.post('/a.json', handler)]) as server:
            async with AsyncHttpClient() as http:
                response = await http.request(
                    'POST', str(server.make_url('/a.json')), response_type='json'
                )

        assert response.status == 200
        assert response.data == {'ok': True}
        assert response.elapsed_time >= 0

    @pytest.mark.asyncio
    async def test_json_without_content_type(self):
        async def handler(request):
            return web.Response(text='{"files": []}', content_type='text/plain')

        async with serve([web.get('/a', handler)]) as server:
            async with AsyncHttpClient() as http:
                response = await http.request('GET', str(server.make_url('/a')), response_type='json')

        assert response.data == {'files': []}

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        async def handler(request):
            return web.Response(text='<html/>')

        async with serve([web.get('/a', handler)]) as server:
            async with AsyncHttpClient() as http:
                with pytest.raises(TransportError, match="Invalid JSON"):
                    await http.request('GET', str(server.make_url('/a')), response_type='json')

    @pytest.mark.asyncio
    async def test_put_sends_body_and_headers(self):
        """Test body bytes and headers reach the server."""
        received = {}

        async def handler(request):
            received['body'] = await request.read()
            received['length'] = request.headers.get('Content-Length')
            received['agent'] = request.headers.get('User-Agent')
            return web.Response(status=201)

        async with serve([web.put('/part', handler)]) as server:
            async with AsyncHttpClient() as http:
                response = await http.request(
                    'PUT',
                    str(server.make_url('/part')),
                    headers={'Content-Length': '5'},
                    data=b"hello"
                )

        assert response.status == 201
        assert received == {'body': b"hello", 'length': '5', 'agent': 'directupload/1.0.0'}

    @pytest.mark.asyncio
    async def test_streams_part_body(self, sample_file):
        """Test a file-backed part body is streamed with its Content-Length."""
        received = {}

        async def handler(request):
            received['body'] = await request.read()
            received['length'] = request.headers.get('Content-Length')
            received['chunked'] = request.headers.get('Transfer-Encoding')
            return web.Response(status=201)

        body = FileRangeBody(sample_file, 4, 14)

        async with serve([web.put('/part', handler)]) as server:
            async with AsyncHttpClient() as http:
                await http.request(
                    'PUT', str(server.make_url('/part')), headers={'Content-Length': '10'}, data=body
                )

        assert received == {'body': b"456789ABCD", 'length': '10', 'chunked': None}

    @pytest.mark.asyncio
    async def test_retry_restreams_part_body(self, sample_file):
        """Test every attempt sends the whole part again."""
        bodies = []

        async def handler(request):
            bodies.append(await request.read())
            if len(bodies) == 1:
                return web.Response(status=503)
            return web.Response(status=201)

        async with serve([web.put('/part', handler)]) as server:
            async with AsyncHttpClient(no_delay_retry(1)) as http:
                await http.request(
                    'PUT',
                    str(server.make_url('/part')),
                    headers={'Content-Length': '5'},
                    data=FileRangeBody(sample_file, 0, 5)
                )

        assert bodies == [b"01234", b"01234"]

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        """Test HTTP statuses >= 400 become TransportError."""
        async with serve([]) as server:
            url = str(server.make_url('/missing'))
            async with AsyncHttpClient() as http:
                with pytest.raises(TransportError) as exc_info:
                    await http.request('GET', url)

        assert exc_info.value.status == 404
        assert exc_info.value.url == url
        assert exc_info.value.error_code == 404

    @pytest.mark.asyncio
    async def test_connection_failure_raises(self):
        async with serve([]) as server:
            url = str(server.make_url('/gone'))
        async with AsyncHttpClient() as http:
            with pytest.raises(TransportError) as exc_info:
                await http.request('GET', url)

        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_no_retry_by_default(self):
        calls = []

        async def handler(request):
            calls.append(1)
            return web.Response(status=503)

        async with serve([web.get('/busy', handler)]) as server:
            async with AsyncHttpClient() as http:
                with pytest.raises(TransportError):
                    await http.request('GET', str(server.make_url('/busy')))

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_retries_listed_status(self):
        """Test 503 is retried until the server recovers."""
        calls = []

        async def handler(request):
            calls.append(1)
            if len(calls) < 3:
                return web.Response(status=503)
            return web.Response(text='ready')

        async with serve([web.get('/busy', handler)]) as server:
            async with AsyncHttpClient(no_delay_retry(3)) as http:
                response = await http.request(
                    'GET', str(server.make_url('/busy')), response_type='text'
                )

        assert response.data == 'ready'
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_client_errors_not_retried(self):
        calls = []

        async def handler(request):
            calls.append(1)
            return web.Response(status=400)

        async with serve([web.get('/bad', handler)]) as server:
            async with AsyncHttpClient(no_delay_retry(3)) as http:
                with pytest.raises(TransportError):
                    await http.request('GET', str(server.make_url('/bad')))

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        http = AsyncHttpClient()
        await http._ensure_session()

        await http.close()
        await http.close()


class TestRetryConfig:
    """Test suite for RetryConfig."""

    def test_delay_grows_and_is_capped(self):
        retry = RetryConfig(max_retries=10, base_delay=1, max_delay=5)

        assert [retry.calculate_delay(a) for a in range(4)] == [1, 2, 4, 5]

    def test_should_retry(self):
        retry = RetryConfig(max_retries=1)

        assert retry.should_retry(503, 0) is True
        assert retry.should_retry(None, 0) is True
        assert retry.should_retry(500, 0) is False
        assert retry.should_retry(503, 1) is False


class TestHttpConfig:
    """Test suite for HttpConfig."""

    def test_session_kwargs_merge_extra_headers(self):
        config = HttpConfig(extra_headers={'X-Trace': '1'})
        headers = config.get_session_kwargs()['headers']

        assert headers == {'User-Agent': 'directupload/1.0.0', 'X-Trace': '1'}

    def test_insecure(self):
        config = HttpConfig.insecure(limit=10)

        assert config.verify_ssl is False
        assert config.get_connector_kwargs() == {'limit': 10, 'limit_per_host': 0, 'ssl': False}

    def test_verified_by_default(self):
        assert 'ssl' not in HttpConfig.default().get_connector_kwargs()

    def test_no_overall_deadline(self):
        """Test long part transfers are only bounded by socket timeouts."""
        timeout = HttpConfig().get_session_kwargs()['timeout']

        assert timeout.total is None
        assert timeout.sock_read == 120.0
        assert timeout.sock_connect == 30.0
