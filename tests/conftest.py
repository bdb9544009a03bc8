"""Pytest fixtures for directupload tests."""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs

import pytest

from directupload.core.exceptions import TransportError
from directupload.core.http import TimedResponse
from directupload.core.upload.models import UploadContext, UploadOptions

TARGET_URL = 'http://localhost:4502/content/dam/target'


@dataclass
class RecordedCall:
    """A request seen by FakeTransport."""
    method: str
    url: str
    headers: Optional[Dict[str, str]] = None
    data: Any = None

    @property
    def form(self) -> Dict[str, List[str]]:
        return parse_qs(self.data) if isinstance(self.data, str) else {}


@dataclass
class FakeTransport:
    """
    In-memory transport recording every request.

    Attributes:
        initiate_data: JSON body returned by the initiate call
        put_times: Latency per part URL (default 10 ms)
        complete_time: Latency of completion calls
        init_time: Latency of the initiate call
        fail_urls: URLs answering with HTTP 500
        folder_exists: Whether GET <folder>.0.json succeeds
        put_delays: Real sleep per part URL in seconds
        connection_slots: Optional cap on requests in flight, like a
            connection pool; part bodies are streamed inside the slot
    """
    initiate_data: Dict[str, Any] = field(default_factory=dict)
    put_times: Dict[str, int] = field(default_factory=dict)
    complete_time: int = 5
    init_time: int = 7
    fail_urls: set = field(default_factory=set)
    folder_exists: bool = True
    put_delays: Dict[str, float] = field(default_factory=dict)
    connection_slots: Optional[int] = None
    calls: List[RecordedCall] = field(default_factory=list)
    _slots: Optional[asyncio.Semaphore] = field(default=None, repr=False)

    async def request(self, method, url, headers=None, data=None, response_type=None):
        if self.connection_slots is None:
            return await self._handle(method, url, headers, data)
        if self._slots is None:
            self._slots = asyncio.Semaphore(self.connection_slots)
        async with self._slots:
            return await self._handle(method, url, headers, data)

    async def _handle(self, method, url, headers, data):
        if hasattr(data, 'stream'):
            data = b"".join([block async for block in data.stream()])
        self.calls.append(RecordedCall(method, url, dict(headers) if headers else None, data))
        if url in self.fail_urls:
            raise TransportError(f"{method} {url} failed with status 500", status=500, url=url)

        if method == 'PUT':
            delay = self.put_delays.get(url)
            if delay:
                await asyncio.sleep(delay)
            return TimedResponse(status=201, elapsed_time=self.put_times.get(url, 10))
        if url.endswith('.initiateUpload.json'):
            return TimedResponse(status=200, data=self.initiate_data, elapsed_time=self.init_time)
        if method == 'GET' and url.endswith('.0.json'):
            if not self.folder_exists:
                raise TransportError(f"GET {url} failed with status 404", status=404, url=url)
            return TimedResponse(status=200, data=b'{}')
        if method == 'POST':
            return TimedResponse(status=200, elapsed_time=self.complete_time)
        raise AssertionError(f"Unexpected request {method} {url}")

    async def close(self):
        pass

    def calls_for(self, method: str) -> List[RecordedCall]:
        return [call for call in self.calls if call.method == method]


def initiated_file_data(name, uris, min_part_size=0, max_part_size=0, token=None):
    """Build one entry of an initiate response."""
    return {
        'fileName': name,
        'mimeType': 'application/octet-stream',
        'uploadToken': token or f"token-{name}",
        'uploadURIs': list(uris),
        'minPartSize': min_part_size,
        'maxPartSize': max_part_size,
    }


@pytest.fixture
def fake_transport():
    """Returns an empty FakeTransport."""
    return FakeTransport()


@pytest.fixture
def options():
    """Returns concurrent upload options for the test target."""
    return UploadOptions(url=TARGET_URL, headers={'Authorization': 'Basic dGVzdA=='})


@pytest.fixture
def context(options):
    """Returns an upload context for the default options."""
    return UploadContext(options=options)


@pytest.fixture
def sample_file(tmp_path):
    """Creates a 20-byte file with known content."""
    path = tmp_path / 'sample.bin'
    path.write_bytes(b"0123456789ABCDEFGHIJ")
    return path
