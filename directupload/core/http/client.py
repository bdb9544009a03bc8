"""
Async HTTP transport.

Thin timed wrapper around an aiohttp session. Every network call of an
upload run (initiate, part PUT, complete, folder checks) goes through
AsyncHttpClient.request().
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import aiohttp

from .config import HttpConfig
from ..exceptions import TransportError
from ..logging import get_logger
from ..utils import elapsed_ms


@dataclass(frozen=True)
class TimedResponse:
    """
    Response of a timed request.

    Attributes:
        status: HTTP status code
        data: Decoded body (dict for JSON, str for text, bytes otherwise)
        elapsed_time: Request latency in milliseconds
        headers: Response headers
    """
    status: int
    data: Any = None
    elapsed_time: int = 0
    headers: Dict[str, str] = field(default_factory=dict)


class AsyncHttpClient:
    """
    Asynchronous HTTP client used as the upload transport.

    Features:
    - Shared connection pool for all requests of a run
    - Streams part bodies while the request is written
    - Configurable SSL verification and timeouts
    - Optional retry with exponential backoff (disabled by default)
    - Latency measurement per request

    Example:
        >>> async with AsyncHttpClient() as http:
        ...     response = await http.request('GET', 'https://example.com/a.json',
        ...                                   response_type='json')
        ...     print(response.status, response.elapsed_time)
    """

    def __init__(
        self,
        config: Optional[HttpConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """
        Initialize async HTTP client.

        Args:
            config: Transport configuration (uses defaults if not provided)
            session: Optional externally owned session
        """
        self._config = config or HttpConfig.default()
        self._session = session
        self._owns_session = session is None

        self._logger = get_logger('directupload.http')
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            self._logger.setLevel(self._config.log_level)

    @property
    def config(self) -> HttpConfig:
        """Get current configuration."""
        return self._config

    async def __aenter__(self) -> 'AsyncHttpClient':
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                **self._config.get_session_kwargs()
            )
            self._owns_session = True
        return self._session

    async def close(self):
        """Close session if we own it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        data: Any = None,
        response_type: Optional[str] = None
    ) -> TimedResponse:
        """
        Issue a request and measure its latency.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Optional request headers
            data: Optional body (bytes, str, or a part body with stream())
            response_type: 'json', 'text' or None to read raw bytes

        Returns:
            TimedResponse with status, decoded body and latency

        Raises:
            TransportError: On connection failure, timeout or status >= 400
        """
        retry = self._config.retry
        attempt = 0
        while True:
            try:
                return await self._request_once(method, url, headers, data, response_type)
            except TransportError as e:
                if not retry.should_retry(e.status, attempt):
                    raise
                delay = retry.calculate_delay(attempt)
                attempt += 1
                self._logger.warning(
                    f"{method} {url} failed ({e}), retrying in {delay:.2f}s "
                    f"(attempt {attempt}/{retry.max_retries})"
                )
                await asyncio.sleep(delay)

    async def _request_once(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]],
        data: Any,
        response_type: Optional[str]
    ) -> TimedResponse:
        session = await self._ensure_session()
        if hasattr(data, 'stream'):
            # aiohttp pulls the blocks only after the connection is acquired
            data = data.stream()

        start = time.monotonic()
        try:
            async with session.request(
                method,
                url,
                headers=dict(headers) if headers else None,
                data=data
            ) as response:
                body = await self._read_body(response, response_type)
                elapsed = elapsed_ms(start, time.monotonic())
                if response.status >= 400:
                    self._logger.error(
                        f"{method} {url} returned HTTP {response.status} after {elapsed} ms"
                    )
                    raise TransportError(
                        f"{method} {url} failed with status {response.status}",
                        status=response.status,
                        url=url
                    )
                self._logger.debug(
                    f"{method} {url} -> {response.status} in {elapsed} ms"
                )
                return TimedResponse(
                    status=response.status,
                    data=body,
                    elapsed_time=elapsed,
                    headers=dict(response.headers)
                )
        except asyncio.TimeoutError as e:
            elapsed = elapsed_ms(start, time.monotonic())
            self._logger.error(f"{method} {url} timed out after {elapsed} ms")
            raise TransportError(f"{method} {url} timed out", url=url) from e
        except aiohttp.ClientError as e:
            self._logger.error(f"{method} {url} failed: {e}")
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e

    async def _read_body(
        self,
        response: aiohttp.ClientResponse,
        response_type: Optional[str]
    ) -> Any:
        if response.status >= 400:
            return await response.read()
        if response_type == 'json':
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise TransportError(
                    f"Invalid JSON response from {response.url}",
                    status=response.status,
                    url=str(response.url)
                ) from e
        if response_type == 'text':
            return await response.text()
        return await response.read()
