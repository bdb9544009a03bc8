"""
HTTP transport configuration module.

Provides configuration for the aiohttp-based transport used by every
network call of an upload run.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple

import aiohttp


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    There is no overall deadline by default: a large part may take as long
    as it needs while the socket keeps making progress.
    """
    total: Optional[float] = None
    connect: float = 30.0
    sock_read: float = 120.0
    sock_connect: float = 30.0

    def to_aiohttp_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class RetryConfig:
    """
    Retry configuration.

    Retries are disabled unless max_retries is raised; the upload engine
    itself never retries.
    """
    max_retries: int = 0
    base_delay: float = 0.25
    max_delay: float = 16.0
    exponential_base: float = 2.0
    retry_on_status: Tuple[int, ...] = (502, 503, 504)

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt number."""
        delay = self.base_delay * (self.exponential_base ** attempt)
        return min(delay, self.max_delay)

    def should_retry(self, status: Optional[int], attempt: int) -> bool:
        """Connection failures (status None) and listed statuses are retried."""
        if attempt >= self.max_retries:
            return False
        return status is None or status in self.retry_on_status


@dataclass
class HttpConfig:
    """
    Complete transport configuration.

    Example:
        >>> config = HttpConfig.insecure(retry=RetryConfig(max_retries=2))
        >>> config.get_connector_kwargs()['ssl']
        False
    """
    user_agent: str = 'directupload/1.0.0'
    verify_ssl: bool = True

    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    # Sent with every request, below per-request headers
    extra_headers: Dict[str, str] = field(default_factory=dict)

    log_level: int = 20  # logging.INFO

    # Connection pool; 0 means no per-host cap
    limit: int = 100
    limit_per_host: int = 0

    @classmethod
    def default(cls) -> 'HttpConfig':
        return cls()

    @classmethod
    def insecure(cls, **kwargs) -> 'HttpConfig':
        """Create configuration with certificate verification disabled."""
        return cls(verify_ssl=False, **kwargs)

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        kwargs: Dict[str, Any] = {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
        }
        if not self.verify_ssl:
            kwargs['ssl'] = False
        return kwargs

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        return {
            'headers': {'User-Agent': self.user_agent, **self.extra_headers},
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
