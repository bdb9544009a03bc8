"""HTTP transport module."""
from .config import HttpConfig, TimeoutConfig, RetryConfig
from .client import AsyncHttpClient, TimedResponse

__all__ = [
    # Client
    'AsyncHttpClient',
    'TimedResponse',

    # Configuration
    'HttpConfig',
    'TimeoutConfig',
    'RetryConfig',
]
