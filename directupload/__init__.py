"""
directupload - Async Python library for direct binary uploads.

Usage:
    >>> from directupload import FileSystemUpload, UploadOptions
    >>>
    >>> options = UploadOptions(url="https://host/content/dam/folder")
    >>> async with FileSystemUpload() as uploader:
    ...     result = await uploader.upload(options, ["./images"])
    ...     print(result.total_completed)
"""
from .core.upload import (
    FileSystemUpload,
    DirectBinaryUpload,
    UploadTask,
    UploadOptions,
    FileUploadResult,
    BatchResult
)

# Configuration
from .core.http import (
    HttpConfig,
    TimeoutConfig,
    RetryConfig,
    AsyncHttpClient
)

from .core.exceptions import (
    UploadError,
    TooManyPartsError,
    PartCountMismatchError,
    UnsupportedSourceError,
    TransportError,
    FolderCreationError
)
from .core.logging import configure_logging

__version__ = '1.0.0'

__all__ = [
    'FileSystemUpload',
    'DirectBinaryUpload',
    'UploadTask',
    'UploadOptions',
    'FileUploadResult',
    'BatchResult',
    'HttpConfig',
    'TimeoutConfig',
    'RetryConfig',
    'AsyncHttpClient',
    'UploadError',
    'TooManyPartsError',
    'PartCountMismatchError',
    'UnsupportedSourceError',
    'TransportError',
    'FolderCreationError',
    'configure_logging',
]
