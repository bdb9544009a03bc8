"""
Custom exceptions for direct binary upload operations.

This module defines exception classes raised by the upload engine.
"""
from typing import Optional


class UploadError(Exception):
    """Base exception for all upload-related errors."""

    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class TooManyPartsError(UploadError):
    """Raised when the maximum part size implies more parts than allocated URLs."""

    def __init__(self, required_parts: int, available_parts: int) -> None:
        self.required_parts = required_parts
        self.available_parts = available_parts
        super().__init__(
            f"number of parts ({required_parts}) is more than the number "
            f"of available part urls ({available_parts})"
        )


class PartCountMismatchError(UploadError):
    """Raised when a file below the minimum part size is offered several URLs."""

    def __init__(self, file_size: int, min_part_size: int, url_count: int) -> None:
        self.file_size = file_size
        self.min_part_size = min_part_size
        self.url_count = url_count
        if url_count == 0:
            message = "no upload urls were allocated for the file"
        else:
            message = (
                f"file size ({file_size}) less than min part size ({min_part_size}) "
                f"must only have one url, got {url_count}"
            )
        super().__init__(message)


class UnsupportedSourceError(UploadError):
    """Raised when an upload task has neither a file path nor a sliceable blob."""

    def __init__(self, file_name: str) -> None:
        self.file_name = file_name
        super().__init__(
            f"unsupported operation: file '{file_name}' must have a file_path or blob"
        )


class TransportError(UploadError):
    """Exception raised when a network call fails or returns an error status."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        url: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            status: HTTP status code (None for connection errors)
            url: Requested URL
        """
        self.status = status
        self.url = url
        super().__init__(message, error_code=status)


class FolderCreationError(TransportError):
    """Exception raised when the target folder cannot be created."""
    pass
