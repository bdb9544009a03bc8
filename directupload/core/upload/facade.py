"""
Filesystem upload facade.

Provides a simplified interface for uploading local files and directories.
Follows Facade Pattern - hides folder creation, file discovery and the
direct binary protocol behind one call.
"""
from pathlib import Path
from typing import Iterable, Optional, Union

from .coordinator import DirectBinaryUpload
from .models import BatchResult, UploadOptions
from .protocols import HttpTransportProtocol
from .services import FolderCreator, LocalFileCollector
from ..http import AsyncHttpClient, HttpConfig
from ..logging import get_logger


class FileSystemUpload:
    """
    Uploads local files to a repository folder.

    This is the main entry point for uploading from disk.

    Example:
        >>> from directupload import FileSystemUpload, UploadOptions
        >>> options = UploadOptions(url="https://host/content/dam/photos",
        ...                         headers={"Authorization": "Basic ..."})
        >>> async with FileSystemUpload() as uploader:
        ...     result = await uploader.upload(options, ["./photos", "notes.pdf"])
        >>> print(f"{result.total_completed}/{result.total_files} uploaded")
    """

    def __init__(
        self,
        transport: Optional[HttpTransportProtocol] = None,
        config: Optional[HttpConfig] = None,
        collector: Optional[LocalFileCollector] = None
    ):
        """
        Initialize filesystem upload.

        Args:
            transport: HTTP transport (an owned AsyncHttpClient if omitted)
            config: Transport configuration used when no transport is given
            collector: Local file collector
        """
        self._owns_transport = transport is None
        self._transport = transport or AsyncHttpClient(config)
        self._collector = collector or LocalFileCollector()
        self._folders = FolderCreator(self._transport)
        self._uploader = DirectBinaryUpload(self._transport)
        self._logger = get_logger('directupload.upload.filesystem')

    async def __aenter__(self) -> 'FileSystemUpload':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the transport if this instance created it."""
        if self._owns_transport:
            await self._transport.close()

    async def upload(
        self,
        options: UploadOptions,
        local_paths: Iterable[Union[str, Path]]
    ) -> BatchResult:
        """
        Upload local files and directories to the folder at options.url.

        Args:
            options: Upload options; upload_files is replaced by the collected files
            local_paths: Local paths; directories contribute their direct files

        Returns:
            BatchResult of the run

        Raises:
            FolderCreationError: If the target folder cannot be created
            TransportError: If any upload call fails
        """
        await self._folders.ensure_folder(options.url, options.headers)

        upload_files = self._collector.collect(local_paths)
        upload_options = (
            options
            .with_add_content_length_header(True)
            .with_upload_files(upload_files)
        )
        if not upload_files:
            self._logger.warning("No local files to upload")

        return await self._uploader.upload_files(upload_options)
