"""
Upload coordinator.

Orchestrates a direct binary upload run using injected dependencies:
one initiate call for the whole batch, then one file processor per file.
"""
import json
import logging
import time
from typing import Any, Mapping, Optional, Sequence
from urllib.parse import urlencode, urlparse

from .models import (
    BatchResult,
    FileUploadResult,
    InitiateResult,
    UploadContext,
    UploadOptions,
    UploadTask
)
from .protocols import ChunkingStrategy, HttpTransportProtocol
from .services import FileProcessor, ResultAggregator
from .services.file_processor import FORM_CONTENT_TYPE
from .strategies import ExecutionStrategy, create_execution_strategy
from ..exceptions import UploadError
from ..http import AsyncHttpClient
from ..logging import get_logger


class DirectBinaryUpload:
    """
    Uploads a batch of files with the initiate / transfer / complete protocol.

    Uses dependency injection for all components, making it:
    - Testable (fake transport)
    - Extensible (swap chunking or execution strategies)

    Example:
        >>> async with DirectBinaryUpload() as uploader:
        ...     result = await uploader.upload_all(
        ...         "https://host/content/dam/folder",
        ...         {"Authorization": "Basic ..."},
        ...         [UploadTask("a.jpg", 1024, file_path="a.jpg")]
        ...     )
        ...     print(result.total_completed)
    """

    def __init__(
        self,
        transport: Optional[HttpTransportProtocol] = None,
        chunking_strategy: Optional[ChunkingStrategy] = None,
        execution_strategy: Optional[ExecutionStrategy] = None,
        aggregator: Optional[ResultAggregator] = None,
        logger=None
    ):
        """
        Initialize upload coordinator.

        Args:
            transport: HTTP transport (an owned AsyncHttpClient if omitted)
            chunking_strategy: Part planner
            execution_strategy: Strategy for files and parts (from options if omitted)
            aggregator: Result aggregator
            logger: Logger instance
        """
        self._owns_transport = transport is None
        self._transport = transport or AsyncHttpClient()
        self._chunking = chunking_strategy
        self._execution = execution_strategy
        self._aggregator = aggregator or ResultAggregator()
        self._logger = logger or get_logger('directupload.upload')

    async def __aenter__(self) -> 'DirectBinaryUpload':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the transport if this instance created it."""
        if self._owns_transport:
            await self._transport.close()

    async def upload_all(
        self,
        url: str,
        headers: Optional[Mapping[str, str]],
        tasks: Sequence[UploadTask],
        concurrent: bool = True,
        **options: Any
    ) -> BatchResult:
        """
        Upload a batch of files to a target folder URL.

        Args:
            url: Target folder URL
            headers: Headers for the initiate and complete calls
            tasks: Files to upload
            concurrent: Transfer concurrently (True) or serially (False)
            **options: Extra UploadOptions fields

        Returns:
            BatchResult of the run
        """
        return await self.upload_files(UploadOptions(
            url=url,
            headers=headers or {},
            upload_files=tuple(tasks),
            concurrent=concurrent,
            **options
        ))

    async def upload_files(self, options: UploadOptions) -> BatchResult:
        """
        Execute a complete upload run.

        Args:
            options: Upload options

        Returns:
            BatchResult of the run

        Raises:
            TransportError: If the initiate call or any transfer fails
            UploadError: If planning fails or the server response is inconsistent
        """
        start_time = time.monotonic()
        context = UploadContext(options=options, logger=self._logger)
        tasks = options.upload_files

        initiated = await self._initiate(options)
        if len(initiated.files) != len(tasks):
            raise UploadError(
                f"Initiate response describes {len(initiated.files)} files, "
                f"expected {len(tasks)}"
            )

        complete_uri = self._resolve_complete_uri(options.url_prefix, initiated.complete_uri)
        execution = self._execution or create_execution_strategy(
            options.concurrent, options.max_concurrency
        )
        processor = FileProcessor(
            self._transport,
            context,
            chunking_strategy=self._chunking,
            execution_strategy=execution
        )
        target_folder = options.target_folder

        async def process_file(initiated_file, index) -> FileUploadResult:
            return await processor.process(
                initiated_file, tasks[index], complete_uri, target_folder
            )

        self._logger.info(
            f"Uploading {len(tasks)} files to '{target_folder}' ({execution.name})"
        )
        file_results = await execution.run(initiated.files, process_file)

        return self._aggregator.aggregate(
            initiated.elapsed_time,
            len(initiated.files),
            start_time,
            file_results
        )

    async def _initiate(self, options: UploadOptions) -> InitiateResult:
        """Issue the initiate call for the whole batch."""
        tasks = options.upload_files
        response = await self._transport.request(
            'POST',
            f"{options.url}.initiateUpload.json",
            headers={**options.headers, 'Content-Type': FORM_CONTENT_TYPE},
            data=urlencode({
                'path': options.target_folder,
                'fileName': [task.file_name for task in tasks],
                'fileSize': [task.file_size for task in tasks],
            }, doseq=True),
            response_type='json'
        )
        self._logger.info(
            f"Finished initialize uploading, response code: '{response.status}', "
            f"time elapsed: '{response.elapsed_time}' ms"
        )
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug('Init upload result: ' + json.dumps(response.data, indent=4))

        if not isinstance(response.data, Mapping):
            raise UploadError("Initiate response is not a JSON object")

        return InitiateResult.from_response(
            response.data,
            elapsed_time=response.elapsed_time,
            status=response.status
        )

    @staticmethod
    def _resolve_complete_uri(url_prefix: str, complete_uri: str) -> str:
        """Prefix a relative completion URI with the target URL's scheme and host."""
        if urlparse(complete_uri).netloc:
            return complete_uri
        if not complete_uri.startswith('/'):
            complete_uri = '/' + complete_uri
        return f"{url_prefix}{complete_uri}"
