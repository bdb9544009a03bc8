"""
Per-file upload coordination.

Plans a file's parts, transfers them, completes the upload and derives the
file's timing statistics.
"""
import time
from typing import List, Optional
from urllib.parse import urlencode

from .file_service import AsyncFileReader, bind_part_body
from .part_service import PartTransmitter
from ..models import Chunk, ChunkResult, FileUploadResult, InitiatedFile, UploadContext, UploadTask
from ..protocols import ChunkingStrategy, HttpTransportProtocol
from ..strategies import DirectBinaryChunkingStrategy, ExecutionStrategy, create_execution_strategy
from ...exceptions import UploadError
from ...utils import elapsed_ms, round_half_up

FORM_CONTENT_TYPE = 'application/x-www-form-urlencoded'


class FileProcessor:
    """
    Uploads one initiated file.

    Steps:
    1. Plan parts and bind their bodies
    2. Transfer all parts with the execution strategy
    3. Derive min/max/average part times
    4. Notify the completion endpoint

    Any failure raises, unless the run's continue_on_error option is set,
    in which case a failed FileUploadResult is returned instead.
    """

    def __init__(
        self,
        transport: HttpTransportProtocol,
        context: UploadContext,
        chunking_strategy: Optional[ChunkingStrategy] = None,
        execution_strategy: Optional[ExecutionStrategy] = None,
        transmitter: Optional[PartTransmitter] = None,
        file_reader: Optional[AsyncFileReader] = None
    ):
        """
        Initialize file processor.

        Args:
            transport: HTTP transport shared by the run
            context: Options and logger of the run
            chunking_strategy: Part planner
            execution_strategy: Strategy for part transfers (from options if omitted)
            transmitter: Part transmitter
            file_reader: Reader used for file-backed parts
        """
        options = context.options
        self._transport = transport
        self._context = context
        self._logger = context.logger
        self._chunking = chunking_strategy or DirectBinaryChunkingStrategy()
        self._execution = execution_strategy or create_execution_strategy(
            options.concurrent, options.max_concurrency
        )
        self._transmitter = transmitter or PartTransmitter(transport, context)
        self._file_reader = file_reader or AsyncFileReader()

    async def process(
        self,
        initiated_file: InitiatedFile,
        task: UploadTask,
        complete_uri: str,
        target_folder: str = ''
    ) -> FileUploadResult:
        """
        Upload a file's parts and complete it.

        Args:
            initiated_file: Server descriptor for the file
            task: Local source of the file
            complete_uri: Absolute completion URL
            target_folder: Repository folder path

        Returns:
            FileUploadResult with timing statistics

        Raises:
            UploadError: On planning, source or transport failure
        """
        try:
            return await self._process(initiated_file, task, complete_uri, target_folder)
        except (UploadError, OSError) as e:
            if not self._context.options.continue_on_error:
                raise
            self._logger.error(f"Failed uploading '{initiated_file.file_name}': {e}")
            return FileUploadResult.failed(
                file_name=initiated_file.file_name,
                target_path=self._target_path(target_folder, initiated_file.file_name),
                file_size=task.file_size,
                message=str(e)
            )

    async def _process(
        self,
        initiated_file: InitiatedFile,
        task: UploadTask,
        complete_uri: str,
        target_folder: str
    ) -> FileUploadResult:
        file_name = initiated_file.file_name
        file_size = task.file_size

        self._logger.info(
            f"Start uploading '{file_name}' to cloud, fileSize: '{file_size}', "
            f"uriNum: '{len(initiated_file.upload_uris)}'"
        )

        chunks = self._plan(initiated_file, task)

        put_start = time.monotonic()
        put_results: List[ChunkResult] = await self._execution.run(chunks, self._transmitter.send)
        put_spent_final = elapsed_ms(put_start, time.monotonic())
        self._logger.info(f"Finished uploading '{file_name}', took '{put_spent_final}' ms")

        response = await self._transport.request(
            'POST',
            complete_uri,
            headers={**self._context.options.headers, 'Content-Type': FORM_CONTENT_TYPE},
            data=urlencode({
                'fileName': file_name,
                'mimeType': initiated_file.mime_type,
                'uploadToken': initiated_file.upload_token,
            })
        )
        self._logger.info(
            f"Finished complete uploading '{file_name}', response code: '{response.status}', "
            f"time elapsed: '{response.elapsed_time}' ms"
        )

        spent = [result.put_spent for result in put_results]
        return FileUploadResult(
            file_name=file_name,
            target_path=self._target_path(target_folder, file_name),
            file_size=file_size,
            part_size=chunks[0].part_size,
            part_count=len(chunks),
            put_spent_final=put_spent_final,
            put_spent_min=min(spent),
            put_spent_max=max(spent),
            put_spent_avg=round_half_up(sum(spent) / len(spent)),
            complete_spent=response.elapsed_time,
            success=True
        )

    def _plan(self, initiated_file: InitiatedFile, task: UploadTask) -> List[Chunk]:
        chunks = self._chunking.plan(
            initiated_file.upload_uris,
            task.file_size,
            initiated_file.min_part_size,
            initiated_file.max_part_size,
            file_name=initiated_file.file_name
        )
        return [
            chunk.with_body(bind_part_body(task, chunk.start, chunk.end, self._file_reader))
            for chunk in chunks
        ]

    @staticmethod
    def _target_path(target_folder: str, file_name: str) -> str:
        if not target_folder:
            return file_name
        return f"{target_folder.rstrip('/')}/{file_name}"
