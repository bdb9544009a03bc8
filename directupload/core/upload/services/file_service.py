"""
Local file services.

Single Responsibility: Each class handles one specific task.
- LocalFileCollector expands local paths into upload tasks
- AsyncFileReader reads byte ranges without blocking the event loop
- FileRangeBody / BufferRangeBody are lazily bound part bodies, streamed
  by the transport
"""
import json
from pathlib import Path
from typing import Any, AsyncIterator, Iterable, List, Optional, Union

import aiofiles

from ..models import UploadTask
from ...exceptions import UnsupportedSourceError, UploadError
from ...logging import get_logger

STREAM_BLOCK_SIZE = 64 * 1024


class AsyncFileReader:
    """
    Asynchronous file reader for range-based reading.

    Uses aiofiles for non-blocking I/O operations. Every call opens its own
    handle, so concurrent reads of disjoint ranges need no locking.
    """

    def __init__(self):
        self._logger = get_logger('directupload.upload.file')

    async def read_chunk(
        self,
        file_path: Union[str, Path],
        start: int,
        end: int
    ) -> bytes:
        """
        Read a byte range from a file.

        Args:
            file_path: Path to the file
            start: Start position in bytes
            end: End position in bytes (exclusive)

        Returns:
            Chunk data

        Raises:
            OSError: If the file cannot be read
            UploadError: If the file is shorter than the requested range
        """
        size = end - start
        async with aiofiles.open(file_path, 'rb') as f:
            await f.seek(start)
            data = await f.read(size)

        if len(data) != size:
            raise UploadError(
                f"Short read from {file_path}: expected {size} bytes at {start}, got {len(data)}"
            )
        self._logger.debug(f"Read chunk: {start}-{end} ({len(data)} bytes)")
        return data

    async def iter_range(
        self,
        file_path: Union[str, Path],
        start: int,
        end: int,
        block_size: int = STREAM_BLOCK_SIZE
    ) -> AsyncIterator[bytes]:
        """
        Yield a byte range of a file in blocks of at most block_size bytes.

        Raises:
            OSError: If the file cannot be read
            UploadError: If the file ends before the range does
        """
        remaining = end - start
        async with aiofiles.open(file_path, 'rb') as f:
            await f.seek(start)
            while remaining > 0:
                block = await f.read(min(block_size, remaining))
                if not block:
                    raise UploadError(
                        f"Short read from {file_path}: {remaining} bytes missing before {end}"
                    )
                remaining -= len(block)
                yield block


class FileRangeBody:
    """
    Part body read from a file on disk when the part is sent.

    The transport consumes stream() while writing the request, so a part is
    only read once its request holds a connection, one block at a time.
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        start: int,
        end: int,
        reader: Optional[AsyncFileReader] = None
    ):
        self.file_path = file_path
        self.start = start
        self.end = end
        self._reader = reader or AsyncFileReader()

    def stream(self) -> AsyncIterator[bytes]:
        return self._reader.iter_range(self.file_path, self.start, self.end)

    async def read(self) -> bytes:
        return await self._reader.read_chunk(self.file_path, self.start, self.end)


class BufferRangeBody:
    """Part body sliced from an in-memory byte source when the part is sent."""

    def __init__(self, blob: Any, start: int, end: int):
        self.blob = blob
        self.start = start
        self.end = end

    async def read(self) -> bytes:
        if isinstance(self.blob, (bytes, bytearray, memoryview)):
            return bytes(memoryview(self.blob)[self.start:self.end])
        if hasattr(self.blob, 'slice'):
            return bytes(self.blob.slice(self.start, self.end))
        return bytes(self.blob[self.start:self.end])

    async def stream(self) -> AsyncIterator[bytes]:
        yield await self.read()


def is_sliceable(blob: Any) -> bool:
    """True for byte buffers and objects exposing slice() or __getitem__."""
    if blob is None or isinstance(blob, str):
        return False
    if isinstance(blob, (bytes, bytearray, memoryview)):
        return True
    return callable(getattr(blob, 'slice', None)) or hasattr(blob, '__getitem__')


def bind_part_body(
    task: UploadTask,
    start: int,
    end: int,
    reader: Optional[AsyncFileReader] = None
):
    """
    Create the body of one part of an upload task.

    Args:
        task: Task providing a file path or blob
        start: Start position in bytes
        end: End position in bytes (exclusive)
        reader: Optional shared file reader

    Returns:
        FileRangeBody or BufferRangeBody

    Raises:
        UnsupportedSourceError: If the task has neither a path nor a sliceable blob
    """
    if task.file_path:
        return FileRangeBody(task.file_path, start, end, reader)
    if is_sliceable(task.blob):
        return BufferRangeBody(task.blob, start, end)
    raise UnsupportedSourceError(task.file_name)


class LocalFileCollector:
    """
    Expands local paths into upload tasks.

    Files are taken as-is. Directories contribute the regular, non-hidden
    files directly beneath them. Missing paths are skipped with a warning.
    """

    def __init__(self):
        self._logger = get_logger('directupload.upload.collector')

    def collect(self, paths: Iterable[Union[str, Path]]) -> List[UploadTask]:
        """
        Build upload tasks for local paths.

        Args:
            paths: Local file or directory paths

        Returns:
            Flat list of upload tasks
        """
        tasks: List[UploadTask] = []

        for item in paths:
            path = Path(item)
            if not path.exists():
                self._logger.warning(f"The specified '{item}' doesn't exist")
                continue

            if path.is_file():
                tasks.append(self._to_task(path))
            elif path.is_dir():
                for child in sorted(path.iterdir()):
                    if not child.is_file():
                        self._logger.debug(f"Skip non file: {child.name}")
                    elif child.name.startswith('.'):
                        self._logger.debug(f"Skip hidden file: {child.name}")
                    else:
                        tasks.append(self._to_task(child))

        self._logger.info(
            "Local files for uploading: "
            + json.dumps([
                {'fileName': t.file_name, 'filePath': str(t.file_path), 'fileSize': t.file_size}
                for t in tasks
            ], indent=4)
        )
        return tasks

    def _to_task(self, path: Path) -> UploadTask:
        return UploadTask(
            file_name=path.name,
            file_size=path.stat().st_size,
            file_path=path,
        )
