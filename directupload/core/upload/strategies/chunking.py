"""
Chunking strategies for direct binary uploads.

Implements Strategy Pattern for part planning.
Open for extension (new strategies), closed for modification.
"""
from abc import ABC, abstractmethod
from typing import List, Sequence

from ..models import Chunk
from ...exceptions import TooManyPartsError, PartCountMismatchError
from ...logging import get_logger
from ...utils import ceil_div


class BaseChunkingStrategy(ABC):
    """Abstract base class for chunking strategies."""

    @abstractmethod
    def plan(
        self,
        upload_uris: Sequence[str],
        file_size: int,
        min_part_size: int,
        max_part_size: int,
        file_name: str = ''
    ) -> List[Chunk]:
        """Calculate part boundaries."""
        pass


class DirectBinaryChunkingStrategy(BaseChunkingStrategy):
    """
    Splits a file evenly over the part URLs allocated by the server.

    The part size is ceil(file_size / len(upload_uris)), raised to the
    server's minimum part size when smaller. Files below the minimum part
    size are sent as a single part. The planner holds no state, so
    identical inputs always produce identical chunk lists.

    Example:
        >>> strategy = DirectBinaryChunkingStrategy()
        >>> [c.byte_range for c in strategy.plan(['u0', 'u1'], 10, 1, 0)]
        [(0, 5), (5, 10)]
    """

    def __init__(self, logger=None):
        self._logger = logger or get_logger('directupload.upload.chunking')

    def plan(
        self,
        upload_uris: Sequence[str],
        file_size: int,
        min_part_size: int,
        max_part_size: int,
        file_name: str = ''
    ) -> List[Chunk]:
        """
        Calculate the parts of a file.

        Args:
            upload_uris: Part URLs allocated by the server
            file_size: Total file size in bytes
            min_part_size: Minimum part size in bytes
            max_part_size: Maximum part size in bytes (0 when unbounded)
            file_name: File name recorded on each chunk

        Returns:
            Contiguous chunks covering exactly [0, file_size)

        Raises:
            TooManyPartsError: If max_part_size needs more parts than URLs
            PartCountMismatchError: If a file below min_part_size has
                more than one URL, or no URL was allocated
        """
        url_count = len(upload_uris)
        if max_part_size > 0:
            required_parts = ceil_div(file_size, max_part_size)
            if required_parts > url_count:
                raise TooManyPartsError(required_parts, url_count)

        if url_count == 0:
            raise PartCountMismatchError(file_size, min_part_size, url_count)

        part_size = self._part_size(url_count, file_size, min_part_size)
        self._logger.debug(f"Multipart upload part size for file '{file_name}' is {part_size}")

        # Empty files still send their single declared part
        if file_size == 0:
            return [Chunk(file_name, 0, 0, 0, upload_uris[0])]

        chunks = []
        for index, upload_url in enumerate(upload_uris):
            start = index * part_size
            end = min(start + part_size, file_size)
            self._logger.debug(
                f"Generate uploading part for file '{file_name}', index: '{index}', "
                f"file range: '{start} - {end}'"
            )
            chunks.append(Chunk(file_name, index, start, end, upload_url))
            if end == file_size:
                break

        return chunks

    def _part_size(self, url_count: int, file_size: int, min_part_size: int) -> int:
        if file_size < min_part_size:
            if url_count != 1:
                raise PartCountMismatchError(file_size, min_part_size, url_count)
            return file_size

        part_size = ceil_div(file_size, url_count)
        if part_size < min_part_size:
            self._logger.debug(
                f"Calculated part size {part_size} is less than min part size "
                f"{min_part_size}, so set the part size to min part size"
            )
            part_size = min_part_size
        return part_size
