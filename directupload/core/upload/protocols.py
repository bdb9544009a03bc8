"""
Protocol definitions for upload module.

Defines interfaces (protocols) for dependency injection and strategy pattern.
"""
from typing import Protocol, Any, AsyncIterator, Awaitable, Callable, List, Mapping, Optional, Sequence, TypeVar

from .models import Chunk

T = TypeVar('T')
R = TypeVar('R')

Worker = Callable[[T, int], Awaitable[R]]


class HttpTransportProtocol(Protocol):
    """
    Protocol for the HTTP transport.

    Implementations return an object with status, data and elapsed_time
    attributes, and raise TransportError on failure. A data object with a
    stream() method is a part body, streamed while the request is written.
    """

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        data: Any = None,
        response_type: Optional[str] = None
    ) -> Any:
        ...


class ChunkingStrategy(Protocol):
    """
    Protocol for part planning strategies.

    Allows different chunking algorithms to be plugged in.
    """

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
            Ordered list of chunks without bodies
        """
        ...


class PartBodyProtocol(Protocol):
    """
    Protocol for lazily bound part bodies.

    Transports send a body by consuming a fresh stream() per attempt.
    """

    def stream(self) -> AsyncIterator[bytes]:
        """Yield the bytes of the part in blocks."""
        ...

    async def read(self) -> bytes:
        """Read the bytes of the part."""
        ...

