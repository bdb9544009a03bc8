"""
Part transfer service.

Handles PUTting a single part to its storage URL.
"""
from typing import Optional

from ..models import Chunk, ChunkResult, UploadContext
from ..protocols import HttpTransportProtocol
from ...exceptions import UploadError


class PartTransmitter:
    """
    Sends one chunk to its upload URL.

    Responsibilities:
    - Hand the chunk's lazily bound body to the transport, which streams it
      once the request holds a connection
    - PUT with an explicit Content-Length when configured
    - Report the latency of the transfer
    """

    def __init__(self, transport: HttpTransportProtocol, context: UploadContext):
        """
        Initialize part transmitter.

        Args:
            transport: HTTP transport shared by the run
            context: Options and logger of the run
        """
        self._transport = transport
        self._context = context
        self._logger = context.logger.getChild('part')

    async def send(self, chunk: Chunk, index: Optional[int] = None) -> ChunkResult:
        """
        Upload a single chunk.

        Args:
            chunk: Chunk with a bound body
            index: Position in the file's chunk list (unused, worker signature)

        Returns:
            ChunkResult with the measured latency

        Raises:
            UploadError: If the chunk has no body
            TransportError: If the PUT fails or returns an error status
        """
        if chunk.body is None:
            raise UploadError(
                f"Part {chunk.part_index} of '{chunk.file_name}' has no body bound"
            )

        headers = None
        if self._context.options.add_content_length_header:
            headers = {'Content-Length': str(chunk.part_size)}

        response = await self._transport.request(
            'PUT',
            chunk.upload_url,
            headers=headers,
            data=chunk.body
        )

        self._logger.info(
            f"Put upload part done for file: '{chunk.file_name}', partIndex: '{chunk.part_index}', "
            f"partSize: '{chunk.part_size}', spent: '{response.elapsed_time}' ms, "
            f"status: {response.status}"
        )

        return ChunkResult(
            chunk=chunk,
            put_spent=response.elapsed_time,
            status=response.status
        )
