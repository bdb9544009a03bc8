"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures. Each stage of an
upload run builds a new value (Chunk -> ChunkResult -> FileUploadResult ->
BatchResult) instead of mutating a shared one.
"""
import logging
from dataclasses import dataclass, field, replace, asdict
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlparse

from ...exceptions import UploadError
from ...logging import get_logger
from ...utils import format_size


@dataclass(frozen=True)
class UploadTask:
    """
    A local file (or in-memory buffer) to upload.

    Attributes:
        file_name: Name of the file in the target folder
        file_size: Size of the file in bytes
        file_path: Path of the file on disk
        blob: In-memory byte source supporting range slicing

    Example:
        >>> UploadTask("a.txt", 5, blob=b"hello").source
        b'hello'
    """
    file_name: str
    file_size: int
    file_path: Optional[Union[str, Path]] = None
    blob: Any = None

    @property
    def source(self) -> Any:
        """Returns the file path if set, otherwise the blob."""
        return self.file_path if self.file_path else self.blob

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'UploadTask':
        """Create from a dict using either camelCase or snake_case keys."""
        return cls(
            file_name=data.get('fileName', data.get('file_name', '')),
            file_size=int(data.get('fileSize', data.get('file_size', 0))),
            file_path=data.get('filePath', data.get('file_path')),
            blob=data.get('blob'),
        )


@dataclass(frozen=True)
class InitiatedFile:
    """
    Server-issued upload descriptor for one file.

    Attributes:
        file_name: File name echoed by the server
        mime_type: MIME type detected by the server
        upload_token: Token passed back on completion
        upload_uris: Part URLs; its length is the maximum number of parts
        min_part_size: Minimum part size in bytes
        max_part_size: Maximum part size in bytes (0 when unbounded)
    """
    file_name: str
    mime_type: str
    upload_token: str
    upload_uris: Tuple[str, ...]
    min_part_size: int = 0
    max_part_size: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'InitiatedFile':
        """
        Create from the initiate response's camelCase JSON.

        Raises:
            UploadError: If the entry carries no upload token
        """
        if not data.get('uploadToken'):
            raise UploadError(
                f"Initiate response has no upload token for '{data.get('fileName', '')}'"
            )
        return cls(
            file_name=data.get('fileName', ''),
            mime_type=data.get('mimeType', ''),
            upload_token=data['uploadToken'],
            upload_uris=tuple(data.get('uploadURIs') or ()),
            min_part_size=int(data.get('minPartSize') or 0),
            max_part_size=int(data.get('maxPartSize') or 0),
        )


@dataclass(frozen=True)
class InitiateResult:
    """
    Parsed response of the initiate call.

    Attributes:
        files: Initiated files, in request order
        complete_uri: Completion endpoint shared by the whole folder
        elapsed_time: Latency of the initiate call in milliseconds
        status: HTTP status code
    """
    files: Tuple[InitiatedFile, ...]
    complete_uri: str
    elapsed_time: int = 0
    status: int = 200

    @classmethod
    def from_response(
        cls,
        data: Mapping[str, Any],
        elapsed_time: int = 0,
        status: int = 200
    ) -> 'InitiateResult':
        """
        Create from the decoded JSON body of the initiate call.

        Raises:
            UploadError: If the completion URI or a file's upload token is missing
        """
        complete_uri = data.get('completeURI')
        if not complete_uri:
            raise UploadError("Initiate response has no completeURI")
        files = tuple(InitiatedFile.from_dict(item) for item in data.get('files') or ())
        return cls(
            files=files,
            complete_uri=complete_uri,
            elapsed_time=elapsed_time,
            status=status,
        )


@dataclass(frozen=True)
class Chunk:
    """
    A contiguous byte range of a file, uploaded to its own URL.

    Attributes:
        file_name: Name of the file the chunk belongs to
        part_index: Zero-based part number
        start: Start position in bytes (inclusive)
        end: End position in bytes (exclusive)
        upload_url: URL the part is PUT to
        body: Lazily bound part body (None until bound)
    """
    file_name: str
    part_index: int
    start: int
    end: int
    upload_url: str
    body: Any = field(default=None, compare=False, repr=False)

    @property
    def part_size(self) -> int:
        """Returns chunk size."""
        return self.end - self.start

    @property
    def byte_range(self) -> Tuple[int, int]:
        """Returns (start, end)."""
        return self.start, self.end

    def with_body(self, body: Any) -> 'Chunk':
        """Returns a copy carrying the given body."""
        return replace(self, body=body)


@dataclass(frozen=True)
class ChunkResult:
    """
    Outcome of one part transfer.

    Attributes:
        chunk: The transferred chunk
        put_spent: Transfer latency in milliseconds
        status: HTTP status code of the PUT
    """
    chunk: Chunk
    put_spent: int
    status: int = 200

    @property
    def part_index(self) -> int:
        return self.chunk.part_index

    @property
    def part_size(self) -> int:
        return self.chunk.part_size


@dataclass(frozen=True)
class FileUploadResult:
    """
    Per-file upload record.

    Attributes:
        file_name: File name
        target_path: Path of the file in the repository
        file_size: File size in bytes
        part_size: Size of the first part in bytes
        part_count: Number of parts
        put_spent_final: Wall time of the whole part transfer step (ms)
        put_spent_min: Fastest part transfer (ms)
        put_spent_max: Slowest part transfer (ms)
        put_spent_avg: Rounded average part transfer (ms)
        complete_spent: Latency of the completion call (ms)
        success: True if every phase succeeded
        message: Error message for failed files
    """
    file_name: str
    target_path: str
    file_size: int
    part_size: int = 0
    part_count: int = 0
    put_spent_final: int = 0
    put_spent_min: int = 0
    put_spent_max: int = 0
    put_spent_avg: int = 0
    complete_spent: int = 0
    success: bool = False
    message: str = ''

    @property
    def file_size_str(self) -> str:
        return format_size(self.file_size)

    @property
    def part_size_str(self) -> str:
        return format_size(self.part_size)

    @property
    def total_spent(self) -> int:
        """Transfer wall time plus completion latency."""
        return self.put_spent_final + self.complete_spent

    @classmethod
    def failed(
        cls,
        file_name: str,
        target_path: str,
        file_size: int,
        message: str
    ) -> 'FileUploadResult':
        """Create a record for a file that could not be uploaded."""
        return cls(
            file_name=file_name,
            target_path=target_path,
            file_size=file_size,
            success=False,
            message=message,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        result = asdict(self)
        result['file_size_str'] = self.file_size_str
        result['part_size_str'] = self.part_size_str
        return result


@dataclass(frozen=True)
class BatchResult:
    """
    Aggregate result of an upload run.

    Derived statistics are None when no file succeeded.

    Attributes:
        init_spent: Latency of the initiate call (ms)
        total_files: Number of files in the batch
        total_completed: Number of successfully uploaded files
        final_spent: Wall time of the whole run (ms)
        detailed_result: Per-file results in batch order
        total_file_size: Sum of successful file sizes in bytes
        avg_file_size: Rounded average successful file size in bytes
        avg_put_spent: Rounded average put_spent_final (ms)
        avg_complete_spent: Rounded average complete_spent (ms)
        ninety_percentile_total: 90th percentile of put + complete time (ms)
    """
    init_spent: int
    total_files: int
    total_completed: int
    final_spent: int
    detailed_result: Tuple[FileUploadResult, ...] = ()
    total_file_size: Optional[int] = None
    avg_file_size: Optional[int] = None
    avg_put_spent: Optional[int] = None
    avg_complete_spent: Optional[int] = None
    ninety_percentile_total: Optional[int] = None

    @property
    def total_file_size_str(self) -> Optional[str]:
        if self.total_file_size is None:
            return None
        return format_size(self.total_file_size)

    @property
    def avg_file_size_str(self) -> Optional[str]:
        if self.avg_file_size is None:
            return None
        return format_size(self.avg_file_size)

    @property
    def failed(self) -> List[FileUploadResult]:
        """Returns the unsuccessful file results."""
        return [item for item in self.detailed_result if not item.success]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        result = {
            'init_spent': self.init_spent,
            'total_files': self.total_files,
            'total_completed': self.total_completed,
            'final_spent': self.final_spent,
        }
        if self.total_file_size is not None:
            result.update({
                'total_file_size': self.total_file_size_str,
                'avg_file_size': self.avg_file_size_str,
                'avg_put_spent': self.avg_put_spent,
                'avg_complete_spent': self.avg_complete_spent,
                'ninety_percentile_total': self.ninety_percentile_total,
            })
        result['detailed_result'] = [item.to_dict() for item in self.detailed_result]
        return result


@dataclass(frozen=True)
class UploadOptions:
    """
    Options controlling an upload run.

    Attributes:
        url: Target folder URL in the repository
        headers: Headers sent with the initiate and complete calls
        upload_files: Files to upload
        concurrent: Transfer files and parts concurrently (else serially)
        add_content_length_header: Send an explicit Content-Length per part
        max_concurrency: Optional cap on in-flight workers per level
        continue_on_error: Record failed files instead of aborting the batch
    """
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    upload_files: Tuple[UploadTask, ...] = ()
    concurrent: bool = True
    add_content_length_header: bool = True
    max_concurrency: Optional[int] = None
    continue_on_error: bool = False

    def __post_init__(self):
        """Validate and normalize options."""
        if not self.url:
            raise ValueError("Target URL is required")
        parsed = urlparse(self.url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError(f"Target URL must be an absolute http(s) URL: {self.url}")
        if self.max_concurrency is not None and self.max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")
        object.__setattr__(self, 'upload_files', tuple(self.upload_files))
        object.__setattr__(self, 'headers', dict(self.headers))

    @property
    def target_folder(self) -> str:
        """Repository path of the target folder."""
        return urlparse(self.url).path

    @property
    def url_prefix(self) -> str:
        """Scheme and host of the target URL."""
        parsed = urlparse(self.url)
        return f"{parsed.scheme}://{parsed.netloc}"

    def with_upload_files(self, upload_files: Sequence[UploadTask]) -> 'UploadOptions':
        return replace(self, upload_files=tuple(upload_files))

    def with_headers(self, headers: Mapping[str, str]) -> 'UploadOptions':
        return replace(self, headers=dict(headers))

    def with_concurrent(self, concurrent: bool) -> 'UploadOptions':
        return replace(self, concurrent=concurrent)

    def with_add_content_length_header(self, enabled: bool) -> 'UploadOptions':
        return replace(self, add_content_length_header=enabled)

    def with_max_concurrency(self, max_concurrency: Optional[int]) -> 'UploadOptions':
        return replace(self, max_concurrency=max_concurrency)

    def with_continue_on_error(self, enabled: bool) -> 'UploadOptions':
        return replace(self, continue_on_error=enabled)


@dataclass(frozen=True)
class UploadContext:
    """
    Options and logger handed explicitly to every upload component.

    Attributes:
        options: Options of the current run
        logger: Logger used by the components
    """
    options: UploadOptions
    logger: logging.Logger = field(
        default_factory=lambda: get_logger('directupload.upload')
    )
