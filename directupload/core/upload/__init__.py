"""
Upload module for direct binary uploads.

This module provides a clean interface for uploading files with the
initiate / transfer / complete protocol, with pluggable strategies for
part planning and execution.
"""
from .facade import FileSystemUpload
from .coordinator import DirectBinaryUpload
from .models import (
    UploadTask,
    InitiatedFile,
    InitiateResult,
    Chunk,
    ChunkResult,
    FileUploadResult,
    BatchResult,
    UploadOptions,
    UploadContext
)
from .strategies import (
    DirectBinaryChunkingStrategy,
    ExecutionStrategy,
    ConcurrentExecution,
    SerialExecution,
    create_execution_strategy
)
from .protocols import ChunkingStrategy, HttpTransportProtocol, PartBodyProtocol

__all__ = [
    # Main classes
    'FileSystemUpload',
    'DirectBinaryUpload',

    # Models
    'UploadTask',
    'InitiatedFile',
    'InitiateResult',
    'Chunk',
    'ChunkResult',
    'FileUploadResult',
    'BatchResult',
    'UploadOptions',
    'UploadContext',

    # Strategies
    'DirectBinaryChunkingStrategy',
    'ExecutionStrategy',
    'ConcurrentExecution',
    'SerialExecution',
    'create_execution_strategy',

    # Protocols
    'ChunkingStrategy',
    'HttpTransportProtocol',
    'PartBodyProtocol',
]
