"""Upload models."""
from .upload_models import (
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

__all__ = [
    'UploadTask',
    'InitiatedFile',
    'InitiateResult',
    'Chunk',
    'ChunkResult',
    'FileUploadResult',
    'BatchResult',
    'UploadOptions',
    'UploadContext'
]
