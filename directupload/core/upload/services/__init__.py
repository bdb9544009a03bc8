"""Upload services module."""
from .file_service import (
    AsyncFileReader,
    FileRangeBody,
    BufferRangeBody,
    LocalFileCollector,
    bind_part_body
)
from .part_service import PartTransmitter
from .file_processor import FileProcessor
from .result_service import ResultAggregator
from .folder_service import FolderCreator

__all__ = [
    'AsyncFileReader',
    'FileRangeBody',
    'BufferRangeBody',
    'LocalFileCollector',
    'bind_part_body',
    'PartTransmitter',
    'FileProcessor',
    'ResultAggregator',
    'FolderCreator',
]
