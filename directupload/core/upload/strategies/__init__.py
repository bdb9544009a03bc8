"""Upload strategies module."""
from .chunking import BaseChunkingStrategy, DirectBinaryChunkingStrategy
from .execution import (
    ExecutionStrategy,
    ConcurrentExecution,
    SerialExecution,
    create_execution_strategy
)

__all__ = [
    'BaseChunkingStrategy',
    'DirectBinaryChunkingStrategy',
    'ExecutionStrategy',
    'ConcurrentExecution',
    'SerialExecution',
    'create_execution_strategy',
]
