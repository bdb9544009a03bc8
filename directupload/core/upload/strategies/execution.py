"""
Execution strategies for upload workers.

A strategy runs one async worker per item and returns the results in input
order. The same strategy drives files within a batch and parts within a
file. Failure is all-or-nothing: the first worker error fails the run.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from ..protocols import Worker


class ExecutionStrategy(ABC):
    """Abstract base class for execution strategies."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name used in log lines."""
        pass

    @abstractmethod
    async def run(self, items: Sequence[Any], worker: Worker) -> List[Any]:
        """
        Run worker(item, index) for every item.

        Args:
            items: Items to process
            worker: Async callable receiving the item and its index

        Returns:
            Worker results, same length and order as items
        """
        pass


class ConcurrentExecution(ExecutionStrategy):
    """
    Dispatches every worker without waiting for earlier ones.

    Results land in index-aligned slots, so completion order never affects
    result order. When a worker fails the remaining in-flight workers are
    cancelled before the error propagates.
    """

    def __init__(self, max_concurrency: Optional[int] = None):
        """
        Args:
            max_concurrency: Optional cap on in-flight workers (None for no cap)
        """
        if max_concurrency is not None and max_concurrency <= 0:
            raise ValueError("max_concurrency must be positive")
        self.max_concurrency = max_concurrency

    @property
    def name(self) -> str:
        return 'concurrent'

    async def run(self, items: Sequence[Any], worker: Worker) -> List[Any]:
        if not items:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def guarded(item, index):
            if semaphore is None:
                return await worker(item, index)
            async with semaphore:
                return await worker(item, index)

        tasks = [
            asyncio.ensure_future(guarded(item, index))
            for index, item in enumerate(items)
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            # Drain cancelled tasks so none is left pending
            await asyncio.gather(*tasks, return_exceptions=True)
            raise


class SerialExecution(ExecutionStrategy):
    """Awaits each worker before starting the next."""

    @property
    def name(self) -> str:
        return 'serial'

    async def run(self, items: Sequence[Any], worker: Worker) -> List[Any]:
        results = []
        for index, item in enumerate(items):
            results.append(await worker(item, index))
        return results


def create_execution_strategy(
    concurrent: bool = True,
    max_concurrency: Optional[int] = None
) -> ExecutionStrategy:
    """Select the execution strategy from configuration."""
    if concurrent:
        return ConcurrentExecution(max_concurrency)
    return SerialExecution()
