"""
Batch result aggregation.

Reduces per-file results to a single BatchResult.
"""
import json
import time
from typing import Optional, Sequence

from ..models import BatchResult, FileUploadResult
from ...logging import get_logger
from ...utils import round_half_up

NINETY_PERCENTILE = 0.9


class ResultAggregator:
    """
    Builds the summary of an upload run.

    Statistics only consider successful files. When none succeeded, only the
    counts and the total elapsed time are populated.
    """

    def __init__(self, logger=None):
        self._logger = logger or get_logger('directupload.upload.result')

    def aggregate(
        self,
        init_spent: int,
        total_file_count: int,
        start_time: float,
        file_results: Sequence[FileUploadResult],
        end_time: Optional[float] = None
    ) -> BatchResult:
        """
        Aggregate per-file results.

        Args:
            init_spent: Latency of the initiate call (ms)
            total_file_count: Number of files in the batch
            start_time: time.monotonic() reading taken when the run started
            file_results: Per-file results in batch order
            end_time: Optional time.monotonic() reading for the end of the run

        Returns:
            BatchResult for the run
        """
        end = time.monotonic() if end_time is None else end_time
        final_spent = round_half_up((end - start_time) * 1000)

        succeeded = [item for item in file_results if item.success]
        completed = len(succeeded)

        stats = {}
        if completed:
            total_file_size = sum(item.file_size for item in succeeded)
            stats = {
                'total_file_size': total_file_size,
                'avg_file_size': round_half_up(total_file_size / completed),
                'avg_put_spent': round_half_up(
                    sum(item.put_spent_final for item in succeeded) / completed
                ),
                'avg_complete_spent': round_half_up(
                    sum(item.complete_spent for item in succeeded) / completed
                ),
                'ninety_percentile_total': self.percentile(
                    [item.total_spent for item in succeeded], NINETY_PERCENTILE
                ),
            }

        result = BatchResult(
            init_spent=init_spent,
            total_files=total_file_count,
            total_completed=completed,
            final_spent=final_spent,
            detailed_result=tuple(file_results),
            **stats
        )

        self._logger.info('Uploading result in JSON: ' + json.dumps(result.to_dict(), indent=4))
        return result

    @staticmethod
    def percentile(values: Sequence[int], fraction: float) -> int:
        """
        Nearest-rank percentile on the ascending-sorted values.

        Example:
            >>> ResultAggregator.percentile([10, 20, 30, 40, 50], 0.9)
            50
        """
        ordered = sorted(values)
        index = round_half_up(len(ordered) * fraction) - 1
        return ordered[max(index, 0)]
