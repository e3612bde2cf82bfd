"""
Bounded worker pool that processes jobs in fixed-size chunks.
"""
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Sequence, TypeVar

from dataset_augmentor.config import SETTINGS
from dataset_augmentor.execution.progress import ProgressReporter

T = TypeVar("T")


def default_worker_count() -> int:
    """Available hardware parallelism minus the reserved CPUs, at least 1."""
    return max(1, (os.cpu_count() or 1) - SETTINGS.EXECUTION.RESERVED_CPUS)


def chunked(items: Sequence[T], size: int) -> List[List[T]]:
    """Splits `items` into consecutive chunks of at most `size` elements."""
    if size < 1:
        raise ValueError(f"Chunk size must be a positive integer, got {size}.")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class ParallelExecutor:
    """
    Runs a job function over every job on a thread pool.

    Each worker takes a whole chunk, processes its jobs sequentially and reports
    the chunk size to the progress reporter once the chunk is done. The job
    function must handle its own per-job errors; anything that escapes it
    fails the run.
    """

    def __init__(self, workers: int | None = None, chunk_size: int = SETTINGS.EXECUTION.CHUNK_SIZE):
        self.workers = workers if workers is not None else default_worker_count()
        if self.workers < 1:
            raise ValueError(f"Worker count must be at least 1, got {self.workers}.")
        self.chunk_size = chunk_size

    def execute(self, jobs: Sequence[T], job_fn: Callable[[T], None], reporter: ProgressReporter) -> None:
        chunks = chunked(jobs, self.chunk_size)
        if not chunks:
            return

        # DEV: Пул живет ровно столько, сколько один запуск.
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="augment-worker") as pool:
            futures = [pool.submit(self._process_chunk, chunk, job_fn, reporter) for chunk in chunks]
            for future in as_completed(futures):
                future.result()

    @staticmethod
    def _process_chunk(chunk: List[T], job_fn: Callable[[T], None], reporter: ProgressReporter) -> None:
        for job in chunk:
            job_fn(job)
        # One update per chunk, not per file
        reporter.add(len(chunk))
