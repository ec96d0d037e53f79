"""Bounded worker pool for per-file jobs."""

import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Generator, List, TypeVar
from tqdm import tqdm

logger = logging.getLogger(__name__)

FILES_PER_WORKER = 100

R = TypeVar('R')


def effective_workers(requested: int, total_files: int, cpu_count: int) -> int:
    """
    Clamp the requested worker count for a run.

    The pool never exceeds one worker per ``FILES_PER_WORKER`` files or
    twice the number of processing units, and never drops below one.

    Args:
        requested: Configured worker count
        total_files: Number of files in the run
        cpu_count: Available processing units

    Returns:
        Number of workers to start
    """
    per_files_cap = math.ceil(total_files / FILES_PER_WORKER)
    return max(1, min(requested, per_files_cap, 2 * cpu_count))


class WorkerPool:
    """Runs one job per path on a fixed number of threads."""

    def __init__(self, workers: int, show_progress: bool = False):
        self.workers = max(1, workers)
        self.show_progress = show_progress

    def run(
        self,
        paths: List[Path],
        job: Callable[[Path], R],
        on_error: Callable[[Path, Exception], R],
    ) -> Generator[R, None, None]:
        """
        Execute ``job`` for every path and yield results as they complete.

        Results arrive in completion order, not input order. An exception
        escaping ``job`` is turned into a result by ``on_error`` so every
        path yields exactly one result.

        Args:
            paths: Files to process
            job: Per-file pipeline
            on_error: Builds a failure result from a path and exception

        Yields:
            One result per path
        """
        if not paths:
            return

        logger.debug(f"Starting pool with {self.workers} workers for {len(paths)} files")

        with tqdm(total=len(paths), desc="Processing", unit="files",
                  disable=not self.show_progress) as pbar:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                future_to_path = {executor.submit(job, path): path for path in paths}

                for future in as_completed(future_to_path):
                    path = future_to_path[future]
                    try:
                        result = future.result()
                    except Exception as e:
                        logger.error(f"Exception processing {path}: {e}")
                        result = on_error(path, e)

                    pbar.update(1)
                    yield result
