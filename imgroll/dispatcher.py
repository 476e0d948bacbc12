"""
ParallelDispatcher - Fork-join over independent encoder tasks.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, TypeVar

T = TypeVar('T')


class ParallelDispatcher:
    """
    Runs CPU-bound tasks on a bounded thread pool and joins them.

    Pillow and libwebp release the GIL while resizing and encoding, so
    threads give real parallelism here. The join waits for every task,
    then raises the first failure in submission order; results of the
    other tasks are discarded. Running tasks are never cancelled.
    """

    def __init__(self, max_workers: int = 4, logger: Optional[logging.Logger] = None):
        """
        Initialize dispatcher.

        Args:
            max_workers: Upper bound on worker threads
            logger: Optional logger instance
        """
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger(__name__)

    def run(self, tasks: Sequence[Callable[[], T]]) -> List[T]:
        """
        Run all tasks and return their results in submission order.

        Raises:
            Exception: The first (in submission order) exception raised by a task
        """
        if not tasks:
            return []

        workers = min(self.max_workers, len(tasks))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix='imgroll-encode') as executor:
            futures = [executor.submit(task) for task in tasks]
            wait(futures)

        failures = [f.exception() for f in futures if f.exception() is not None]
        if failures:
            self.logger.error(
                f"{len(failures)} of {len(tasks)} tasks failed; first: {failures[0]}"
            )
            raise failures[0]

        return [f.result() for f in futures]
