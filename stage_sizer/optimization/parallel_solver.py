"""Thread-pool evaluation of independent work items."""
import concurrent.futures
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

import psutil

from ..utils.config import logger

T = TypeVar('T')
R = TypeVar('R')


class ParallelSolver:
    """Runs independent work items on a thread pool and collects their results."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize parallel solver.

        Args:
            config: Configuration dictionary with keys:
                - max_workers: Maximum number of worker threads (default: CPU count)
                - show_progress: Log percentage completion (default: False)
        """
        config = config or {}
        self.max_workers = config.get('max_workers') or psutil.cpu_count() or 1
        self.show_progress = config.get('show_progress', False)

    def map(self, func: Callable[[T], R], items: Iterable[T], label: str = "work items") -> List[R]:
        """Apply ``func`` to every item.

        Results come back in item order whatever order the workers finish
        in. An exception raised by ``func`` propagates to the caller.
        """
        items = list(items)
        results: List[Any] = [None] * len(items)
        if not items:
            return results

        start_time = time.time()
        tracker = _ProgressTracker(len(items), label, self.show_progress)

        if self.max_workers == 1 or len(items) == 1:
            for index, item in enumerate(items):
                results[index] = func(item)
                tracker.tick()
        else:
            workers = min(self.max_workers, len(items))
            with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                future_to_index = {
                    executor.submit(func, item): index for index, item in enumerate(items)
                }
                for future in concurrent.futures.as_completed(future_to_index):
                    results[future_to_index[future]] = future.result()
                    tracker.tick()

        logger.debug(f"Evaluated {len(items)} {label} in {time.time() - start_time:.2f}s")
        return results


def reduce_best(candidates: Iterable[Optional[T]], key: Callable[[T], float]) -> Optional[T]:
    """Fold candidates to the one with the smallest ``key``, skipping None.

    Ties keep the earliest candidate so the result does not depend on
    worker scheduling.
    """
    best = None
    best_key = float('inf')
    for candidate in candidates:
        if candidate is None:
            continue
        value = key(candidate)
        if best is None or value < best_key:
            best = candidate
            best_key = value
    return best


class _ProgressTracker:
    """Logs completion in 10% increments."""

    def __init__(self, total: int, label: str, enabled: bool):
        self.total = total
        self.label = label
        self.enabled = enabled
        self.done = 0
        self.next_report = 10

    def tick(self):
        self.done += 1
        if not self.enabled:
            return
        percent = self.done * 100 // self.total
        if percent >= self.next_report:
            logger.info(f"Progress: {percent}% of {self.total} {self.label}")
            self.next_report = (percent // 10 + 1) * 10
