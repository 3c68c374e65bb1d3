"""Light parallelism over independent keys.

Batches fan out over a thread pool. Items in one batch must be independent:
no two items may write the same workspace name, which is what lets workers
run without locks.
"""

import os
import sys
from collections.abc import Callable, Hashable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, TypeVar

from revive.log import logger

logger = logger.getChild(__name__)

T = TypeVar("T")
R = TypeVar("R")


def supports_fork() -> bool:
    """Check if this platform offers fork-based concurrency."""
    return os.name != "nt" and not sys.platform.startswith("win")


def safe_jobs(jobs: int | None) -> int:
    """Clamp a requested worker count to what the platform supports.

    Platforms without fork (Windows) always get one worker.
    """
    jobs = max(1, int(jobs or 1))
    if jobs > 1 and not supports_fork():
        logger.debug("demoting jobs from %d to 1: no fork support", jobs)
        return 1
    return jobs


def lightly_parallelize(
    items: Iterable[T],
    fn: Callable[[T], R],
    jobs: int | None = 1,
) -> list[R]:
    """Map ``fn`` over ``items`` with up to ``jobs`` workers.

    Results are aligned with the input order. The first exception raised by
    ``fn`` propagates once the pool has drained.
    """
    items = list(items)
    jobs = safe_jobs(jobs)
    if jobs == 1 or len(items) < 2:
        return [fn(item) for item in items]

    with ThreadPoolExecutor(max_workers=min(jobs, len(items))) as executor:
        return list(executor.map(fn, items))


def parallel_filter(
    items: Iterable[T],
    predicate: Callable[[T], bool],
    jobs: int | None = 1,
) -> list[T]:
    """Keep the items for which ``predicate`` holds, preserving input order."""
    items = list(items)
    keep = lightly_parallelize(items, predicate, jobs=jobs)
    return [item for item, ok in zip(items, keep) if ok]


@dataclass
class BatchResult:
    """Outcome of running a function over a batch of items.

    Attributes:
        succeeded: Items whose call returned normally
        errors: Exception raised for each failed item
    """

    succeeded: list[Hashable] = field(default_factory=list)
    errors: dict[Hashable, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __len__(self) -> int:
        return len(self.succeeded) + len(self.errors)


def run_batch(
    items: Iterable[Hashable],
    fn: Callable[[Any], Any],
    jobs: int | None = 1,
) -> BatchResult:
    """Call ``fn`` once per item, isolating failures.

    Every item is attempted exactly once. An exception from one item is
    recorded and never stops its siblings. Completion order is unspecified,
    so ``succeeded`` is not ordered.
    """
    items = list(items)
    jobs = safe_jobs(jobs)
    result = BatchResult()

    if jobs == 1 or len(items) < 2:
        for item in items:
            try:
                fn(item)
            except Exception as e:  # noqa: BLE001
                result.errors[item] = e
            else:
                result.succeeded.append(item)
        return result

    with ThreadPoolExecutor(max_workers=min(jobs, len(items))) as executor:
        futures = {executor.submit(fn, item): item for item in items}
        for future in as_completed(futures):
            item = futures[future]
            try:
                future.result()
            except Exception as e:  # noqa: BLE001
                result.errors[item] = e
            else:
                result.succeeded.append(item)

    return result
