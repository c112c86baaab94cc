"""Bounded thread pool helpers that keep results in submission order."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def map_ordered(func: Callable[[T], R], items: Iterable[T], workers: int = 1) -> List[R]:
    """Apply ``func`` to ``items`` on at most ``workers`` threads.

    Results come back in the order of ``items`` regardless of completion
    order. The first exception raised by a worker propagates once every
    submitted call has finished.
    """

    items = list(items)
    if workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=min(workers, len(items))) as executor:
        futures = [executor.submit(func, item) for item in items]
        return [future.result() for future in futures]
