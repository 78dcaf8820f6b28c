"""Fan independent simulation runs out over an executor.

Runs share nothing but the immutable readings and their own parameter
copies, so they can go to threads or processes freely.  Results come back
in submission order whatever order the workers finish in.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from typing import Callable, Iterable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

CONCURRENCY_MODES: tuple[str, ...] = ("process", "thread", "serial")


def map_runs(
    fn: Callable[[T], R],
    items: Iterable[T],
    concurrency: str = "process",
    max_workers: int | None = None,
) -> list[R]:
    """Apply *fn* to every item, optionally in parallel.

    Parameters
    ----------
    fn : callable
        Worker function.  Must be a module-level function when
        *concurrency* is ``"process"`` so it can be pickled.
    items : iterable
        Work items, also picklable for process pools.
    concurrency : str
        ``"process"``, ``"thread"`` or ``"serial"``.
    max_workers : int or None
        Pool size; ``None`` uses the executor default.

    Returns
    -------
    list
        ``fn(item)`` for each item, in input order.
    """
    if concurrency not in CONCURRENCY_MODES:
        raise ValueError(
            f"concurrency must be one of {list(CONCURRENCY_MODES)}, got '{concurrency}'"
        )

    work = list(items)
    if concurrency == "serial" or len(work) <= 1:
        return [fn(item) for item in work]

    executor_cls = ThreadPoolExecutor if concurrency == "thread" else ProcessPoolExecutor
    logger.debug("Dispatching %d runs to %s", len(work), executor_cls.__name__)
    with executor_cls(max_workers=max_workers) as executor:
        return list(executor.map(fn, work))
