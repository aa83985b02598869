"""Deterministic parallel helpers for replicate and fold workloads."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TypeVar

from joblib import Parallel, cpu_count, delayed

T = TypeVar("T")
R = TypeVar("R")

LOGGER_NAME = "ordensity"


def resolve_n_jobs(nprocs: int) -> int:
    """Map a requested worker count to a positive one (`<= 0` means all processors)."""
    n = int(nprocs)
    if n <= 0:
        return max(1, int(cpu_count()))
    return n


def _call_indexed(func: Callable[[T], R], indexed: tuple[int, T]) -> tuple[int, R]:
    idx, item = indexed
    return idx, func(item)


def parallel_map(
    func: Callable[[T], R],
    items: Iterable[T],
    *,
    n_jobs: int = 1,
    backend: str = "loky",
    batch_size: int | str = "auto",
    logger: logging.Logger | None = None,
) -> list[R]:
    """Apply `func` to items with deterministic, order-stable aggregation.

    Notes:
    - `func` must be picklable (module-level function or `functools.partial`)
      for process backends.
    - Output order is always aligned to input order, independent of scheduling.
    """
    log = logger or logging.getLogger(LOGGER_NAME)
    seq = list(items)
    if not seq:
        return []

    jobs = min(resolve_n_jobs(n_jobs), len(seq))
    if jobs == 1:
        log.debug("parallel_map serial execution: n_items=%d", len(seq))
        return [func(item) for item in seq]

    log.debug(
        "parallel_map n_items=%d n_jobs=%d backend=%s batch_size=%s",
        len(seq),
        jobs,
        backend,
        batch_size,
    )
    rows = Parallel(n_jobs=jobs, backend=backend, batch_size=batch_size)(
        delayed(_call_indexed)(func, pair) for pair in enumerate(seq)
    )
    rows.sort(key=lambda x: x[0])
    return [row for _, row in rows]
