from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

from ..core.constants import DEFAULT_WRITE_WORKERS

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_all(tasks: Sequence[Callable[[], T]], *, max_workers: int = DEFAULT_WRITE_WORKERS) -> list[T]:
    """Run independent write operations concurrently and wait for all of them.

    Writes that completed are kept even when others fail. After every task
    settled, the first failure (in submission order) is re-raised.
    """

    if not tasks:
        return []

    workers = max(1, min(int(max_workers), len(tasks)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(task) for task in tasks]

    results: list[T] = []
    first_error: BaseException | None = None
    failed = 0
    for future in futures:
        err = future.exception()
        if err is not None:
            failed += 1
            if first_error is None:
                first_error = err
            continue
        results.append(future.result())

    if first_error is not None:
        logger.error("Batch write: %d of %d operations failed", failed, len(tasks))
        raise first_error
    return results
