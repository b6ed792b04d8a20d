"""Thread-pool execution of independent work units.

Chromosomes and peaks are processed as independent units. NumPy and SciPy
release the GIL in their numerical kernels, so threads give real parallelism
without copying coverage arrays between processes. BLAS is limited to one
thread per worker to avoid oversubscription.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from threadpoolctl import threadpool_limits

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def _guarded(
    worker: Callable[[T], R],
    describe: Callable[[T], str],
) -> Callable[[T], R | None]:
    def run(unit: T) -> R | None:
        try:
            return worker(unit)
        except Exception:
            logger.exception("Failed to process %s", describe(unit))
            return None

    return run


def map_units(
    worker: Callable[[T], R],
    units: Sequence[T],
    *,
    n_workers: int = 1,
    describe: Callable[[T], str] = repr,
) -> list[R | None]:
    """Apply ``worker`` to every unit, in parallel when ``n_workers > 1``.

    A unit whose worker raises is logged (using ``describe`` to name it) and
    yields ``None``; its siblings keep running.

    Args:
        worker: Function processing one unit
        units: Units of work
        n_workers: Size of the thread pool
        describe: Human-readable name of a unit for log messages

    Returns
    -------
        Results in the order of ``units``
    """
    run = _guarded(worker, describe)
    n_workers = max(1, min(n_workers, len(units)))

    with threadpool_limits(limits=1, user_api="blas"):
        if n_workers > 1:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                return list(executor.map(run, units))
        return [run(unit) for unit in units]


__all__ = ["map_units"]
