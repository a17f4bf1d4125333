"""Batch encode/decode scheduling over a thread pool."""

from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
import logging
import os

from ._progress import progress_bar
from .errors import ParallelModeError

log = logging.getLogger(__name__)


class ParallelMode(str, Enum):
    """How batch helpers spread sequences over workers."""

    AUTO = "auto"
    BATCH = "batch"
    OFF = "off"

    @classmethod
    def get(cls, name: "ParallelMode | str") -> "ParallelMode":
        """Resolve a mode or its case-insensitive name."""
        if isinstance(name, cls):
            return name
        try:
            return cls[name.upper()]
        except (KeyError, AttributeError):
            raise ParallelModeError(
                "unknown mode",
                invalid_name=name,
                available=[mode.value for mode in cls],
            ) from None


def list_parallel_modes() -> list[str]:
    """Return available parallel mode names."""
    return [mode.value for mode in ParallelMode]


def map_ordered[I, O](
    func: Callable[[I], O],
    items: Sequence[I],
    *,
    num_workers: int | None = None,
    parallel_mode: ParallelMode | str = ParallelMode.AUTO,
    show_progress: bool = True,
    desc: str = "batch",
) -> list[O]:
    """
    Apply ``func`` to every sequence in ``items`` and keep input order.

    ``AUTO`` falls back to a plain loop for a single item or a single worker.
    The first exception raised by ``func`` propagates to the caller.
    """
    mode = ParallelMode.get(parallel_mode)
    if not items:
        return []

    if num_workers is None:
        workers = os.cpu_count() or 1
    else:
        workers = max(1, num_workers)
    threaded = mode is ParallelMode.BATCH or (
        mode is ParallelMode.AUTO and len(items) > 1 and workers > 1
    )
    log.debug(
        f"{desc}: {len(items)} sequences, "
        f"{f'{workers} threads' if threaded else 'serial'}"
    )

    if not threaded:
        bar = progress_bar(items, requested=show_progress, desc=desc, unit="seq")
        return [func(item) for item in bar]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        bar = progress_bar(
            pool.map(func, items),
            requested=show_progress,
            total=len(items),
            desc=desc,
            unit="seq",
        )
        return list(bar)


__all__ = [
    "ParallelMode",
    "list_parallel_modes",
    "map_ordered",
]
