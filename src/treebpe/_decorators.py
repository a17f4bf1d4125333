"""Timing decorator for training entry points."""

import functools
import logging
import time
from typing import Callable

log = logging.getLogger(__name__)


def measure_time(func: Callable) -> Callable:
    """
    Log how long the wrapped call took and what it produced.

    On success the result's ``repr`` is logged, so a trained ``Tokenizer``
    reports its alphabet size and merge count. On failure the exception type
    is logged instead and the exception propagates unchanged.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed = time.perf_counter() - start
            log.info(
                f"{func.__name__} failed after {elapsed:.2f} s: {type(e).__name__}"
            )
            raise
        elapsed = time.perf_counter() - start
        log.info(f"{func.__name__} finished in {elapsed:.2f} s -> {result!r}")
        return result

    return wrapper
