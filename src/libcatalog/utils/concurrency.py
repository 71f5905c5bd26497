"""
Fan-out helper for reads that are needed together.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from contextvars import copy_context
from typing import Any, Callable, List

DEFAULT_MAX_WORKERS = 4


def gather(*calls: Callable[[], Any], max_workers: int = DEFAULT_MAX_WORKERS) -> List[Any]:
    """
    Run ``calls`` concurrently and return their results in call order.

    Join-all semantics: every call is awaited, and the first exception (in
    call order) is re-raised once all of them have finished. The reads are
    not guaranteed to observe the same snapshot of the store.
    """
    if not calls:
        return []
    if len(calls) == 1:
        return [calls[0]()]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(calls))) as executor:
        # Each worker runs in a copy of the caller's context so log records
        # keep the request's correlation id.
        futures = [executor.submit(copy_context().run, call) for call in calls]
        errors = [future.exception() for future in futures]
    for error in errors:
        if error is not None:
            raise error
    return [future.result() for future in futures]
