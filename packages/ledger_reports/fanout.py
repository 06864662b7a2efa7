"""Run a small batch of independent fetches on a bounded thread pool.

Report generation issues one query per movement source. The queries do not
depend on each other, so they may run concurrently, but accumulation must
wait for all of them and a single failure sinks the whole batch.

- Results come back in input order regardless of completion order.
- The first failure is re-raised as soon as it is observed; calls that have
  not started yet are cancelled. Calls already running are left to finish in
  the background and their results are discarded.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import TypeVar

OutT = TypeVar("OutT")


def fan_out(calls: Sequence[Callable[[], OutT]], *, concurrency: int) -> list[OutT]:
    """Invoke every zero-argument callable and return their results in order."""

    if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")
    if not calls:
        return []
    if concurrency == 1 or len(calls) == 1:
        return [call() for call in calls]

    pool = ThreadPoolExecutor(
        max_workers=min(concurrency, len(calls)), thread_name_prefix="ledger-fetch"
    )
    try:
        futures: list[Future[OutT]] = [pool.submit(call) for call in calls]
        done, _pending = wait(futures, return_when=FIRST_EXCEPTION)
        for fut in futures:
            if fut in done and fut.exception() is not None:
                pool.shutdown(wait=False, cancel_futures=True)
                raise fut.exception()  # type: ignore[misc]
        return [fut.result() for fut in futures]
    finally:
        pool.shutdown(wait=False, cancel_futures=True)


__all__ = ["fan_out"]
