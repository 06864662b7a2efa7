from __future__ import annotations

import threading
import time

import pytest

from ledger_reports.fanout import fan_out


def test_results_come_back_in_input_order():
    def slow(value: int, delay: float):
        def call() -> int:
            time.sleep(delay)
            return value

        return call

    calls = [slow(1, 0.05), slow(2, 0.0), slow(3, 0.02)]

    assert fan_out(calls, concurrency=3) == [1, 2, 3]


def test_calls_overlap_up_to_the_concurrency_limit():
    barrier = threading.Barrier(3, timeout=5)

    def call() -> str:
        barrier.wait()
        return threading.current_thread().name

    names = fan_out([call, call, call], concurrency=3)

    assert len(names) == 3
    assert all(n.startswith("ledger-fetch") for n in names)


def test_single_worker_runs_inline():
    seen: list[str] = []

    def call() -> None:
        seen.append(threading.current_thread().name)

    fan_out([call, call], concurrency=1)

    assert seen == [threading.current_thread().name] * 2


def test_first_failure_is_raised():
    def ok() -> int:
        return 1

    def boom() -> int:
        raise RuntimeError("source down")

    with pytest.raises(RuntimeError, match="source down"):
        fan_out([ok, boom, ok], concurrency=2)


def test_empty_batch_and_bad_concurrency():
    assert fan_out([], concurrency=2) == []
    with pytest.raises(ValueError):
        fan_out([lambda: 1], concurrency=0)
    with pytest.raises(ValueError):
        fan_out([lambda: 1], concurrency=True)
