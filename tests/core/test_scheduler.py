"""Tests for the bounded-concurrency scheduler."""

from __future__ import annotations

import asyncio

import pytest

from commit_resume.core.scheduler import GENERATION_CONCURRENCY, run_bounded


class _Tracker:
    """Counts tasks currently in flight and remembers the peak."""

    def __init__(self) -> None:
        self.active = 0
        self.peak = 0

    def task(self, value, delay: float):
        async def _run():
            self.active += 1
            self.peak = max(self.peak, self.active)
            try:
                await asyncio.sleep(delay)
                return value
            finally:
                self.active -= 1
        return _run


class TestOrdering:
    def test_results_follow_input_order(self):
        tracker = _Tracker()
        # task 0 is slowest, task 1 fastest
        tasks = [tracker.task(0, 0.1), tracker.task(1, 0.001), tracker.task(2, 0.05)]

        results = asyncio.run(run_bounded(tasks, limit=3))

        assert results == [0, 1, 2]

    def test_order_preserved_under_tight_limit(self):
        tracker = _Tracker()
        delays = [0.03, 0.001, 0.02, 0.001, 0.01, 0.002]
        tasks = [tracker.task(i, d) for i, d in enumerate(delays)]

        results = asyncio.run(run_bounded(tasks, limit=2))

        assert results == list(range(len(delays)))

    def test_empty_task_list(self):
        assert asyncio.run(run_bounded([], limit=3)) == []


class TestLimit:
    @pytest.mark.parametrize("count,limit", [(1, 1), (5, 1), (6, 2), (10, 3), (4, 4)])
    def test_never_exceeds_limit(self, count, limit):
        tracker = _Tracker()
        tasks = [tracker.task(i, 0.005 * (count - i)) for i in range(count)]

        asyncio.run(run_bounded(tasks, limit=limit))

        assert tracker.peak <= limit
        # the limit is actually used, not just respected
        assert tracker.peak == min(limit, count)

    def test_unbounded_runs_everything_at_once(self):
        tracker = _Tracker()
        tasks = [tracker.task(i, 0.01) for i in range(12)]

        asyncio.run(run_bounded(tasks))

        assert tracker.peak == 12

    def test_limit_larger_than_task_count(self):
        tracker = _Tracker()
        tasks = [tracker.task(i, 0.001) for i in range(3)]

        assert asyncio.run(run_bounded(tasks, limit=50)) == [0, 1, 2]

    def test_zero_limit_rejected(self):
        tracker = _Tracker()
        with pytest.raises(ValueError):
            asyncio.run(run_bounded([tracker.task(1, 0)], limit=0))

    def test_generation_concurrency_constant(self):
        assert GENERATION_CONCURRENCY == 3


class TestFailures:
    def test_failure_propagates_by_default(self):
        async def boom():
            raise RuntimeError("boom")

        async def ok():
            return "ok"

        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(run_bounded([ok, boom], limit=1))

    def test_return_exceptions_fills_slot(self):
        async def boom():
            raise RuntimeError("boom")

        async def ok():
            return "ok"

        results = asyncio.run(run_bounded([ok, boom, ok], limit=2, return_exceptions=True))

        assert results[0] == "ok"
        assert isinstance(results[1], RuntimeError)
        assert results[2] == "ok"

    def test_failed_task_releases_its_slot(self):
        tracker = _Tracker()

        async def boom():
            raise ValueError("nope")

        tasks = [boom, tracker.task("a", 0.001), tracker.task("b", 0.001)]
        results = asyncio.run(run_bounded(tasks, limit=1, return_exceptions=True))

        assert results[1:] == ["a", "b"]
