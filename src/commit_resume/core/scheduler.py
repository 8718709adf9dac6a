"""Bounded-concurrency task scheduler.

Tasks are zero-argument callables returning awaitables. A semaphore holds
``limit`` worker slots; a task acquires a slot before it starts and
releases it when it settles, so no more than ``limit`` tasks are ever in
flight. Results come back in input order.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")

# External generation service is rate and cost sensitive; git is not.
GENERATION_CONCURRENCY = 3


async def run_bounded(
    tasks: Sequence[Callable[[], Awaitable[T]]],
    limit: int | None = None,
    return_exceptions: bool = False,
) -> list[T]:
    """Run ``tasks`` with at most ``limit`` in flight.

    ``limit=None`` fans out fully. Failures propagate like
    ``asyncio.gather``; with ``return_exceptions=True`` each exception is
    placed in its task's result slot instead.
    """
    if not tasks:
        return []
    if limit is None:
        limit = len(tasks)
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    slots = asyncio.Semaphore(limit)

    async def _guarded(task: Callable[[], Awaitable[T]]) -> T:
        async with slots:
            return await task()

    return list(
        await asyncio.gather(
            *(_guarded(task) for task in tasks),
            return_exceptions=return_exceptions,
        )
    )
