"""
Bounded worker pool over a shared, single-pass work source.

Key properties:
1. Fixed concurrency: exactly ``limit`` logical workers, no task per item
2. Each item is pulled by exactly one worker, exactly once
3. Fail fast: after the first failure no worker pulls a new item
4. No orphans: every call returns only after all of its workers settled
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from commitscan.core.errors import PoolCancelledError
from commitscan.utils.async_utils import maybe_await

from .sequence import EXHAUSTED, WorkSource
from .stream import AsyncQueue

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")
A = TypeVar("A")

# Strong references to fan-in tasks until they finish
_background_tasks: set[asyncio.Task] = set()


@dataclass
class PoolStats:
    """Runtime statistics for monitoring."""

    workers: int = 0
    pulled: int = 0
    completed: int = 0
    failed: int = 0

    @property
    def in_flight(self) -> int:
        return self.pulled - self.completed - self.failed


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValueError(f"Concurrency limit must be at least 1, got {limit}")


async def parallel(
    limit: int,
    factory: Callable[[int], Awaitable[R]],
) -> list[R]:
    """
    Run ``factory(index)`` for ``limit`` workers concurrently.

    Waits for every worker to settle. Returns results in worker-index
    order, or raises the failure of whichever worker failed first.
    """
    _check_limit(limit)
    tasks = [asyncio.ensure_future(factory(index)) for index in range(limit)]

    first_error: Exception | None = None
    try:
        for finished in asyncio.as_completed(tasks):
            try:
                await finished
            except Exception as e:
                if first_error is None:
                    first_error = e
                else:
                    logger.debug(f"Additional worker failure after first: {e!r}")
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    if first_error is not None:
        raise first_error
    return [task.result() for task in tasks]


async def async_for_each(
    source: WorkSource[T],
    on_item: Callable[[T], Awaitable[Any]],
) -> None:
    """Apply ``on_item`` to every item, one at a time."""
    async for item in source:
        await maybe_await(on_item, item)


async def parallel_for_each(
    limit: int,
    source: WorkSource[T],
    on_item: Callable[[T], Awaitable[Any]],
    *,
    stats: PoolStats | None = None,
) -> None:
    """
    Let ``limit`` workers drain ``source``, awaiting ``on_item`` per item.

    Whichever idle worker asks next gets the next item. The first failure
    stops all workers from pulling further items; items already in flight
    finish, then that failure is raised.
    """
    _check_limit(limit)
    if stats is None:
        stats = PoolStats()
    stats.workers = limit
    halted = False

    async def worker(index: int) -> None:
        nonlocal halted
        while not halted:
            try:
                item = await source.pull()
            except Exception:
                halted = True
                raise
            if item is EXHAUSTED:
                return
            stats.pulled += 1
            try:
                await maybe_await(on_item, item)
            except Exception:
                halted = True
                stats.failed += 1
                raise
            stats.completed += 1

    await parallel(limit, worker)


async def async_reduce(
    initial: A,
    source: WorkSource[T],
    reducer: Callable[[A, T], Awaitable[A]],
) -> A:
    """Sequential left fold of ``source`` into ``initial``."""
    accumulator = initial
    async for item in source:
        accumulator = await maybe_await(reducer, accumulator, item)
    return accumulator


async def parallel_reduce(
    limit: int,
    initial: A,
    source: WorkSource[T],
    reducer: Callable[[A, R], A | Awaitable[A]],
    *,
    transform: Callable[[T], R | Awaitable[R]] | None = None,
) -> A:
    """
    Fold ``source`` into one accumulator with ``limit`` concurrent workers.

    ``transform`` (identity when omitted) runs concurrently. Each transformed
    value is folded into the single shared accumulator while holding a
    lock, so ``initial`` is used exactly once and no update is lost.

    Values are folded in completion order, which varies between runs:
    ``reducer`` must be commutative and associative for a deterministic
    result.

    Usage:
        total = await parallel_reduce(
            8, 0, from_iterable(urls), operator.add, transform=fetch_size
        )
    """
    accumulator = initial
    lock = asyncio.Lock()

    async def fold(item: T) -> None:
        nonlocal accumulator
        if transform is None:
            value = item
        else:
            value = await maybe_await(transform, item)
        async with lock:
            accumulator = await maybe_await(reducer, accumulator, value)

    await parallel_for_each(limit, source, fold)
    return accumulator


def parallel_map_to_queue(
    limit: int,
    source: WorkSource[T],
    transform: Callable[[T], Awaitable[R]],
    *,
    stats: PoolStats | None = None,
) -> AsyncQueue[R]:
    """
    Map ``transform`` over ``source`` in the background, streaming results.

    Returns a live queue immediately. Results are put in completion order,
    not input order. The queue is ended when all workers finish, or ended
    with the pool's failure. A consumer that stops early must call
    ``await queue.aclose()`` to cancel the remaining work.

    Must be called while an event loop is running.

    Usage:
        results = parallel_map_to_queue(20, from_iterable(commits), analyze)
        try:
            async for result in results:
                handle(result)
        finally:
            await results.aclose()
    """
    _check_limit(limit)
    loop = asyncio.get_running_loop()
    queue: AsyncQueue[R] = AsyncQueue()

    async def put_result(item: T) -> None:
        queue.put(await maybe_await(transform, item))

    async def run() -> None:
        try:
            await parallel_for_each(limit, source, put_result, stats=stats)
        except asyncio.CancelledError:
            queue.end(PoolCancelledError("Worker pool feeding the queue was cancelled"))
            raise
        except Exception as e:
            logger.debug(f"Worker pool failed, ending queue with error: {e!r}")
            queue.end(e)
        else:
            queue.end()

    task = loop.create_task(run())
    queue.set_producer(task)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return queue
