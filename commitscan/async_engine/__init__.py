"""
Async engine - bounded-concurrency iteration and fan-in streaming.

This module provides the concurrency primitives the scanner is built on:
a settle-once Deferred, an unbounded FIFO AsyncQueue, a fixed-size worker
pool draining a single-pass WorkSource, and a fan-in adapter that streams
the pool's results through a queue.

Example usage:

    from commitscan.async_engine import (
        from_iterable,
        parallel_for_each,
        parallel_map_to_queue,
    )

    # Fixed number of workers sharing one source
    await parallel_for_each(8, from_iterable(items), process_item)

    # Stream results as they complete (completion order)
    results = parallel_map_to_queue(20, from_iterable(items), process_item)
    async for result in results:
        handle(result)
"""

from .deferred import Deferred, defer

from .sequence import (
    EXHAUSTED,
    AsyncIterableSource,
    IterableSource,
    WorkSource,
    count,
    from_async_iterable,
    from_iterable,
)

from .stream import END, AsyncQueue

from .executor import (
    PoolStats,
    async_for_each,
    async_reduce,
    parallel,
    parallel_for_each,
    parallel_map_to_queue,
    parallel_reduce,
)

__all__ = [
    # Deferred
    "Deferred",
    "defer",
    # Sources
    "WorkSource",
    "IterableSource",
    "AsyncIterableSource",
    "EXHAUSTED",
    "from_iterable",
    "from_async_iterable",
    "count",
    # Queue
    "AsyncQueue",
    "END",
    # Pool
    "PoolStats",
    "parallel",
    "parallel_for_each",
    "parallel_reduce",
    "parallel_map_to_queue",
    "async_for_each",
    "async_reduce",
]
