"""
Work sources - the single pull-based sequence abstraction used by the pool.

Every input handed to the worker pool is a WorkSource. Callers pick the
wrapper explicitly (``from_iterable`` or ``from_async_iterable``); nothing
probes objects for iteration capabilities at runtime.

A source is single-pass: each item is handed out exactly once, and once
exhausted every further pull returns EXHAUSTED.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import AsyncIterable, Generic, Iterable, Iterator, TypeVar, Union

T = TypeVar("T")


class _Exhausted:
    """Sentinel type returned by ``WorkSource.pull`` at the end of input."""

    _instance: "_Exhausted | None" = None

    def __new__(cls) -> "_Exhausted":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EXHAUSTED"

    def __bool__(self) -> bool:
        return False


EXHAUSTED = _Exhausted()

Pulled = Union[T, _Exhausted]


class WorkSource(ABC, Generic[T]):
    """Pull-based, single-pass source of work items."""

    @abstractmethod
    async def pull(self) -> Pulled[T]:
        """Return the next item, or EXHAUSTED when there are none left."""
        ...

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        while True:
            item = await self.pull()
            if item is EXHAUSTED:
                return
            yield item


class IterableSource(WorkSource[T]):
    """
    Source over a synchronous iterable.

    ``pull`` never suspends, so concurrent workers on one event loop can
    never observe the same item.
    """

    def __init__(self, items: Iterable[T]):
        self._iterator: Iterator[T] = iter(items)
        self._exhausted = False

    async def pull(self) -> Pulled[T]:
        if self._exhausted:
            return EXHAUSTED
        try:
            return next(self._iterator)
        except StopIteration:
            self._exhausted = True
            return EXHAUSTED


class AsyncIterableSource(WorkSource[T]):
    """
    Source over an asynchronous iterable.

    Advancing an async iterator suspends, so pulls go through a lock: one
    pull at a time, in the order workers asked.
    """

    def __init__(self, items: AsyncIterable[T]):
        self._iterator = items.__aiter__()
        self._lock = asyncio.Lock()
        self._exhausted = False

    async def pull(self) -> Pulled[T]:
        async with self._lock:
            if self._exhausted:
                return EXHAUSTED
            try:
                return await self._iterator.__anext__()
            except StopAsyncIteration:
                self._exhausted = True
                return EXHAUSTED


def from_iterable(items: Iterable[T]) -> IterableSource[T]:
    """Wrap a list, generator or any other synchronous iterable."""
    return IterableSource(items)


def from_async_iterable(items: AsyncIterable[T]) -> AsyncIterableSource[T]:
    """Wrap an async generator or any other asynchronous iterable."""
    return AsyncIterableSource(items)


def count(n: int) -> Iterator[int]:
    """Yield 0..n-1."""
    for i in range(n):
        yield i
