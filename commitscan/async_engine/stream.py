"""
Unbounded multi-producer / single-consumer result queue.

Key properties:
- put never blocks and never fails (no backpressure)
- values come out in exactly the order put was called
- end() places a terminal marker, optionally carrying an error; every
  get() after it observes END instead of blocking forever
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import AsyncIterator, Generic, TypeVar, Union

from .deferred import Deferred
from .sequence import EXHAUSTED, Pulled, WorkSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _End:
    """Sentinel type for the terminal marker."""

    _instance: "_End | None" = None

    def __new__(cls) -> "_End":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "END"


END = _End()


class AsyncQueue(WorkSource[T], Generic[T]):
    """
    Unbounded FIFO queue consumed as an async sequence.

    Producers call ``put`` and finally ``end``; one consumer iterates:

        queue = AsyncQueue()
        queue.put(1)
        queue.put(2)
        queue.end()
        async for value in queue:
            handle(value)  # 1, then 2

    If ``end(error)`` was used, iteration raises ``error`` once after the
    last value. Iteration is single-pass: after the terminal marker has
    been consumed, iterating again yields nothing.
    """

    def __init__(self) -> None:
        self._values: deque[T] = deque()
        self._waiters: deque[Deferred[Union[T, _End]]] = deque()
        self._ended = False
        self._error: BaseException | None = None
        self._exhausted = False
        self._producer: asyncio.Task | None = None

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def error(self) -> BaseException | None:
        return self._error

    def qsize(self) -> int:
        """Number of values put but not yet taken."""
        return len(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def put(self, value: T) -> None:
        """Append ``value``; wakes the oldest waiting consumer, if any."""
        if self._ended:
            logger.warning("Dropping value put after queue end: %r", value)
            return
        while self._waiters:
            waiter = self._waiters.popleft()
            # Waiters whose get() was cancelled are already done
            if not waiter.done():
                waiter.resolve(value)
                return
        self._values.append(value)

    def end(self, error: BaseException | None = None) -> None:
        """Place the terminal marker. Only the first call has an effect."""
        if self._ended:
            logger.debug("Queue already ended, ignoring end(%r)", error)
            return
        self._ended = True
        self._error = error
        while self._waiters:
            self._waiters.popleft().resolve(END)

    def set_producer(self, task: asyncio.Task) -> None:
        """Attach the task feeding this queue so ``aclose`` can stop it."""
        self._producer = task

    async def aclose(self) -> None:
        """
        Stop feeding the queue and wait for the producer task to settle.

        Consumers that stop iterating early call this so no work keeps
        running in the background. The queue is ended either way.
        """
        task = self._producer
        if task is not None:
            if not task.done() and not self._ended:
                task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        self.end()

    async def get(self) -> Union[T, _End]:
        """Return the next value, or END once the queue is ended and drained."""
        if self._values:
            return self._values.popleft()
        if self._ended:
            return END
        waiter: Deferred[Union[T, _End]] = Deferred()
        self._waiters.append(waiter)
        return await waiter

    async def pull(self) -> Pulled[T]:
        value = await self.get()
        if value is END:
            self._finish()
            return EXHAUSTED
        return value

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        if self._exhausted:
            raise StopAsyncIteration
        value = await self.get()
        if value is END:
            self._finish()
            raise StopAsyncIteration
        return value

    def _finish(self) -> None:
        # The stored error surfaces on the first observation of END only
        if self._exhausted:
            return
        self._exhausted = True
        if self._error is not None:
            raise self._error

    def __repr__(self) -> str:
        state = "ended" if self._ended else "open"
        return f"<AsyncQueue {state} size={len(self._values)} waiters={len(self._waiters)}>"
