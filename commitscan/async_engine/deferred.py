"""
Deferred - a future with its resolve/reject controls exposed.

The controls are safe to call more than once: only the first settlement
counts, later calls are ignored.
"""

from __future__ import annotations

import asyncio
from typing import Any, Generator, Generic, TypeVar

T = TypeVar("T")


class Deferred(Generic[T]):
    """
    Single-resolution future with external resolve/reject.

    Usage:
        deferred = defer()
        loop.call_later(1, deferred.resolve, 42)
        value = await deferred  # 42

        future, resolve, reject = defer()
    """

    __slots__ = ("future",)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        loop = loop or asyncio.get_running_loop()
        self.future: asyncio.Future[T] = loop.create_future()

    def resolve(self, value: T) -> None:
        """Settle with ``value`` unless already settled."""
        if not self.future.done():
            self.future.set_result(value)

    def reject(self, error: BaseException) -> None:
        """Settle with ``error`` unless already settled."""
        if not self.future.done():
            self.future.set_exception(error)

    def done(self) -> bool:
        return self.future.done()

    def __await__(self) -> Generator[Any, None, T]:
        return self.future.__await__()

    def __iter__(self):
        # Allows ``future, resolve, reject = defer()``
        yield self.future
        yield self.resolve
        yield self.reject

    def __repr__(self) -> str:
        return f"<Deferred {self.future!r}>"


def defer(loop: asyncio.AbstractEventLoop | None = None) -> Deferred[Any]:
    """Create a Deferred bound to ``loop`` (the running loop by default)."""
    return Deferred(loop)
