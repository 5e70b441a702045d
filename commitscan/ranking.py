"""Fixed-capacity "best so far" collection."""

from __future__ import annotations

from typing import Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class TopKBucket(Generic[T]):
    """
    Keeps the ``limit`` highest-scored items seen so far.

    Once full, a new item replaces the current lowest-scored member only if
    its score is strictly greater, so on ties the earlier item stays.

    ``get()`` returns members in insertion/replacement order, not by score.
    Use ``sorted()`` when score order is wanted.

    Usage:
        top = TopKBucket(10, lambda result: result.confidence)
        for result in results:
            top.add(result)
        for result in top.sorted():
            show(result)
    """

    def __init__(self, limit: int, score_of: Callable[[T], float]):
        if limit < 1:
            raise ValueError(f"Bucket limit must be at least 1, got {limit}")
        self.limit = limit
        self.score_of = score_of
        self._bucket: list[T] = []

    def add(self, item: T) -> bool:
        """Offer ``item``; returns True if it was admitted."""
        score = self.score_of(item)
        if len(self._bucket) < self.limit:
            self._bucket.append(item)
            return True

        lowest_index = 0
        lowest_score = self.score_of(self._bucket[0])
        for index in range(1, len(self._bucket)):
            current = self.score_of(self._bucket[index])
            if current < lowest_score:
                lowest_index = index
                lowest_score = current

        if score > lowest_score:
            self._bucket[lowest_index] = item
            return True
        return False

    def get(self) -> list[T]:
        return list(self._bucket)

    @property
    def bucket(self) -> list[T]:
        return self.get()

    def sorted(self) -> list[T]:
        """Members by descending score."""
        return sorted(self._bucket, key=self.score_of, reverse=True)

    @property
    def full(self) -> bool:
        return len(self._bucket) >= self.limit

    def __len__(self) -> int:
        return len(self._bucket)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._bucket))

    def __repr__(self) -> str:
        return f"TopKBucket(limit={self.limit}, size={len(self._bucket)})"
