"""
Scan loop: stream commit analyses through the worker pool and rank them.

Results are consumed in completion order. Failed analyses are reported and
skipped; analyses with a positive confidence compete for the top-K bucket.
A fatal pool error ends the stream and is raised to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable

from commitscan.async_engine import PoolStats, from_iterable, parallel_map_to_queue
from commitscan.core.types import Commit, CommitAnalysis
from commitscan.ranking import TopKBucket
from commitscan.utils.async_utils import maybe_await

logger = logging.getLogger(__name__)


def confidence_of(result: CommitAnalysis) -> float:
    return result.confidence if result.confidence is not None else 0.0


@dataclass
class ScanReport:
    """Summary of one scan."""

    total: int = 0
    analyzed: int = 0
    failed: int = 0
    flagged: int = 0
    top: list[CommitAnalysis] = field(default_factory=list)

    @property
    def ranked(self) -> list[CommitAnalysis]:
        """Top results by descending confidence."""
        return sorted(self.top, key=confidence_of, reverse=True)


async def scan_commits(
    commits: Iterable[Commit],
    analyze: Callable[[Commit], Awaitable[CommitAnalysis]],
    *,
    concurrency: int = 20,
    top: int = 10,
    on_result: Callable[[CommitAnalysis], Any] | None = None,
    stats: PoolStats | None = None,
) -> ScanReport:
    """
    Analyze ``commits`` with ``concurrency`` workers.

    ``on_result`` (sync or async) sees every result as it arrives, before
    ranking. If it raises, the remaining analyses are cancelled before the
    error propagates.
    """
    commits = list(commits)
    report = ScanReport(total=len(commits))
    bucket: TopKBucket[CommitAnalysis] = TopKBucket(top, confidence_of)

    results = parallel_map_to_queue(
        concurrency, from_iterable(commits), analyze, stats=stats
    )
    try:
        async for result in results:
            report.analyzed += 1
            if on_result is not None:
                await maybe_await(on_result, result)
            if result.failed:
                report.failed += 1
                continue
            if result.confidence is not None and result.confidence > 0:
                report.flagged += 1
                bucket.add(result)
    finally:
        await results.aclose()

    report.top = bucket.get()
    logger.debug(
        f"Scan finished: {report.analyzed}/{report.total} analyzed, "
        f"{report.failed} failed, {report.flagged} flagged"
    )
    return report
