"""
commitscan - concurrent LLM review of a repository's commit history.

Usage:

    import asyncio
    from commitscan import CommitAnalyzer, GitRepository, scan_commits

    async def main():
        repo = GitRepository("/path/to/checkout", max_show_output=12000)
        analyzer = CommitAnalyzer(client, "gpt-4o-mini", repo)
        report = await scan_commits(await repo.log(), analyzer.analyze, concurrency=20)
        for result in report.ranked:
            print(result.confidence, result.commit.hash, result.reasoning)

    asyncio.run(main())

The concurrency primitives live in ``commitscan.async_engine``.
"""

__version__ = "0.1.0"

# Core types
from .core.types import Commit, CommitAnalysis

# Error types
from .core.errors import (
    CommitScanError,
    ConfigurationError,
    GitCommandError,
    AnalysisError,
    ResponseParseError,
    PoolError,
    PoolCancelledError,
)

# Concurrency primitives
from .async_engine import (
    AsyncQueue,
    Deferred,
    defer,
    from_async_iterable,
    from_iterable,
    parallel,
    parallel_for_each,
    parallel_map_to_queue,
    parallel_reduce,
)
from .ranking import TopKBucket

# Application layer
from .git import GitRepository
from .analysis import CommitAnalyzer
from .scan import ScanReport, scan_commits
from .config import ScanConfig, create_client

__all__ = [
    "__version__",
    # Types
    "Commit",
    "CommitAnalysis",
    # Errors
    "CommitScanError",
    "ConfigurationError",
    "GitCommandError",
    "AnalysisError",
    "ResponseParseError",
    "PoolError",
    "PoolCancelledError",
    # Concurrency
    "AsyncQueue",
    "Deferred",
    "defer",
    "from_iterable",
    "from_async_iterable",
    "parallel",
    "parallel_for_each",
    "parallel_reduce",
    "parallel_map_to_queue",
    "TopKBucket",
    # Application
    "GitRepository",
    "CommitAnalyzer",
    "ScanReport",
    "scan_commits",
    "ScanConfig",
    "create_client",
]
