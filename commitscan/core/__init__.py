"""Core types and errors shared by every commitscan layer."""

from commitscan.core.errors import (
    AnalysisError,
    CommitScanError,
    ConfigurationError,
    GitCommandError,
    PoolCancelledError,
    PoolError,
    ResponseParseError,
)
from commitscan.core.types import Commit, CommitAnalysis

__all__ = [
    "Commit",
    "CommitAnalysis",
    "CommitScanError",
    "ConfigurationError",
    "GitCommandError",
    "AnalysisError",
    "ResponseParseError",
    "PoolError",
    "PoolCancelledError",
]
