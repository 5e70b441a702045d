"""
Error hierarchy for commitscan.

Design:
- All errors inherit from CommitScanError
- Errors are specific enough to handle programmatically
- Include context for debugging
"""

from __future__ import annotations

from typing import Any


class CommitScanError(Exception):
    """Base class for all commitscan errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        context = {k: v for k, v in self.context.items() if v is not None}
        if context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


class ConfigurationError(CommitScanError):
    """Invalid or missing configuration."""

    def __init__(
        self,
        message: str,
        *,
        variable: str | None = None,
        **context: Any,
    ):
        super().__init__(message, variable=variable, **context)
        self.variable = variable


class GitCommandError(CommitScanError):
    """A git invocation failed or could not be started."""

    def __init__(
        self,
        message: str,
        *,
        command: tuple[str, ...] | None = None,
        returncode: int | None = None,
        stderr: str = "",
        **context: Any,
    ):
        super().__init__(message, command=command, returncode=returncode, **context)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class AnalysisError(CommitScanError):
    """Error while analyzing a single commit."""

    pass


class ResponseParseError(AnalysisError):
    """The model answer did not have the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        content_preview: str | None = None,
        **context: Any,
    ):
        super().__init__(message, content_preview=content_preview, **context)
        self.content_preview = content_preview


class PoolError(CommitScanError):
    """Error raised by the worker pool machinery itself."""

    pass


class PoolCancelledError(PoolError):
    """The background worker pool feeding a queue was cancelled."""

    pass
