"""Core record types with clear schemas."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Commit:
    """One entry of ``git log``."""

    hash: str
    date: str
    message: str
    author_name: str = ""
    author_email: str = ""

    @property
    def author(self) -> str:
        return f"{self.author_name} <{self.author_email}>"

    @property
    def short_hash(self) -> str:
        return self.hash[:10]


@dataclass(slots=True)
class CommitAnalysis:
    """Outcome of analyzing one commit - either a verdict or an error."""

    commit: Commit
    response: str | None = None
    confidence: float | None = None
    reasoning: str | None = None
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def confidence_label(self) -> str:
        if self.confidence is None:
            return "?"
        return f"{self.confidence:g}"
