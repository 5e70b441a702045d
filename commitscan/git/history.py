"""
GitRepository - read-only access to one working copy's history.

The working directory is passed explicitly; there is no shared client.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from commitscan.core.errors import ConfigurationError
from commitscan.core.types import Commit

from .process import run_process, with_truncation_notice

logger = logging.getLogger(__name__)

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
_LOG_FORMAT = f"--pretty=format:%H{_FIELD_SEP}%aI{_FIELD_SEP}%an{_FIELD_SEP}%ae{_FIELD_SEP}%s{_RECORD_SEP}"


def parse_log_output(output: str) -> list[Commit]:
    """Parse ``git log`` output produced with the record/field separator format."""
    commits = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\r\n")
        if not record:
            continue
        fields = record.split(_FIELD_SEP)
        if len(fields) != 5:
            logger.warning(f"Skipping malformed log record: {record[:80]!r}")
            continue
        commit_hash, date, author_name, author_email, message = fields
        commits.append(
            Commit(
                hash=commit_hash,
                date=date,
                message=message,
                author_name=author_name,
                author_email=author_email,
            )
        )
    return commits


class GitRepository:
    """
    Async wrapper over the git CLI for a single repository.

    Usage:
        repo = GitRepository("/path/to/checkout", max_show_output=12000)
        commits = await repo.log()
        diff = await repo.show(commits[0].hash)
    """

    def __init__(
        self,
        target_directory: str | os.PathLike[str],
        *,
        git_binary: str = "git",
        max_show_output: int | None = None,
    ):
        self.target_directory = Path(target_directory)
        if not self.target_directory.is_dir():
            raise ConfigurationError(
                "Target directory does not exist",
                target_directory=str(self.target_directory),
            )
        if max_show_output is not None and max_show_output < 1:
            raise ValueError(f"max_show_output must be positive, got {max_show_output}")
        self.git_binary = git_binary
        self.max_show_output = max_show_output
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    async def _git(self, *args: str, max_output_length: int | None = None):
        return await run_process(
            (self.git_binary, *args),
            cwd=self.target_directory,
            max_output_length=max_output_length,
        )

    async def log(self) -> list[Commit]:
        """All commits reachable from HEAD, newest first."""
        result = await self._git("log", _LOG_FORMAT)
        commits = parse_log_output(result.stdout)
        self.logger.debug(f"Read {len(commits)} commits from {self.target_directory}")
        return commits

    async def commits_by_author(self, author_email: str) -> list[Commit]:
        return [c for c in await self.log() if c.author_email == author_email]

    async def authors(self) -> list[str]:
        """Unique ``Name <email>`` strings, in first-seen order."""
        authors = dict.fromkeys(commit.author for commit in await self.log())
        return list(authors)

    async def show(self, commit_hash: str) -> str:
        """Full ``git show`` text of one commit, capped at max_show_output."""
        result = await self._git(
            "show", commit_hash, max_output_length=self.max_show_output
        )
        if result.truncated:
            return with_truncation_notice(result.stdout, self.max_show_output)
        return result.stdout

    def __repr__(self) -> str:
        return f"GitRepository({str(self.target_directory)!r})"
