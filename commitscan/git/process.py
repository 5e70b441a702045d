"""
Async subprocess execution with an output cap.

stdout is streamed; once it grows past ``max_output_length`` characters the
process is killed and the captured text is cut at the limit.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
from dataclasses import dataclass
from typing import Sequence

from commitscan.core.errors import GitCommandError

logger = logging.getLogger(__name__)

TRUNCATION_MESSAGE = "\n(Output was truncated because it was too long)"

_CHUNK_SIZE = 64 * 1024


@dataclass
class ProcessResult:
    """Captured output of a finished (or killed) process."""

    stdout: str
    stderr: str
    returncode: int | None
    truncated: bool = False


def with_truncation_notice(text: str, max_length: int) -> str:
    """
    Cut ``text`` to ``max_length`` characters, ending in TRUNCATION_MESSAGE.

    The result never exceeds ``max_length``.
    """
    if len(TRUNCATION_MESSAGE) >= max_length:
        return TRUNCATION_MESSAGE[:max_length]
    return text[: max_length - len(TRUNCATION_MESSAGE)] + TRUNCATION_MESSAGE


def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        pass


async def run_process(
    args: Sequence[str],
    cwd: str | os.PathLike[str],
    max_output_length: int | None = None,
) -> ProcessResult:
    """
    Run ``args`` in ``cwd`` and capture its output.

    Raises GitCommandError if the process cannot be started or exits with a
    non-zero status. A process killed for exceeding the output cap is not an
    error: its result has ``truncated=True``.
    """
    command = tuple(str(arg) for arg in args)
    logger.debug(f"Running {' '.join(command)} in {cwd}")
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise GitCommandError(
            f"Could not start {command[0]}: {e}", command=command
        ) from e

    stderr_task = asyncio.create_task(process.stderr.read())
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    stdout = ""
    truncated = False

    try:
        while True:
            chunk = await process.stdout.read(_CHUNK_SIZE)
            if not chunk:
                stdout += decoder.decode(b"", final=True)
                break
            stdout += decoder.decode(chunk)
            if max_output_length is not None and len(stdout) > max_output_length:
                truncated = True
                stdout = stdout[:max_output_length]
                _kill(process)
                break
        returncode = await process.wait()
        stderr = (await stderr_task).decode("utf-8", errors="replace")
    except asyncio.CancelledError:
        _kill(process)
        stderr_task.cancel()
        raise

    if truncated:
        logger.debug(
            f"{command[0]} output exceeded {max_output_length} characters, process killed"
        )
        return ProcessResult(stdout, stderr, returncode, truncated=True)

    if returncode != 0:
        raise GitCommandError(
            f"{command[0]} process exited with code {returncode}",
            command=command,
            returncode=returncode,
            stderr=stderr.strip(),
        )
    return ProcessResult(stdout, stderr, returncode)
