from commitscan.git.history import GitRepository, parse_log_output
from commitscan.git.process import (
    TRUNCATION_MESSAGE,
    ProcessResult,
    run_process,
    with_truncation_notice,
)

__all__ = [
    "GitRepository",
    "parse_log_output",
    "ProcessResult",
    "run_process",
    "with_truncation_notice",
    "TRUNCATION_MESSAGE",
]
