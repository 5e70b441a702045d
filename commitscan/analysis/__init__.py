from commitscan.analysis.analyzer import QUESTION_TEMPLATE, CommitAnalyzer
from commitscan.analysis.parsing import (
    parse_percent_text,
    parse_verdict,
    read_value_for_label,
)

__all__ = [
    "CommitAnalyzer",
    "QUESTION_TEMPLATE",
    "read_value_for_label",
    "parse_percent_text",
    "parse_verdict",
]
