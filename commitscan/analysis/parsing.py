"""Extract the labelled fields from a model answer.

Expected answer shape:

    Confidence: 85%
    Reasoning: The commit replaces the key generator's entropy source ...
"""

from __future__ import annotations

import re

_NUMBER = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)")


def read_value_for_label(label: str, text: str) -> str | None:
    """
    Text following the first occurrence of ``label`` up to the end of line.

    One character after the label (the colon) is skipped and the value is
    stripped. Returns None if ``label`` does not occur.
    """
    label_index = text.find(label)
    if label_index == -1:
        return None
    start = label_index + len(label) + 1
    end = text.find("\n", start)
    if end == -1:
        end = len(text)
    return text[start:end].strip()


def parse_percent_text(text: str | None) -> float | None:
    """Number in front of the first ``%`` ("85%" -> 85.0), else None."""
    if not text:
        return None
    percent_index = text.find("%")
    if percent_index == -1:
        return None
    match = _NUMBER.match(text[:percent_index])
    if match is None:
        return None
    return float(match.group(0))


def parse_verdict(text: str) -> tuple[float | None, str | None]:
    """Return ``(confidence, reasoning)`` read from a model answer."""
    confidence = parse_percent_text(read_value_for_label("Confidence", text))
    reasoning = read_value_for_label("Reasoning", text)
    return confidence, reasoning
