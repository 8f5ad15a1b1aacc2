"""Heuristic scoring helpers shared by the report synthesizer and the coding round.

These are placeholders rather than a validated rubric: answer length drives
communication, a fixed keyword list drives the technical score, and the coding
round only counts submissions.
"""
from __future__ import annotations

import math
from typing import Iterable, Sequence

TECHNICAL_KEYWORDS: Sequence[str] = (
    "implemented",
    "developed",
    "built",
    "designed",
    "algorithm",
    "system",
    "database",
    "api",
    "framework",
)

SCORE_CAP = 95
TECHNICAL_BASE = 70
TECHNICAL_STEP = 2
COMMUNICATION_BASE = 65
OVERALL_ANCHOR = 75


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def average_length(answers: Sequence[str]) -> float:
    return sum(len(answer) for answer in answers) / max(len(answers), 1)


def communication_score(answers: Sequence[str]) -> float:
    """``min(95, 65 + average answer length / 10)``, unrounded."""
    return min(float(SCORE_CAP), COMMUNICATION_BASE + average_length(answers) / 10)


def keyword_hits(answers: Iterable[str], keywords: Sequence[str] = TECHNICAL_KEYWORDS) -> int:
    """Count (answer, keyword) pairs where the keyword appears in the answer."""
    hits = 0
    for answer in answers:
        lowered = answer.lower()
        hits += sum(1 for keyword in keywords if keyword in lowered)
    return hits


def technical_score(answers: Sequence[str]) -> int:
    return min(SCORE_CAP, TECHNICAL_BASE + TECHNICAL_STEP * keyword_hits(answers))


def overall_score(technical: float, communication: float) -> int:
    return round_half_up((technical + communication + OVERALL_ANCHOR) / 3)


def completion_score(submitted: int, total: int) -> int:
    """Percentage of problems submitted, rounded; 0 when there are no problems."""
    if total <= 0:
        return 0
    return round_half_up(submitted * 100 / total)


__all__ = [
    "TECHNICAL_KEYWORDS",
    "average_length",
    "communication_score",
    "completion_score",
    "keyword_hits",
    "overall_score",
    "round_half_up",
    "technical_score",
]
