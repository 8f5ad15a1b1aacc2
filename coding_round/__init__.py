from __future__ import annotations  # Re-export coding_round public API

from .coding_round import CodingAnswer, CodingResult, CodingRound, QuestionSource, RunOutcome
from .questions import (
    DEFAULT_QUESTIONS,
    GENERATE_QUESTIONS_KEY,
    CodingExample,
    CodingQuestion,
    CodingQuestionSet,
    generate_questions,
    generate_with_config,
)

__all__ = [
    "DEFAULT_QUESTIONS",
    "GENERATE_QUESTIONS_KEY",
    "CodingAnswer",
    "CodingExample",
    "CodingQuestion",
    "CodingQuestionSet",
    "CodingResult",
    "CodingRound",
    "QuestionSource",
    "RunOutcome",
    "generate_questions",
    "generate_with_config",
]
