"""Turn a finished transcript or coding result into an :class:`InterviewReport`.

The numbers come from the heuristics in :mod:`services.scoring`; the feedback
text is drawn from fixed pools rather than produced by a model.
"""
from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from coding_round import CodingResult
from interview_session import Message
from resume_analysis import ATSResult
from services.scoring import (
    communication_score,
    overall_score,
    round_half_up,
    technical_score,
)

from .models import InterviewReport, QAPair

logger = logging.getLogger(__name__)

PROBLEM_SOLVING_RANGE = (75, 89)
CONFIDENCE_RANGE = (72, 86)
CODING_CONFIDENCE_FACTOR = 0.9
CODING_STRENGTH_THRESHOLD = 70
PARTIAL_SCORE = 50

INTERVIEW_STRENGTHS = [
    "Clear communication style",
    "Good understanding of fundamentals",
    "Positive attitude and enthusiasm",
]
INTERVIEW_WEAKNESSES = [
    "Could provide more specific examples",
    "Consider elaborating on technical details",
]
INTERVIEW_SUGGESTIONS = [
    "Practice behavioral questions using STAR method",
    "Prepare more project-specific talking points",
    "Research company background before interviews",
]

CODING_STRENGTHS_HIGH = [
    "Good problem-solving skills",
    "Clean code structure",
    "Completed multiple challenges",
]
CODING_STRENGTHS_LOW = [
    "Attempted the coding challenges",
    "Made progress on problems",
]
CODING_WEAKNESSES = [
    "Could complete more challenges",
    "Consider optimizing solutions",
]
CODING_SUGGESTIONS = [
    "Practice more LeetCode-style problems",
    "Focus on time complexity analysis",
    "Review data structures and algorithms",
]

PARTIAL_STRENGTHS = ["Started the interview process"]
PARTIAL_WEAKNESSES = ["Interview ended early"]
PARTIAL_SUGGESTIONS = [
    "Complete the full interview for accurate assessment",
    "Practice with more mock interviews",
]


def extract_qa_pairs(transcript: Sequence[Message]) -> List[QAPair]:
    """Pair every interviewer message with the candidate message right after it."""

    pairs: List[QAPair] = []
    for current, following in zip(transcript, transcript[1:]):
        if current.role == "interviewer" and following.role == "candidate":
            pairs.append(QAPair(question=current.content, answer=following.content))
    return pairs


def synthesize_interview_report(
    transcript: Sequence[Message],
    *,
    ats_result: Optional[ATSResult] = None,
    rng: Optional[random.Random] = None,
) -> InterviewReport:
    source = rng or random.Random()
    pairs = extract_qa_pairs(transcript)
    answers = [pair.answer for pair in pairs]
    technical = technical_score(answers)
    communication = communication_score(answers)
    report = InterviewReport(
        technical_score=technical,
        communication_score=round_half_up(communication),
        problem_solving_score=source.randint(*PROBLEM_SOLVING_RANGE),
        confidence_score=source.randint(*CONFIDENCE_RANGE),
        overall_score=overall_score(technical, communication),
        strengths=list(INTERVIEW_STRENGTHS),
        weaknesses=list(INTERVIEW_WEAKNESSES),
        suggestions=list(INTERVIEW_SUGGESTIONS),
        ats_result=ats_result,
        answers=pairs,
        kind="interview",
    )
    logger.info(
        "Interview report pairs=%d technical=%d communication=%d overall=%d",
        len(pairs),
        report.technical_score,
        report.communication_score,
        report.overall_score,
    )
    return report


def synthesize_coding_report(result: CodingResult, *, ats_result: Optional[ATSResult] = None) -> InterviewReport:
    score = result.score
    titles = {question.id: question.title for question in result.questions}
    return InterviewReport(
        technical_score=score,
        communication_score=0,
        problem_solving_score=score,
        confidence_score=round_half_up(score * CODING_CONFIDENCE_FACTOR),
        overall_score=score,
        strengths=list(CODING_STRENGTHS_HIGH if score >= CODING_STRENGTH_THRESHOLD else CODING_STRENGTHS_LOW),
        weaknesses=list(CODING_WEAKNESSES) if score < 100 else [],
        suggestions=list(CODING_SUGGESTIONS),
        ats_result=ats_result,
        answers=[QAPair(question=titles.get(answer.question_id, ""), answer=answer.code) for answer in result.answers],
        kind="coding",
    )


def early_exit_report(*, ats_result: Optional[ATSResult] = None) -> InterviewReport:
    """Report for a session the candidate ended before completion."""

    return InterviewReport(
        technical_score=PARTIAL_SCORE,
        communication_score=PARTIAL_SCORE,
        problem_solving_score=PARTIAL_SCORE,
        confidence_score=PARTIAL_SCORE,
        overall_score=PARTIAL_SCORE,
        strengths=list(PARTIAL_STRENGTHS),
        weaknesses=list(PARTIAL_WEAKNESSES),
        suggestions=list(PARTIAL_SUGGESTIONS),
        ats_result=ats_result,
        answers=[],
        kind="partial",
    )


__all__ = [
    "early_exit_report",
    "extract_qa_pairs",
    "synthesize_coding_report",
    "synthesize_interview_report",
]
