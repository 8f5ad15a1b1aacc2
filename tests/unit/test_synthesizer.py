from __future__ import annotations

import random
from datetime import datetime, timezone

from coding_round import DEFAULT_QUESTIONS, CodingAnswer, CodingResult
from interview_session import Message
from resume_analysis import DEFAULT_ATS_RESULT
from services.scoring import completion_score
from session_reports import (
    early_exit_report,
    extract_qa_pairs,
    synthesize_coding_report,
    synthesize_interview_report,
)

TS = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _msg(role: str, content: str) -> Message:
    return Message(role=role, content=content, timestamp=TS)


def test_qa_pairs_follow_transcript_order_and_skip_orphans():
    transcript = [
        _msg("interviewer", "Q1"),
        _msg("candidate", "A1"),
        _msg("interviewer", "Q2"),
        _msg("interviewer", "Q3"),
        _msg("candidate", "A3"),
        _msg("candidate", "extra"),
        _msg("interviewer", "closing"),
    ]
    pairs = extract_qa_pairs(transcript)
    assert [(p.question, p.answer) for p in pairs] == [("Q1", "A1"), ("Q3", "A3")]


def test_qa_pairs_empty_transcript():
    assert extract_qa_pairs([]) == []


def test_single_answer_scenario():
    answer = "I implemented a sorting algorithm for our team.".ljust(120, ".")
    assert len(answer) == 120
    transcript = [_msg("interviewer", "Tell me about a project"), _msg("candidate", answer)]

    report = synthesize_interview_report(transcript, rng=random.Random(7))

    assert report.technical_score == 74
    assert report.communication_score == 77
    assert report.overall_score == 75
    assert report.kind == "interview"
    assert len(report.answers) == 1


def test_random_scores_stay_in_range_and_follow_seed():
    transcript = [_msg("interviewer", "Q"), _msg("candidate", "A")]
    first = synthesize_interview_report(transcript, rng=random.Random(42))
    second = synthesize_interview_report(transcript, rng=random.Random(42))
    assert first.problem_solving_score == second.problem_solving_score
    assert first.confidence_score == second.confidence_score
    for seed in range(50):
        report = synthesize_interview_report(transcript, rng=random.Random(seed))
        assert 75 <= report.problem_solving_score <= 89
        assert 72 <= report.confidence_score <= 86


def test_interview_report_without_answers_uses_base_scores():
    report = synthesize_interview_report([_msg("interviewer", "Hello")], ats_result=DEFAULT_ATS_RESULT)
    assert report.technical_score == 70
    assert report.communication_score == 65
    assert report.overall_score == 70
    assert report.answers == []
    assert report.ats_result == DEFAULT_ATS_RESULT


def _coding_result(submitted_ids):
    answers = [
        CodingAnswer(question_id=q.id, code=q.starter_code, passed=q.id in submitted_ids) for q in DEFAULT_QUESTIONS
    ]
    score = completion_score(len(submitted_ids), len(DEFAULT_QUESTIONS))
    return CodingResult(questions=list(DEFAULT_QUESTIONS), answers=answers, score=score)


def test_coding_report_two_of_three():
    report = synthesize_coding_report(_coding_result({1, 2}))
    assert report.technical_score == 67
    assert report.problem_solving_score == 67
    assert report.overall_score == 67
    assert report.communication_score == 0
    assert report.confidence_score == 60
    assert report.strengths == ["Attempted the coding challenges", "Made progress on problems"]
    assert report.weaknesses == ["Could complete more challenges", "Consider optimizing solutions"]
    assert [a.question for a in report.answers] == ["Two Sum", "Valid Parentheses", "Reverse Linked List"]
    assert report.kind == "coding"


def test_coding_report_perfect_score_has_no_weaknesses():
    report = synthesize_coding_report(_coding_result({1, 2, 3}))
    assert report.overall_score == 100
    assert report.confidence_score == 90
    assert report.weaknesses == []
    assert "Good problem-solving skills" in report.strengths


def test_coding_report_low_score_uses_attempt_strengths():
    report = synthesize_coding_report(_coding_result({1}))
    assert report.overall_score == 33
    assert report.strengths == ["Attempted the coding challenges", "Made progress on problems"]


def test_early_exit_report_is_all_fifty():
    report = early_exit_report(ats_result=DEFAULT_ATS_RESULT)
    assert {
        report.technical_score,
        report.communication_score,
        report.problem_solving_score,
        report.confidence_score,
        report.overall_score,
    } == {50}
    assert report.strengths == ["Started the interview process"]
    assert report.weaknesses == ["Interview ended early"]
    assert report.answers == []
    assert report.kind == "partial"
