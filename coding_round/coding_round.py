from __future__ import annotations  # Coding round orchestration: drafts, submissions, completion score

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from config.settings import settings
from interview_setup import InterviewConfig
from observability import log_event, span
from services.scoring import completion_score

from .questions import DEFAULT_QUESTIONS, CodingQuestion

logger = logging.getLogger(__name__)

QuestionSource = Callable[[InterviewConfig], List[CodingQuestion]]

RUN_MESSAGE = "Code executed successfully!"


class CodingAnswer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: int = Field(alias="questionId")
    code: str
    passed: bool


class CodingResult(BaseModel):  # Outcome handed to the report synthesizer
    questions: List[CodingQuestion]
    answers: List[CodingAnswer]
    score: int


class RunOutcome(BaseModel):
    status: Literal["success"] = "success"
    message: str = RUN_MESSAGE
    question_id: int


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CodingRound:
    """Problem set for one coding session.

    Submissions are recorded, never executed or judged; the score is the share of
    problems submitted.
    """

    def __init__(
        self,
        session_id: str,
        config: InterviewConfig,
        *,
        question_source: Optional[QuestionSource] = None,
        run_delay_s: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.session_id = session_id
        self.config = config
        self._question_source = question_source
        self._run_delay = settings.RUN_DELAY_SECONDS if run_delay_s is None else run_delay_s
        self._sleep = sleep
        self._clock = clock
        self._lock = threading.RLock()

        self.questions: List[CodingQuestion] = list(DEFAULT_QUESTIONS)
        self.source: Literal["pending", "remote", "default"] = "pending"
        self.current_index = 0
        self.drafts: Dict[int, str] = {}
        self.submitted: List[int] = []
        self.show_hints: Dict[int, bool] = {}
        self.closed = False
        self.started_at = clock()
        self.events: List[Dict[str, Any]] = []
        self._seed_drafts()

    @property
    def current_question(self) -> CodingQuestion:
        return self.questions[self.current_index]

    def start(self) -> List[CodingQuestion]:
        """Fetch tailored problems once, keeping the built-in set on any failure or empty result."""

        fetched: List[CodingQuestion] = []
        if self._question_source is not None:
            try:
                with span(self, "generate_coding_questions"):
                    fetched = list(self._question_source(self.config))
            except Exception:  # noqa: BLE001
                logger.exception("Error fetching coding questions session=%s", self.session_id)
                fetched = []
        with self._lock:
            if fetched:
                self.questions = fetched
                self.source = "remote"
            else:
                self.questions = list(DEFAULT_QUESTIONS)
                self.source = "default"
            self.current_index = 0
            self.submitted = []
            self.show_hints = {}
            self._seed_drafts()
        log_event("coding_started", self.session_id, mode="coding", source=self.source)
        return list(self.questions)

    def select(self, index: int) -> CodingQuestion:
        with self._lock:
            if not 0 <= index < len(self.questions):
                raise IndexError(f"No problem at index {index}")
            self.current_index = index
            return self.current_question

    def update_code(self, code: str) -> None:
        with self._lock:
            self._ensure_open()
            self.drafts[self.current_question.id] = code

    def run(self) -> RunOutcome:
        """Pretend to run the current draft; nothing is executed."""

        question_id = self.current_question.id
        self._sleep(self._run_delay)
        return RunOutcome(question_id=question_id)

    def submit(self) -> CodingQuestion:
        """Mark the current problem submitted and move to the next one when there is one."""

        with self._lock:
            self._ensure_open()
            question = self.current_question
            if question.id not in self.submitted:
                self.submitted.append(question.id)
            if self.current_index < len(self.questions) - 1:
                self.current_index += 1
        log_event(
            "coding_submitted",
            self.session_id,
            mode="coding",
            score=completion_score(len(self.submitted), len(self.questions)),
        )
        return question

    def toggle_hints(self, index: Optional[int] = None) -> bool:
        with self._lock:
            target = self.current_index if index is None else index
            if not 0 <= target < len(self.questions):
                raise IndexError(f"No problem at index {target}")
            question_id = self.questions[target].id
            self.show_hints[question_id] = not self.show_hints.get(question_id, False)
            return self.show_hints[question_id]

    def score(self) -> int:
        return completion_score(len(self.submitted), len(self.questions))

    def finish(self) -> CodingResult:
        with self._lock:
            self.closed = True
            submitted = set(self.submitted)
            answers = [
                CodingAnswer(
                    question_id=question.id,
                    code=self.drafts.get(question.id) or question.starter_code,
                    passed=question.id in submitted,
                )
                for question in self.questions
            ]
            result = CodingResult(questions=list(self.questions), answers=answers, score=self.score())
        log_event("coding_finished", self.session_id, mode="coding", score=result.score)
        return result

    def close(self) -> None:
        with self._lock:
            self.closed = True

    def elapsed_seconds(self, now: Optional[datetime] = None) -> int:
        current = now or self._clock()
        return max(0, int((current - self.started_at).total_seconds()))

    def _seed_drafts(self) -> None:
        self.drafts = {question.id: question.starter_code for question in self.questions}

    def _ensure_open(self) -> None:
        if self.closed:
            raise RuntimeError("Coding round has already finished")


__all__ = ["CodingAnswer", "CodingResult", "CodingRound", "QuestionSource", "RunOutcome"]
