"""Helpers for creating, loading and finishing interview sessions."""
from __future__ import annotations

import random
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union

from coding_round import CodingRound, QuestionSource
from config.settings import settings
from interview_session import ChatAgent, InterviewSession, TurnOutcome
from interview_setup import InterviewConfig
from observability import log_event
from resume_analysis import ATSResult
from session_reports import (
    InterviewReport,
    early_exit_report,
    synthesize_coding_report,
    synthesize_interview_report,
)
from storage.history import HistoryEntry, HistoryStore

SessionMode = Literal["interview", "coding"]

_SESSIONS: Dict[str, "SessionController"] = {}
_REGISTRY_LOCK = threading.Lock()


class SessionNotFoundError(KeyError):  # Unknown session id
    pass


class SessionModeError(RuntimeError):  # Operation does not apply to this session's mode
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionController:
    """Owns one session from setup to report.

    The controller holds either a chat interview or a coding round, never both,
    and produces exactly one report. The first report wins: later completions
    return it unchanged and history is written only once.
    """

    def __init__(
        self,
        config: InterviewConfig,
        *,
        ats_result: Optional[ATSResult] = None,
        agent: Optional[ChatAgent] = None,
        question_source: Optional[QuestionSource] = None,
        history: Optional[HistoryStore] = None,
        rng: Optional[random.Random] = None,
        session_id: Optional[str] = None,
        clock=_utcnow,
    ) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.config = config
        self.ats_result = ats_result
        self.mode: SessionMode = "coding" if config.is_coding else "interview"
        self.history = history or HistoryStore()
        self.rng = rng or random.Random(settings.REPORT_SEED)
        self.report: Optional[InterviewReport] = None
        self.history_entry: Optional[HistoryEntry] = None
        self.events: List[Dict[str, Any]] = []
        self._clock = clock
        self._lock = threading.RLock()
        self.interview: Optional[InterviewSession] = None
        self.coding: Optional[CodingRound] = None
        if self.mode == "coding":
            self.coding = CodingRound(self.session_id, config, question_source=question_source, clock=clock)
        else:
            if agent is None:
                raise ValueError("A chat agent is required for interview sessions")
            self.interview = InterviewSession(self.session_id, config, agent, clock=clock)

    def start(self) -> Union[TurnOutcome, list]:
        """Request the greeting, or load the problem set for a coding round."""

        log_event("session_started", self.session_id, mode=self.mode)
        if self.coding is not None:
            return self.coding.start()
        return self.require_interview().start()

    def require_interview(self) -> InterviewSession:
        if self.interview is None:
            raise SessionModeError("Session is a coding round")
        return self.interview

    def require_coding(self) -> CodingRound:
        if self.coding is None:
            raise SessionModeError("Session is not a coding round")
        return self.coding

    def complete(self, report: InterviewReport) -> InterviewReport:
        with self._lock:
            if self.report is not None:
                return self.report
            self.report = report
            self.history_entry = self.history.record_report(report, self.config, self._clock())
        log_event(
            "report_ready",
            self.session_id,
            mode=self.mode,
            score=report.overall_score,
            outcome=report.kind,
        )
        return report

    def finish_interview(self) -> InterviewReport:
        interview = self.require_interview()
        with self._lock:
            if self.report is not None:
                return self.report
            report = synthesize_interview_report(interview.transcript, ats_result=self.ats_result, rng=self.rng)
            return self.complete(report)

    def finish_coding(self) -> InterviewReport:
        coding = self.require_coding()
        with self._lock:
            if self.report is not None:
                return self.report
            return self.complete(synthesize_coding_report(coding.finish(), ats_result=self.ats_result))

    def end_early(self) -> InterviewReport:
        """Stop the session wherever it is and record the partial report."""

        with self._lock:
            if self.report is not None:
                return self.report
            if self.interview is not None:
                self.interview.end_early()
            if self.coding is not None:
                self.coding.close()
            return self.complete(early_exit_report(ats_result=self.ats_result))


def new_session(config: InterviewConfig, **kwargs: Any) -> SessionController:
    """Create and register a controller; keyword arguments go to :class:`SessionController`."""

    controller = SessionController(config, **kwargs)
    with _REGISTRY_LOCK:
        _SESSIONS[controller.session_id] = controller
    return controller


def load_session(session_id: str) -> SessionController:
    with _REGISTRY_LOCK:
        controller = _SESSIONS.get(session_id)
    if controller is None:
        raise SessionNotFoundError(session_id)
    return controller


def reset_sessions() -> None:
    with _REGISTRY_LOCK:
        _SESSIONS.clear()


__all__ = [
    "SessionController",
    "SessionMode",
    "SessionModeError",
    "SessionNotFoundError",
    "load_session",
    "new_session",
    "reset_sessions",
]
