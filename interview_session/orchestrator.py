from __future__ import annotations  # Turn-taking state machine for chat interviews

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from config.settings import settings
from interview_setup import InterviewConfig
from llm_gateway import LlmGatewayError
from observability import log_event, span

from .chat_agent import ChatAgent, notice_for
from .transcript import Message, Role

logger = logging.getLogger(__name__)

Phase = Literal["awaiting_greeting", "idle", "awaiting_reply", "generating_report", "ended"]
InputSource = Literal["text", "speech"]

TERMINAL_PHASES = ("generating_report", "ended")


class SessionBusyError(RuntimeError):  # A reply is already being awaited
    pass


class SessionClosedError(RuntimeError):  # The session no longer accepts answers
    pass


class EmptyAnswerError(ValueError):  # Blank candidate submission
    pass


@dataclass
class RequestToken:  # Handle for one in-flight interviewer request
    id: str = field(default_factory=lambda: uuid4().hex)
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class TurnOutcome(BaseModel):  # What one send produced
    messages: List[Message] = Field(default_factory=list)
    notice: Optional[str] = None
    completed: bool = False
    discarded: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_elapsed(seconds: int) -> str:
    """Render seconds as ``MM:SS``."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


class InterviewSession:
    """Chat interview for one candidate.

    ``awaiting_greeting -> idle <-> awaiting_reply -> generating_report``; ``end_early``
    moves any phase to ``ended``. Only one interviewer request may be in flight; a
    second send while it is pending raises :class:`SessionBusyError` instead of
    queueing. Replies whose token was cancelled are dropped.
    """

    def __init__(
        self,
        session_id: str,
        config: InterviewConfig,
        agent: ChatAgent,
        *,
        max_round_trips: Optional[int] = None,
        completion_phrase: Optional[str] = None,
        report_delay_s: Optional[float] = None,
        tts_enabled: Optional[bool] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.session_id = session_id
        self.config = config
        self._agent = agent
        self._clock = clock
        self._lock = threading.RLock()
        self._inflight: Optional[RequestToken] = None

        self.max_round_trips = max_round_trips if max_round_trips is not None else settings.MAX_ROUND_TRIPS
        self.completion_phrase = (completion_phrase or settings.COMPLETION_PHRASE).lower()
        self.report_delay = timedelta(
            seconds=report_delay_s if report_delay_s is not None else settings.REPORT_DELAY_SECONDS
        )
        self.tts_enabled = settings.TTS_DEFAULT if tts_enabled is None else tts_enabled

        self.phase: Phase = "awaiting_greeting"
        self.transcript: List[Message] = []
        self.question_count = 0
        self.round_trips = 0
        self.speech_buffer = ""
        self.started_at = clock()
        self.completed_at: Optional[datetime] = None
        self.report_due_at: Optional[datetime] = None
        self.events: List[Dict[str, Any]] = []

    @property
    def is_ai_typing(self) -> bool:
        return self._inflight is not None

    def start(self) -> TurnOutcome:
        """Request the opening greeting with an empty history."""

        with self._lock:
            if self.phase != "awaiting_greeting" or self._inflight is not None:
                raise SessionBusyError("Greeting already requested")
            token = self._begin_request()
        log_event("session_greeting", self.session_id, mode="interview", phase=self.phase)
        return self._await_reply(token, [], counts_round_trip=False)

    def submit(self, text: str, *, source: InputSource = "text") -> TurnOutcome:
        """Append a candidate answer and forward the full transcript to the interviewer."""

        answer = (text or "").strip()
        if not answer:
            raise EmptyAnswerError("Answer text is required")
        with self._lock:
            if self.phase in TERMINAL_PHASES:
                raise SessionClosedError("Interview has already finished")
            if self._inflight is not None:
                raise SessionBusyError("AI is typing")
            candidate = self._append("candidate", answer)
            history = list(self.transcript)
            token = self._begin_request()
        log_event("candidate_turn", self.session_id, mode="interview", source=source, round_trips=self.round_trips)
        outcome = self._await_reply(token, history, counts_round_trip=True)
        return outcome.model_copy(update={"messages": [candidate, *outcome.messages]})

    def append_speech(self, chunk: str) -> str:
        """Accumulate a partial speech transcript and return the pending text."""

        with self._lock:
            if self.phase in TERMINAL_PHASES:
                raise SessionClosedError("Interview has already finished")
            self.speech_buffer = f"{self.speech_buffer} {chunk or ''}"
            return self.speech_buffer.strip()

    def finish_speech(self) -> Optional[TurnOutcome]:
        """Send whatever speech was collected; ``None`` when nothing was heard."""

        with self._lock:
            pending = self.speech_buffer.strip()
            self.speech_buffer = ""
        if not pending:
            return None
        return self.submit(pending, source="speech")

    def set_tts(self, enabled: bool) -> None:
        with self._lock:
            self.tts_enabled = enabled

    def end_early(self) -> None:
        """Stop the interview from any phase; a pending reply will be discarded."""

        with self._lock:
            if self._inflight is not None:
                self._inflight.cancel()
                self._inflight = None
            previous = self.phase
            self.phase = "ended"
            self.speech_buffer = ""
        log_event("session_ended_early", self.session_id, mode="interview", phase=previous)

    def is_report_due(self, now: Optional[datetime] = None) -> bool:
        if self.phase != "generating_report" or self.report_due_at is None:
            return False
        current = now or self._clock()
        return current >= self.report_due_at

    def seconds_until_report(self, now: Optional[datetime] = None) -> Optional[float]:
        if self.report_due_at is None:
            return None
        current = now or self._clock()
        return max(0.0, (self.report_due_at - current).total_seconds())

    def elapsed_seconds(self, now: Optional[datetime] = None) -> int:
        current = now or self._clock()
        return max(0, int((current - self.started_at).total_seconds()))

    def _begin_request(self) -> RequestToken:
        token = RequestToken()
        self._inflight = token
        if self.phase == "idle":
            self.phase = "awaiting_reply"
        return token

    def _append(self, role: Role, content: str, *, speak: bool = False) -> Message:
        message = Message(role=role, content=content, timestamp=self._clock(), speak=speak)
        self.transcript.append(message)
        return message

    def _await_reply(self, token: RequestToken, history: List[Message], *, counts_round_trip: bool) -> TurnOutcome:
        try:
            with span(self, "interview_chat", history=len(history)):
                text = self._agent.reply(history, self.config)
        except LlmGatewayError as exc:
            logger.error("AI chat error session=%s: %s", self.session_id, exc)
            with self._lock:
                if token.cancelled:
                    return TurnOutcome(discarded=True)
                self._inflight = None
                self.phase = "idle"
            log_event("interviewer_turn", self.session_id, mode="interview", outcome="error")
            return TurnOutcome(notice=notice_for(exc))

        with self._lock:
            if token.cancelled:
                logger.info("Discarding reply that arrived after cancellation session=%s", self.session_id)
                return TurnOutcome(discarded=True)
            self._inflight = None
            reply = self._append("interviewer", text, speak=self.tts_enabled and bool(text))
            self.question_count += 1
            if counts_round_trip:
                self.round_trips += 1
            completed = self._should_complete(text)
            if completed:
                now = self._clock()
                self.phase = "generating_report"
                self.completed_at = now
                self.report_due_at = now + self.report_delay
            else:
                self.phase = "idle"
        log_event(
            "interviewer_turn",
            self.session_id,
            mode="interview",
            phase=self.phase,
            round_trips=self.round_trips,
            outcome="completed" if completed else "ok",
        )
        return TurnOutcome(messages=[reply], completed=completed)

    def _should_complete(self, text: str) -> bool:
        if self.completion_phrase in text.lower():
            return True
        return self.round_trips >= self.max_round_trips


__all__ = [
    "EmptyAnswerError",
    "InputSource",
    "InterviewSession",
    "Phase",
    "RequestToken",
    "SessionBusyError",
    "SessionClosedError",
    "TurnOutcome",
    "format_elapsed",
]
