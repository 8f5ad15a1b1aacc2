"""Pydantic schemas for the interview and coding session API."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from coding_round import CodingQuestion
from interview_session import Message
from interview_setup import InterviewConfig
from resume_analysis import ATSResult
from session_reports import InterviewReport


class StartReq(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    config: InterviewConfig
    ats_result: Optional[ATSResult] = Field(default=None, alias="atsResult")


class TurnReq(BaseModel):
    session_id: str
    text: str
    source: Literal["text", "speech"] = "text"


class SpeechReq(BaseModel):
    session_id: str
    chunk: Optional[str] = None
    final: bool = False


class TtsReq(BaseModel):
    session_id: str
    enabled: bool


class SessionReq(BaseModel):
    session_id: str


class SelectReq(BaseModel):
    session_id: str
    index: int


class CodeReq(BaseModel):
    session_id: str
    code: str


class HintsReq(BaseModel):
    session_id: str
    index: Optional[int] = None


class SessionResp(BaseModel):
    session_id: str
    mode: Literal["interview", "coding"]
    phase: Optional[str] = None
    messages: List[Message] = Field(default_factory=list)
    notice: Optional[str] = None
    completed: bool = False
    question_count: int = 0
    round_trips: int = 0
    tts_enabled: bool = True
    is_ai_typing: bool = False
    elapsed: str = "00:00"
    report_ready: bool = False
    event_log: List[Dict[str, Any]] = Field(default_factory=list)


class SpeechResp(BaseModel):
    session_id: str
    pending: str = ""
    turn: Optional[SessionResp] = None


class CodingResp(BaseModel):
    session_id: str
    source: str
    questions: List[CodingQuestion] = Field(default_factory=list)
    current_index: int = 0
    code: str = ""
    submitted: List[int] = Field(default_factory=list)
    show_hints: Dict[int, bool] = Field(default_factory=dict)
    score: int = 0
    elapsed: str = "00:00"
    message: Optional[str] = None


class ReportResp(BaseModel):
    session_id: str
    report: InterviewReport
    history_id: Optional[str] = None


class StartResp(BaseModel):  # Greeting for a chat interview or the problem set for a coding round
    session_id: str
    mode: Literal["interview", "coding"]
    interview: Optional[SessionResp] = None
    coding: Optional[CodingResp] = None
