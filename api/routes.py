"""FastAPI routes for interview and coding session control."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response
from fastapi.responses import JSONResponse

from api.schemas import (
    CodeReq,
    CodingResp,
    HintsReq,
    ReportResp,
    SelectReq,
    SessionReq,
    SessionResp,
    SpeechReq,
    SpeechResp,
    StartReq,
    StartResp,
    TtsReq,
    TurnReq,
)
from coding_round import CodingQuestion, QuestionSource, generate_with_config
from config.settings import settings
from interview_session import (
    ChatAgent,
    EmptyAnswerError,
    Message,
    SessionBusyError,
    SessionClosedError,
    TurnOutcome,
    chat_agent_with_config,
    format_elapsed,
)
from interview_setup import InterviewConfig
from services.report_timer import maybe_generate_report
from services.sessions import (
    SessionController,
    SessionModeError,
    SessionNotFoundError,
    load_session,
    new_session,
)
from session_reports import generate_report_pdf


ROOT = Path(__file__).resolve().parent.parent

router = APIRouter(prefix="/api/interview-sessions")
coding_router = APIRouter(prefix="/api/coding-sessions")


def _config_path() -> Path:
    return ROOT / settings.CONFIG_PATH


def _chat_agent() -> ChatAgent:
    return chat_agent_with_config(_config_path())


def _question_source() -> QuestionSource:
    path = _config_path()

    def fetch(config: InterviewConfig) -> List[CodingQuestion]:
        return generate_with_config(config, config_path=path)

    return fetch


def _controller(session_id: str) -> SessionController:
    try:
        return load_session(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="session not found") from exc


def _session_resp(
    controller: SessionController,
    *,
    messages: Optional[List[Message]] = None,
    notice: Optional[str] = None,
    completed: bool = False,
) -> SessionResp:
    interview = controller.require_interview()
    return SessionResp(
        session_id=controller.session_id,
        mode=controller.mode,
        phase=interview.phase,
        messages=list(interview.transcript) if messages is None else messages,
        notice=notice,
        completed=completed,
        question_count=interview.question_count,
        round_trips=interview.round_trips,
        tts_enabled=interview.tts_enabled,
        is_ai_typing=interview.is_ai_typing,
        elapsed=format_elapsed(interview.elapsed_seconds()),
        report_ready=controller.report is not None or interview.is_report_due(),
        event_log=list(interview.events),
    )


def _turn_resp(controller: SessionController, outcome: TurnOutcome) -> SessionResp:
    return _session_resp(
        controller,
        messages=outcome.messages,
        notice=outcome.notice,
        completed=outcome.completed,
    )


def _coding_resp(controller: SessionController, message: Optional[str] = None) -> CodingResp:
    coding = controller.require_coding()
    return CodingResp(
        session_id=controller.session_id,
        source=coding.source,
        questions=list(coding.questions),
        current_index=coding.current_index,
        code=coding.drafts.get(coding.current_question.id, ""),
        submitted=list(coding.submitted),
        show_hints=dict(coding.show_hints),
        score=coding.score(),
        elapsed=format_elapsed(coding.elapsed_seconds()),
        message=message,
    )


def _report_resp(controller: SessionController) -> ReportResp:
    entry = controller.history_entry
    return ReportResp(
        session_id=controller.session_id,
        report=controller.report,
        history_id=entry.id if entry else None,
    )


def _interview_of(controller: SessionController):
    try:
        return controller.require_interview()
    except SessionModeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _coding_of(controller: SessionController):
    try:
        return controller.require_coding()
    except SessionModeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _send(controller: SessionController, text: str, source: str) -> SessionResp:
    interview = _interview_of(controller)
    try:
        outcome = interview.submit(text, source=source)
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except (EmptyAnswerError, SessionClosedError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _turn_resp(controller, outcome)


@router.post("/start", response_model=StartResp)
def start(req: StartReq) -> StartResp:
    if req.config.is_coding:
        controller = new_session(req.config, ats_result=req.ats_result, question_source=_question_source())
        controller.start()
        return StartResp(session_id=controller.session_id, mode="coding", coding=_coding_resp(controller))
    controller = new_session(req.config, ats_result=req.ats_result, agent=_chat_agent())
    try:
        outcome = controller.start()
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return StartResp(
        session_id=controller.session_id,
        mode="interview",
        interview=_turn_resp(controller, outcome),
    )


@router.post("/turn", response_model=SessionResp)
def turn(req: TurnReq) -> SessionResp:
    controller = _controller(req.session_id)
    return _send(controller, req.text, req.source)


@router.post("/speech", response_model=SpeechResp)
def speech(req: SpeechReq) -> SpeechResp:
    controller = _controller(req.session_id)
    interview = _interview_of(controller)
    try:
        pending = interview.append_speech(req.chunk) if req.chunk else interview.speech_buffer.strip()
    except SessionClosedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if not req.final:
        return SpeechResp(session_id=controller.session_id, pending=pending)
    try:
        outcome = interview.finish_speech()
    except SessionBusyError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except SessionClosedError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if outcome is None:
        return SpeechResp(session_id=controller.session_id)
    return SpeechResp(session_id=controller.session_id, turn=_turn_resp(controller, outcome))


@router.post("/tts", response_model=SessionResp)
def tts(req: TtsReq) -> SessionResp:
    controller = _controller(req.session_id)
    _interview_of(controller).set_tts(req.enabled)
    return _session_resp(controller, messages=[])


@router.post("/end", response_model=ReportResp)
def end(req: SessionReq) -> ReportResp:
    controller = _controller(req.session_id)
    controller.end_early()
    return _report_resp(controller)


@router.get("/{session_id}", response_model=SessionResp)
def get_session(session_id: str) -> SessionResp:
    controller = _controller(session_id)
    _interview_of(controller)
    return _session_resp(controller)


@router.get("/{session_id}/report", response_model=ReportResp)
def get_report(session_id: str):
    controller = _controller(session_id)
    report = maybe_generate_report(controller)
    if report is None:
        seconds = controller.interview.seconds_until_report() if controller.interview else None
        return JSONResponse(
            status_code=202,
            content={"session_id": session_id, "status": "pending", "retry_after": seconds},
        )
    return _report_resp(controller)


@router.get("/{session_id}/report.pdf")
def get_report_pdf(session_id: str) -> Response:
    controller = _controller(session_id)
    report = maybe_generate_report(controller)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    pdf_bytes = generate_report_pdf(report, controller.config)
    filename = f"interview-report-{controller.session_id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@coding_router.post("/select", response_model=CodingResp)
def select(req: SelectReq) -> CodingResp:
    controller = _controller(req.session_id)
    try:
        _coding_of(controller).select(req.index)
    except IndexError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _coding_resp(controller)


@coding_router.post("/code", response_model=CodingResp)
def update_code(req: CodeReq) -> CodingResp:
    controller = _controller(req.session_id)
    try:
        _coding_of(controller).update_code(req.code)
    except RuntimeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _coding_resp(controller)


@coding_router.post("/run", response_model=CodingResp)
def run(req: SessionReq) -> CodingResp:
    controller = _controller(req.session_id)
    outcome = _coding_of(controller).run()
    return _coding_resp(controller, message=outcome.message)


@coding_router.post("/submit", response_model=CodingResp)
def submit(req: SessionReq) -> CodingResp:
    controller = _controller(req.session_id)
    try:
        question = _coding_of(controller).submit()
    except RuntimeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _coding_resp(controller, message=f"Submitted: {question.title}")


@coding_router.post("/hints", response_model=CodingResp)
def hints(req: HintsReq) -> CodingResp:
    controller = _controller(req.session_id)
    try:
        _coding_of(controller).toggle_hints(req.index)
    except IndexError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _coding_resp(controller)


@coding_router.post("/finish", response_model=ReportResp)
def finish(req: SessionReq) -> ReportResp:
    controller = _controller(req.session_id)
    _coding_of(controller)
    controller.finish_coding()
    return _report_resp(controller)
