from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

import api.routes as routes
from config.settings import settings
from conftest import ScriptedAgent
from llm_gateway import LlmGatewayError
from storage.history import HistoryStore

CONFIG = {
    "name": "Asha Rao",
    "branch": "Computer Science",
    "role": "Backend Engineer",
    "experienceLevel": "2 years",
    "interestField": "Distributed systems",
    "interviewType": "technical",
    "interviewLevel": "intermediate",
    "resume": "",
}


def _client() -> TestClient:
    app = FastAPI()
    app.include_router(routes.router)
    app.include_router(routes.coding_router)
    return TestClient(app)


def _start(client: TestClient, **overrides):
    return client.post("/api/interview-sessions/start", json={"config": {**CONFIG, **overrides}})


def test_start_turn_report_cycle(monkeypatch):
    agent = ScriptedAgent(["Welcome! Please introduce yourself."])
    monkeypatch.setattr(routes, "_chat_agent", lambda: agent)
    monkeypatch.setattr(settings, "REPORT_DELAY_SECONDS", 0.0)
    client = _client()

    start = _start(client).json()
    assert start["mode"] == "interview"
    assert start["interview"]["messages"][0]["content"] == "Welcome! Please introduce yourself."
    session_id = start["session_id"]

    pending = client.get(f"/api/interview-sessions/{session_id}/report")
    assert pending.status_code == 202

    for index in range(6):
        turn = client.post(
            "/api/interview-sessions/turn",
            json={"session_id": session_id, "text": f"I built an api for project {index}"},
        ).json()
    assert turn["completed"] is True
    assert turn["round_trips"] == 6
    assert turn["phase"] == "generating_report"

    report = client.get(f"/api/interview-sessions/{session_id}/report")
    assert report.status_code == 200
    body = report.json()
    assert body["report"]["technicalScore"] == 94
    assert len(body["report"]["answers"]) == 6
    assert body["history_id"] == HistoryStore().read()[0].id

    again = client.get(f"/api/interview-sessions/{session_id}/report").json()
    assert again["report"] == body["report"]
    assert len(HistoryStore().read()) == 1


def test_turn_errors(monkeypatch):
    monkeypatch.setattr(routes, "_chat_agent", lambda: ScriptedAgent())
    client = _client()
    session_id = _start(client).json()["session_id"]

    assert client.post("/api/interview-sessions/turn", json={"session_id": "nope", "text": "hi"}).status_code == 404
    assert client.post("/api/interview-sessions/turn", json={"session_id": session_id, "text": "  "}).status_code == 400

    client.post("/api/interview-sessions/end", json={"session_id": session_id})
    closed = client.post("/api/interview-sessions/turn", json={"session_id": session_id, "text": "late"})
    assert closed.status_code == 400


def test_turn_failure_returns_notice(monkeypatch):
    agent = ScriptedAgent(["Hello", LlmGatewayError("down")])
    monkeypatch.setattr(routes, "_chat_agent", lambda: agent)
    client = _client()
    session_id = _start(client).json()["session_id"]

    body = client.post("/api/interview-sessions/turn", json={"session_id": session_id, "text": "answer"}).json()

    assert body["notice"] == "Failed to get AI response"
    assert body["phase"] == "idle"
    assert [m["role"] for m in body["messages"]] == ["candidate"]


def test_end_returns_partial_report(monkeypatch):
    monkeypatch.setattr(routes, "_chat_agent", lambda: ScriptedAgent())
    client = _client()
    session_id = _start(client).json()["session_id"]

    body = client.post("/api/interview-sessions/end", json={"session_id": session_id}).json()

    assert body["report"]["overallScore"] == 50
    assert body["report"]["kind"] == "partial"
    state = client.get(f"/api/interview-sessions/{session_id}").json()
    assert state["phase"] == "ended"


def test_speech_and_tts(monkeypatch):
    agent = ScriptedAgent(["Hello", "Interesting"])
    monkeypatch.setattr(routes, "_chat_agent", lambda: agent)
    client = _client()
    session_id = _start(client).json()["session_id"]

    muted = client.post("/api/interview-sessions/tts", json={"session_id": session_id, "enabled": False}).json()
    assert muted["tts_enabled"] is False

    partial = client.post("/api/interview-sessions/speech", json={"session_id": session_id, "chunk": "I led"}).json()
    assert partial["pending"] == "I led"
    final = client.post(
        "/api/interview-sessions/speech",
        json={"session_id": session_id, "chunk": "the migration", "final": True},
    ).json()
    assert final["turn"]["messages"][0]["content"] == "I led the migration"
    assert final["turn"]["messages"][1]["speak"] is False


def test_report_pdf_download(monkeypatch):
    monkeypatch.setattr(routes, "_chat_agent", lambda: ScriptedAgent())
    client = _client()
    session_id = _start(client).json()["session_id"]
    assert client.get(f"/api/interview-sessions/{session_id}/report.pdf").status_code == 404

    client.post("/api/interview-sessions/end", json={"session_id": session_id})
    pdf = client.get(f"/api/interview-sessions/{session_id}/report.pdf")

    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")


def test_coding_session_flow(monkeypatch):
    def failing_source():
        def fetch(_config):
            raise LlmGatewayError("down")

        return fetch

    monkeypatch.setattr(routes, "_question_source", failing_source)
    client = _client()

    start = _start(client, interviewType="coding").json()
    assert start["mode"] == "coding"
    coding = start["coding"]
    assert coding["source"] == "default"
    assert [q["title"] for q in coding["questions"]] == ["Two Sum", "Valid Parentheses", "Reverse Linked List"]
    assert coding["code"] == coding["questions"][0]["starterCode"]
    session_id = start["session_id"]

    edited = client.post("/api/coding-sessions/code", json={"session_id": session_id, "code": "return [];"}).json()
    assert edited["code"] == "return [];"
    submitted = client.post("/api/coding-sessions/submit", json={"session_id": session_id}).json()
    assert submitted["message"] == "Submitted: Two Sum"
    assert submitted["current_index"] == 1
    client.post("/api/coding-sessions/submit", json={"session_id": session_id})

    assert client.post("/api/coding-sessions/select", json={"session_id": session_id, "index": 9}).status_code == 400
    hints = client.post("/api/coding-sessions/hints", json={"session_id": session_id}).json()
    assert hints["show_hints"] == {"3": True}

    report = client.post("/api/coding-sessions/finish", json={"session_id": session_id}).json()
    assert report["report"]["overallScore"] == 67
    assert report["report"]["answers"][0] == {"question": "Two Sum", "answer": "return [];"}

    wrong_mode = client.post("/api/interview-sessions/turn", json={"session_id": session_id, "text": "hi"})
    assert wrong_mode.status_code == 400


def test_run_reports_success(monkeypatch):
    monkeypatch.setattr(routes, "_question_source", lambda: (lambda _config: []))
    monkeypatch.setattr(settings, "RUN_DELAY_SECONDS", 0.0)
    client = _client()
    session_id = _start(client, interviewType="coding").json()["session_id"]

    body = client.post("/api/coding-sessions/run", json={"session_id": session_id}).json()

    assert body["message"] == "Code executed successfully!"
    assert body["submitted"] == []
