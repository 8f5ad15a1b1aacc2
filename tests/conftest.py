import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.migrate import migrate
from config.settings import settings
from interview_setup import InterviewConfig
from services.sessions import reset_sessions


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    reset_sessions()
    try:
        yield db_path
    finally:
        reset_sessions()
        td.cleanup()


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class ScriptedAgent:
    """Interviewer that replays canned lines and records what it was sent."""

    def __init__(self, replies=None, default: str = "Tell me more about that.") -> None:
        self.replies = list(replies or [])
        self.default = default
        self.calls = []

    def reply(self, transcript, config):
        self.calls.append(list(transcript))
        if self.replies:
            item = self.replies.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return self.default


class FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeHttpClient:
    """Records posts and answers with queued responses."""

    def __init__(self, *responses: FakeResponse) -> None:
        self.responses = list(responses)
        self.requests = []

    def post(self, url, *, json, headers, timeout):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return self.responses.pop(0)


def completion(content: str) -> FakeResponse:
    return FakeResponse(200, {"choices": [{"message": {"role": "assistant", "content": content}}]})


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def config():
    return InterviewConfig(
        name="Asha Rao",
        branch="Computer Science",
        role="Backend Engineer",
        experience_level="2 years",
        interest_field="Distributed systems",
        interview_type="technical",
        interview_level="intermediate",
        resume="Built REST APIs in Python and designed a Postgres-backed billing system.",
    )


@pytest.fixture
def coding_config(config):
    return config.model_copy(update={"interview_type": "coding"})
