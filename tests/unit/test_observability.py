from __future__ import annotations

from types import SimpleNamespace

import pytest

from observability import span
from observability.logger import _format_human


def test_human_line_lists_known_fields_in_order():
    line = _format_human({"session_id": "s1", "kind": "interviewer_turn", "outcome": "ok", "mode": "interview", "x": 1})
    assert line == "session=s1 kind=interviewer_turn mode=interview outcome=ok"


def test_span_records_success_and_failure():
    state = SimpleNamespace(events=[])
    with span(state, "interview_chat", history=2):
        pass
    with pytest.raises(RuntimeError):
        with span(state, "interview_chat"):
            raise RuntimeError("boom")

    assert [event["outcome"] for event in state.events] == ["ok", "error"]
    assert state.events[0]["history"] == 2
    assert state.events[0]["ms"] >= 0
