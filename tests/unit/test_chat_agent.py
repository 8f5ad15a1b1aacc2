from __future__ import annotations

from datetime import datetime, timezone

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from config import LlmRoute
from conftest import FakeHttpClient, FakeResponse, completion
from interview_session import InterviewChatAgent, Message, notice_for, to_chat_messages
from interview_session.chat_agent import (
    CREDITS_NOTICE,
    EMPTY_REPLY,
    GENERIC_NOTICE,
    OPENING_PROMPT,
    RATE_LIMIT_NOTICE,
)
from llm_gateway import LlmGatewayError, PaymentRequiredError, RateLimitedError

TS = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _route() -> LlmRoute:
    return LlmRoute(
        name="test",
        base_url="http://example.com",
        endpoint="/v1/chat/completions",
        model="test-model",
        timeout_s=1.0,
    )


def test_transcript_maps_roles():
    transcript = [
        Message(role="interviewer", content="Hi", timestamp=TS),
        Message(role="candidate", content="Hello", timestamp=TS),
    ]
    converted = to_chat_messages(transcript)
    assert isinstance(converted[0], AIMessage)
    assert isinstance(converted[1], HumanMessage)
    assert [m.content for m in converted] == ["Hi", "Hello"]


def test_opening_request_adds_start_prompt(config):
    agent = InterviewChatAgent(_route())
    messages = agent.build_messages([], config)

    assert isinstance(messages[0], SystemMessage)
    system = messages[0].content
    assert "technical interview for the Backend Engineer position" in system
    assert "- Name: Asha Rao" in system
    assert "- Resume Summary: Built REST APIs" in system
    assert isinstance(messages[-1], HumanMessage)
    assert messages[-1].content == OPENING_PROMPT


def test_resume_line_omitted_without_resume(config):
    agent = InterviewChatAgent(_route())
    messages = agent.build_messages([], config.model_copy(update={"resume": ""}))
    assert "Resume Summary" not in messages[0].content


def test_reply_posts_role_mapped_history(config):
    client = FakeHttpClient(completion("  What did you build next?  "))
    agent = InterviewChatAgent(_route(), client=client)
    transcript = [
        Message(role="interviewer", content="Hi", timestamp=TS),
        Message(role="candidate", content="I build APIs", timestamp=TS),
    ]

    reply = agent.reply(transcript, config)

    assert reply == "What did you build next?"
    sent = client.requests[0]["json"]["messages"]
    assert [m["role"] for m in sent] == ["system", "assistant", "user"]
    assert client.requests[0]["url"] == "http://example.com/v1/chat/completions"


def test_empty_reply_falls_back(config):
    client = FakeHttpClient(FakeResponse(200, {"choices": [{"message": {"content": None}}]}))
    agent = InterviewChatAgent(_route(), client=client)
    assert agent.reply([], config) == EMPTY_REPLY


def test_notice_for_errors():
    assert notice_for(RateLimitedError("x")) == RATE_LIMIT_NOTICE
    assert notice_for(PaymentRequiredError("x")) == CREDITS_NOTICE
    assert notice_for(LlmGatewayError("x")) == GENERIC_NOTICE
