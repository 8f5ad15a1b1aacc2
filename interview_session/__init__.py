from __future__ import annotations  # Re-export interview_session public API

from .chat_agent import (
    CHAT_AGENT_KEY,
    ChatAgent,
    InterviewChatAgent,
    chat_agent_with_config,
    notice_for,
)
from .orchestrator import (
    EmptyAnswerError,
    InterviewSession,
    Phase,
    RequestToken,
    SessionBusyError,
    SessionClosedError,
    TurnOutcome,
    format_elapsed,
)
from .transcript import Message, Role, to_chat_messages

__all__ = [
    "CHAT_AGENT_KEY",
    "ChatAgent",
    "EmptyAnswerError",
    "InterviewChatAgent",
    "InterviewSession",
    "Message",
    "Phase",
    "RequestToken",
    "Role",
    "SessionBusyError",
    "SessionClosedError",
    "TurnOutcome",
    "chat_agent_with_config",
    "format_elapsed",
    "notice_for",
    "to_chat_messages",
]
