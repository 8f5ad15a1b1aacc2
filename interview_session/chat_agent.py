from __future__ import annotations  # Interviewer persona backed by a chat-completions route

import logging
from pathlib import Path
from textwrap import dedent
from typing import List, Optional, Protocol, Sequence

from langchain_core.messages import BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate

from config import LlmRoute, load_route
from config.settings import settings
from interview_setup import InterviewConfig
from llm_gateway import HttpClient, LlmGatewayError, PaymentRequiredError, RateLimitedError, complete

from .transcript import Message, to_chat_messages

logger = logging.getLogger(__name__)

CHAT_AGENT_KEY = "interview_session.chat_agent"  # Registry key for the interviewer route

OPENING_PROMPT = "Please start the interview now."
EMPTY_REPLY = "I apologize, I couldn't generate a response. Please try again."

RATE_LIMIT_NOTICE = "Rate limit exceeded. Please try again in a moment."
CREDITS_NOTICE = "AI credits exhausted. Please add credits to continue."
GENERIC_NOTICE = "Failed to get AI response"


class ChatAgent(Protocol):  # Anything that can produce the next interviewer line
    def reply(self, transcript: Sequence[Message], config: InterviewConfig) -> str: ...


SYSTEM_TEMPLATE = dedent(
    """
    You are an AI Interviewer conducting a professional {interview_type} interview for the {role} position.

    Candidate Information:
    - Name: {name}
    - Branch/Degree: {branch}
    - Experience Level: {experience_level}
    - Field of Interest: {interest_field}
    - Interview Level: {interview_level}
    {resume_line}

    INTERVIEW GUIDELINES:
    1. Behave like a real professional interviewer
    2. Ask ONE question at a time and wait for response
    3. Base follow-up questions on candidate's answers and resume
    4. For Technical interviews: Ask role-specific technical questions, problem-solving scenarios
    5. For HR interviews: Ask behavioral questions, strengths/weaknesses, career goals
    6. For Coding interviews: Present logical problems and evaluate approach
    7. Maintain professional tone - no emojis, no casual language
    8. Evaluate: clarity, confidence, technical understanding, communication
    9. After 5-6 questions, wrap up with "Thank you for your time. The interview is now complete."
    10. Keep responses concise and focused (2-3 sentences max per response)

    Start by greeting the candidate and asking them to introduce themselves.
    """
).strip()


class InterviewChatAgent:  # Sends the transcript to the interviewer route and returns its reply
    def __init__(self, route: LlmRoute, client: Optional[HttpClient] = None) -> None:
        self._route = route
        self._client = client
        self._prompt = ChatPromptTemplate.from_messages([("system", SYSTEM_TEMPLATE)])

    def build_messages(self, transcript: Sequence[Message], config: InterviewConfig) -> List[BaseMessage]:
        resume = config.resume.strip()
        resume_line = (
            f"- Resume Summary: {resume[: settings.RESUME_PROMPT_CHARS]}" if resume else ""
        )
        system = self._prompt.format_messages(
            interview_type=config.interview_type,
            role=config.role,
            name=config.name,
            branch=config.branch,
            experience_level=config.experience_level,
            interest_field=config.interest_field,
            interview_level=config.interview_level,
            resume_line=resume_line,
        )
        history = to_chat_messages(transcript) or [HumanMessage(content=OPENING_PROMPT)]
        return [*system, *history]

    def reply(self, transcript: Sequence[Message], config: InterviewConfig) -> str:
        logger.info("Interview chat turn for %s type=%s history=%d", config.name, config.interview_type, len(transcript))
        content = complete(self.build_messages(transcript, config), cfg=self._route, client=self._client)
        return content.strip() or EMPTY_REPLY


def chat_agent_with_config(config_path: Path, client: Optional[HttpClient] = None) -> InterviewChatAgent:
    """Build the interviewer agent from the route registered in app config."""

    return InterviewChatAgent(load_route(config_path, CHAT_AGENT_KEY), client=client)


def notice_for(exc: LlmGatewayError) -> str:
    """User-facing notice for a failed interviewer turn."""

    if isinstance(exc, RateLimitedError):
        return RATE_LIMIT_NOTICE
    if isinstance(exc, PaymentRequiredError):
        return CREDITS_NOTICE
    return GENERIC_NOTICE
