from __future__ import annotations  # Append-only interview transcript types

from datetime import datetime
from typing import List, Literal, Sequence
from uuid import uuid4

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from pydantic import BaseModel, ConfigDict, Field

Role = Literal["interviewer", "candidate"]


class Message(BaseModel):  # One transcript entry
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    role: Role
    content: str
    timestamp: datetime
    speak: bool = False


def to_chat_messages(transcript: Sequence[Message]) -> List[BaseMessage]:
    """Map interviewer turns to assistant messages and candidate turns to user messages."""

    messages: List[BaseMessage] = []
    for message in transcript:
        if message.role == "interviewer":
            messages.append(AIMessage(content=message.content))
        else:
            messages.append(HumanMessage(content=message.content))
    return messages


__all__ = ["Message", "Role", "to_chat_messages"]
