"""Provider-agnostic message models for the conversation context."""

import json
from abc import ABC
from typing import Optional, List, Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class BaseMessage(ABC, BaseModel):
    """Base model for turns exchanged with an LLM.

    Attributes:
        author: Role associated with the message.
        content: Text payload of the message.
    """

    model_config = ConfigDict(frozen=True)

    author: str
    content: str


class SystemMessage(BaseMessage):
    """Message authored by the system to steer behavior."""

    author: str = "system"


class UserMessage(BaseMessage):
    """Message authored by an end user."""

    author: str = "user"


class AssistantMessage(BaseMessage):
    """Message authored by the assistant, optionally containing tool calls."""

    author: str = "assistant"
    content: str = ""
    tool_calls: Optional[List[Any]] = None


class ToolMessage(BaseMessage):
    """Message carrying the result of a tool invocation back to the model.

    ``response`` is the structured payload; ``content`` is its JSON rendering.
    """

    author: str = "tool"
    name: str
    response: Dict[str, Any] = Field(default_factory=dict)
    tool_call_id: Optional[str] = None

    @classmethod
    def from_response(cls, name: str, response: Dict[str, Any], tool_call_id: Optional[str] = None) -> "ToolMessage":
        return cls(
            name=name,
            response=response,
            tool_call_id=tool_call_id,
            content=json.dumps(response, default=str),
        )
