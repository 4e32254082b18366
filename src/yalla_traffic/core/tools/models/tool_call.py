"""Data models for tool execution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ToolCallRequest:
    """Represents a normalized tool call request from an LLM response."""

    name: str
    arguments: Any
    call_id: Optional[str] = None


@dataclass(frozen=True)
class ToolCallResult:
    """Represents the outcome of executing a tool call.

    A result is either a success payload or a failure descriptor. Failures are
    ordinary tool output: the payload sent back to the model is ``{"error": ...}``.
    """

    name: str
    response: Dict[str, Any]
    call_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, name: str, payload: Dict[str, Any], call_id: Optional[str] = None) -> "ToolCallResult":
        return cls(name=name, response=payload, call_id=call_id)

    @classmethod
    def failure(cls, name: str, message: str, call_id: Optional[str] = None) -> "ToolCallResult":
        return cls(name=name, response={"error": message}, call_id=call_id, error=message)
