"""Turns a terminal engine result into the externally visible outcome."""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..logger import get_logger
from .state import EngineResult, EngineState

logger = get_logger(__name__)

FALLBACK_MESSAGE = "Oops! I had trouble processing that. Could you try rephrasing your question? 🤔"


class ConversationOutcome(BaseModel):
    """
    Result of a conversation as returned to the caller.

    Attributes:
        success: Whether the model produced a final answer.
        message: The final answer, or a friendly fallback when the session failed.
        tools_used: Tools invoked, in call order, duplicates kept.
        error: Caller-safe error code when the session failed.
        error_detail: Internal error message, only populated when detail exposure is enabled.
    """

    success: bool
    message: str
    tools_used: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_detail: Optional[str] = None


class ResponseAssembler:
    """Maps ``DONE`` / ``FAILED`` engine results to a :class:`ConversationOutcome`."""

    def __init__(self, fallback_message: str = FALLBACK_MESSAGE, expose_error_details: bool = False) -> None:
        self.fallback_message = fallback_message
        self.expose_error_details = expose_error_details

    def assemble(self, result: EngineResult) -> ConversationOutcome:
        if result.state is EngineState.DONE:
            return ConversationOutcome(success=True, message=result.text, tools_used=list(result.tools_used))

        if result.state is not EngineState.FAILED:
            raise ValueError(f"Cannot assemble an outcome from non-terminal state '{result.state.value}'.")

        error_code = result.error.code if result.error else "conversation_error"
        return ConversationOutcome(
            success=False,
            message=self.fallback_message,
            tools_used=list(result.tools_used),
            error=error_code,
            error_detail=str(result.error) if self.expose_error_details and result.error else None,
        )
