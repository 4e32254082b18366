"""States and terminal result of the conversation state machine."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..exceptions import ConversationError
from ..messages import ConversationContext


class EngineState(str, Enum):
    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOL = "executing_tool"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (EngineState.DONE, EngineState.FAILED)


@dataclass(frozen=True)
class EngineResult:
    """Terminal state of one conversation session.

    Attributes:
        state: Either ``DONE`` or ``FAILED``.
        text: Final model text; empty when the session failed.
        tools_used: Tool names in call order, duplicates kept.
        context: The full context at the time the session ended.
        error: The error that moved the session to ``FAILED``.
    """

    state: EngineState
    text: str = ""
    tools_used: Tuple[str, ...] = ()
    context: ConversationContext = ConversationContext()
    error: Optional[ConversationError] = None
