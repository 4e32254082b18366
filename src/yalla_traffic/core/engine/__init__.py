"""Conversation state machine, cancellation and outcome assembly."""

from .state import EngineState, EngineResult
from .cancellation import CancellationToken
from .conversation import ConversationEngine, UserLocation
from .assembler import ConversationOutcome, ResponseAssembler, FALLBACK_MESSAGE

__all__ = [
    "EngineState",
    "EngineResult",
    "CancellationToken",
    "ConversationEngine",
    "UserLocation",
    "ConversationOutcome",
    "ResponseAssembler",
    "FALLBACK_MESSAGE",
]
